"""Google Gemini client (OpenAI-compatible API)."""

import logging

import httpx

from salon_audit.audit.exceptions import AiResponseError, ConfigurationError
from salon_audit.core.config import settings
from salon_audit.llm.base import BaseLlmClient, LlmResponse

logger = logging.getLogger(__name__)

# Pricing per 1M tokens
MODEL_PRICING = {
    "gemini-2.5-pro": {"input": 1.25, "output": 10.00},
    "gemini-2.5-flash": {"input": 0.30, "output": 2.50},
    "gemini-2.5-flash-lite": {"input": 0.02, "output": 0.10},
    "gemini-2.0-flash": {"input": 0.10, "output": 0.40},
}

DEFAULT_MODEL = "gemini-2.0-flash"


class GeminiClient(BaseLlmClient):
    """Plain-text completions from Gemini via the OpenAI-compatible endpoint."""

    provider = "gemini"

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_MODEL,
        *,
        api_url: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
        timeout: float | None = None,
    ):
        super().__init__(api_key=api_key, model=model)
        self.api_url = api_url or settings.gemini_api_url
        self.temperature = settings.gemini_temperature if temperature is None else temperature
        self.max_tokens = max_tokens or settings.gemini_max_tokens
        self.timeout = timeout or settings.gemini_timeout

    @classmethod
    def from_settings(cls) -> "GeminiClient":
        if not settings.gemini_api_key:
            raise ConfigurationError("GEMINI_API_KEY not configured")
        return cls(api_key=settings.gemini_api_key, model=settings.gemini_model)

    async def complete(self, prompt: str) -> LlmResponse:
        """Send a prompt to Gemini and return the text answer."""
        payload = {
            "model": self.model,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
        }

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            resp = await client.post(
                self.api_url,
                json=payload,
                headers={
                    "Authorization": f"Bearer {self.api_key}",
                    "Content-Type": "application/json",
                },
            )
            if resp.status_code >= 400:
                logger.error(
                    "Gemini API %d for model=%s: %s",
                    resp.status_code,
                    self.model,
                    resp.text[:500],
                )
            resp.raise_for_status()
            data = resp.json()

        choices = data.get("choices") or []
        choice = choices[0] if choices else {}
        text = (choice.get("message") or {}).get("content")
        if not text or not text.strip():
            raise AiResponseError("Brak odpowiedzi od AI")

        usage = data.get("usage", {})
        input_tokens = usage.get("prompt_tokens", 0)
        output_tokens = usage.get("completion_tokens", 0)

        return LlmResponse(
            text=text,
            model=data.get("model", self.model),
            tokens=input_tokens + output_tokens,
            cost_usd=self._calculate_cost(input_tokens, output_tokens),
            truncated=choice.get("finish_reason") == "length",
        )

    def _calculate_cost(self, input_tokens: int, output_tokens: int) -> float:
        """Calculate cost in USD based on model pricing."""
        pricing = MODEL_PRICING.get(self.model, MODEL_PRICING[DEFAULT_MODEL])
        cost = (input_tokens * pricing["input"] + output_tokens * pricing["output"]) / 1_000_000
        return round(cost, 6)
