"""Base model client contract."""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass
class LlmResponse:
    """Raw response from a model API."""

    text: str
    model: str
    tokens: int = 0
    cost_usd: float = 0.0
    truncated: bool = False  # hit max_tokens before finishing


class BaseLlmClient(ABC):
    """One prompt in, one text completion out.

    Implementations make a single network call per ``complete()`` and do not
    retry; retries belong to the job layer.
    """

    provider: str = ""

    def __init__(self, api_key: str, model: str):
        self.api_key = api_key
        self.model = model

    @abstractmethod
    async def complete(self, prompt: str) -> LlmResponse:
        """Send *prompt* and return the completion. Raises on transport or API errors."""
