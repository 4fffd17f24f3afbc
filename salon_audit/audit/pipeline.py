"""Audit Pipeline — drives one listing from raw text to a persisted-ready outcome.

Chains the steps in order:
  1. Text Parser (HTML fallback when the text parse is too thin)
  2. Listing Validator (hard stop)
  3. Statistics Engine (plus completeness/UX scores and keywords)
  4. Audit Report Orchestrator (three model calls)
  5. Report Sanitizer

Input:  raw pricelist text, optionally the page HTML
Output: AuditOutcome (document, statistics, scores, keywords, sanitized report)
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from enum import Enum

import httpx

from salon_audit.audit.exceptions import (
    AiResponseError,
    ConfigurationError,
    DocumentValidationError,
    ReportPayloadError,
)
from salon_audit.audit.orchestrator import AuditReportOrchestrator
from salon_audit.audit.sanitizer import sanitize_report_data
from salon_audit.audit.statistics import build_keyword_report, calculate_statistics, score_dimensions
from salon_audit.audit.text_parser import parse_listing
from salon_audit.audit.types import AuditOutcome, ScrapedDocument
from salon_audit.audit.validator import validate_document
from salon_audit.core.metrics import VALIDATION_FAILURES
from salon_audit.llm.base import BaseLlmClient

logger = logging.getLogger(__name__)


class AuditStage(str, Enum):
    PARSING = "parsing"
    VALIDATING = "validating"
    STATISTICS = "statistics"
    ANALYZING = "analyzing"
    FINALIZING = "finalizing"
    COMPLETED = "completed"


# progress(stage, percent, message); may be sync or async
ProgressCallback = Callable[[AuditStage, int, str], Awaitable[None] | None]

# Percent reported at the start of each model call
_ANALYSIS_START = 45
_ANALYSIS_END = 90


async def _report(progress: ProgressCallback | None, stage: AuditStage, percent: int, message: str) -> None:
    logger.debug("[Audit] %s %d%%: %s", stage.value, percent, message)
    if progress is None:
        return
    result = progress(stage, percent, message)
    if result is not None:
        await result


# ---------------------------------------------------------------------------
# Steps 1-2: parse + validate
# ---------------------------------------------------------------------------


def prepare_document(text: str, html: str | None = None) -> ScrapedDocument:
    """Parse a listing and reject it if it is not worth analyzing.

    Raises:
        DocumentValidationError: carrying the classified ValidationFailure.
    """
    document = parse_listing(text, html)
    failure = validate_document(document)
    if failure is not None:
        VALIDATION_FAILURES.labels(code=failure.code.value).inc()
        logger.warning(
            "[Audit] Listing rejected: code=%s categories=%d services=%d",
            failure.code.value,
            len(document.categories),
            document.total_service_count,
            extra={"validation_code": failure.code.value},
        )
        raise DocumentValidationError(failure)

    logger.info(
        "[Audit] Listing accepted: salon=%s categories=%d services=%d",
        document.salon_name,
        len(document.categories),
        document.total_service_count,
    )
    return document


# ---------------------------------------------------------------------------
# Steps 3-5: statistics, report, sanitize
# ---------------------------------------------------------------------------


async def analyze_document(
    document: ScrapedDocument,
    client: BaseLlmClient,
    progress: ProgressCallback | None = None,
) -> AuditOutcome:
    """Run statistics and report generation on an already validated document.

    Also the entry point for re-analysis of a stored document; nothing is
    re-parsed here.
    """
    await _report(progress, AuditStage.STATISTICS, 40, "Obliczanie statystyk cennika...")
    statistics = calculate_statistics(document)
    scores = score_dimensions(statistics)
    keywords = build_keyword_report(document)

    async def on_step(step: int, total: int) -> None:
        span = _ANALYSIS_END - _ANALYSIS_START
        percent = _ANALYSIS_START + span * (step - 1) // total
        await _report(progress, AuditStage.ANALYZING, percent, f"Analiza AI ({step}/{total})...")

    report = await AuditReportOrchestrator(client, on_step=on_step).generate(document)

    await _report(progress, AuditStage.FINALIZING, _ANALYSIS_END, "Finalizacja raportu...")
    report = sanitize_report_data(report)

    await _report(progress, AuditStage.COMPLETED, 100, "Audyt zakończony")
    return AuditOutcome(
        document=document,
        statistics=statistics,
        report=report,
        scores=scores,
        keywords=keywords,
    )


async def run_audit(
    text: str,
    html: str | None,
    client: BaseLlmClient,
    progress: ProgressCallback | None = None,
) -> AuditOutcome:
    """Full pipeline: parse → validate → statistics + report → sanitize."""
    await _report(progress, AuditStage.PARSING, 10, "Przetwarzanie danych cennika...")
    document = prepare_document(text, html)
    await _report(progress, AuditStage.VALIDATING, 35, "Dane cennika poprawne")
    return await analyze_document(document, client, progress)


# ---------------------------------------------------------------------------
# User-facing error messages
# ---------------------------------------------------------------------------

MSG_INVALID_RESPONSE = "Wystąpił problem podczas przetwarzania odpowiedzi AI. Spróbuj ponownie."
MSG_OVERLOADED = "Serwer AI jest chwilowo przeciążony. Spróbuj ponownie za chwilę."
MSG_CONFIGURATION = "Błąd konfiguracji - skontaktuj się z administratorem."
MSG_TIMEOUT = "Przekroczono czas oczekiwania. Spróbuj ponownie."
MSG_RATE_LIMIT = "Zbyt wiele zapytań. Poczekaj chwilę i spróbuj ponownie."
MSG_GENERIC = "Audyt nie powiódł się. Spróbuj ponownie lub skontaktuj się z pomocą techniczną."


def friendly_error_message(error: BaseException | str) -> str:
    """Map a raw failure to a short Polish message safe to show the salon owner."""
    if isinstance(error, DocumentValidationError):
        return error.failure.message
    if isinstance(error, httpx.TimeoutException):
        return MSG_TIMEOUT
    if isinstance(error, httpx.HTTPStatusError):
        if error.response.status_code == 503:
            return MSG_OVERLOADED
        if error.response.status_code == 429:
            return MSG_RATE_LIMIT
    if isinstance(error, ConfigurationError):
        return MSG_CONFIGURATION
    if isinstance(error, (ReportPayloadError, AiResponseError)):
        return MSG_INVALID_RESPONSE

    raw = str(error)
    lowered = raw.lower()
    if "unterminated string" in lowered or "JSON" in raw:
        return MSG_INVALID_RESPONSE
    if "overloaded" in lowered or "503" in raw:
        return MSG_OVERLOADED
    if "GEMINI_API_KEY" in raw:
        return MSG_CONFIGURATION
    if "timeout" in lowered or "timed out" in lowered or "ETIMEDOUT" in raw:
        return MSG_TIMEOUT
    if "rate limit" in lowered or "429" in raw:
        return MSG_RATE_LIMIT
    return MSG_GENERIC
