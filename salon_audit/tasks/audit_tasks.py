"""Celery tasks for salon pricelist audits.

Each task runs the async pipeline in a fresh event loop and ends in exactly
one terminal AuditJobResult. Failures are retried with exponential backoff
up to ``settings.audit_max_retries`` times, except where retrying cannot
help: a listing rejected by validation, or missing configuration.
"""

import asyncio
import logging
from typing import Any

from salon_audit.audit.exceptions import ConfigurationError, DocumentValidationError
from salon_audit.audit.pipeline import AuditStage, analyze_document, friendly_error_message, run_audit
from salon_audit.audit.types import AuditOutcome, ScrapedDocument
from salon_audit.core.config import settings
from salon_audit.core.metrics import AUDIT_RUNS
from salon_audit.llm.gemini import GeminiClient
from salon_audit.schemas.audit_job import AuditJobResult, AuditJobStatus, AuditProgress
from salon_audit.tasks.celery_app import celery_app

logger = logging.getLogger(__name__)


def _run_async(coro):
    """Run an async coroutine from sync Celery task context."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


def is_retryable(exc: BaseException) -> bool:
    """Whether running the same task again can succeed.

    Parsing is deterministic, so a listing rejected by validation is rejected
    again on the same input; only a fresh fetch upstream can change that.
    """
    return not isinstance(exc, (DocumentValidationError, ConfigurationError))


def retry_countdown(retries: int) -> int:
    """Seconds before the next attempt: base, 2x base, 4x base, ..."""
    return settings.audit_retry_base_delay * 2**retries


def _progress_publisher(task, audit_id: str):
    def publish(stage: AuditStage, percent: int, message: str) -> None:
        # Direct (non-worker) calls have no task id to attach state to
        if not task.request.id:
            return
        meta = AuditProgress(stage=stage.value, percent=percent, message=message)
        try:
            task.update_state(state="PROGRESS", meta={"audit_id": audit_id, **meta.model_dump()})
        except Exception as exc:
            # Progress is advisory; a result backend outage must not fail the audit
            logger.warning("Audit %s: progress update %s failed: %s", audit_id, stage.value, exc)

    return publish


def _completed(audit_id: str, outcome: AuditOutcome) -> dict[str, Any]:
    AUDIT_RUNS.labels(status="completed").inc()
    return AuditJobResult(
        audit_id=audit_id,
        status=AuditJobStatus.COMPLETED,
        overall_score=outcome.report.overall_score,
        document=outcome.document.to_dict(),
        statistics=outcome.statistics.to_dict(),
        scores=outcome.scores.to_dict(),
        keywords=outcome.keywords.to_dict(),
        report=outcome.report.to_dict(),
    ).model_dump(mode="json")


def _failed(audit_id: str, exc: BaseException) -> dict[str, Any]:
    AUDIT_RUNS.labels(status="failed").inc()
    if isinstance(exc, DocumentValidationError):
        error_code = exc.failure.code.value
    else:
        error_code = type(exc).__name__
    return AuditJobResult(
        audit_id=audit_id,
        status=AuditJobStatus.FAILED,
        error_code=error_code,
        error_message=str(exc),
        user_message=friendly_error_message(exc),
        retryable=is_retryable(exc),
    ).model_dump(mode="json")


def _handle_failure(task, audit_id: str, exc: Exception) -> dict[str, Any]:
    """Retry when it can help and attempts remain, otherwise return the failed result."""
    retries = task.request.retries
    if is_retryable(exc) and retries < task.max_retries:
        countdown = retry_countdown(retries)
        logger.warning(
            "Audit %s failed (attempt %d/%d), retrying in %ds: %s",
            audit_id,
            retries + 1,
            task.max_retries + 1,
            countdown,
            exc,
        )
        AUDIT_RUNS.labels(status="retried").inc()
        raise task.retry(exc=exc, countdown=countdown)

    logger.error("Audit %s failed permanently: %s", audit_id, exc, extra={"audit_id": audit_id})
    return _failed(audit_id, exc)


@celery_app.task(
    bind=True,
    name="run_audit",
    max_retries=settings.audit_max_retries,
)
def run_audit_task(self, audit_id: str, source_text: str, html: str | None = None):
    """Celery task: parse, validate and analyze one scraped listing."""
    logger.info("Starting audit %s (%d chars of text)", audit_id, len(source_text or ""))
    try:
        client = GeminiClient.from_settings()
        outcome = _run_async(run_audit(source_text, html, client, _progress_publisher(self, audit_id)))
    except Exception as exc:
        return _handle_failure(self, audit_id, exc)

    logger.info("Audit %s done: score=%d", audit_id, outcome.report.overall_score)
    return _completed(audit_id, outcome)


@celery_app.task(
    bind=True,
    name="reanalyze_audit",
    max_retries=settings.audit_max_retries,
)
def reanalyze_audit_task(self, audit_id: str, document_payload: dict):
    """Celery task: regenerate statistics and report for a stored document."""
    logger.info("Starting re-analysis for audit %s", audit_id)
    try:
        document = ScrapedDocument.from_dict(document_payload)
        client = GeminiClient.from_settings()
        outcome = _run_async(analyze_document(document, client, _progress_publisher(self, audit_id)))
    except Exception as exc:
        return _handle_failure(self, audit_id, exc)

    logger.info("Re-analysis for audit %s done: score=%d", audit_id, outcome.report.overall_score)
    return _completed(audit_id, outcome)
