"""Sentry error tracking for audit workers.

Only initialized when SENTRY_DSN is set. Listings rejected by validation
are an expected outcome, so those events are dropped before sending.
"""

import logging

from salon_audit.audit.exceptions import DocumentValidationError
from salon_audit.audit.microformat import GRAMMAR_VERSION
from salon_audit.core.config import settings

logger = logging.getLogger(__name__)

IGNORED_EXCEPTIONS = (DocumentValidationError,)


def before_send(event, hint):
    exc_info = hint.get("exc_info") if hint else None
    if exc_info and isinstance(exc_info[1], IGNORED_EXCEPTIONS):
        return None
    return event


def init_sentry() -> bool:
    """Initialize Sentry if SENTRY_DSN is configured. Returns whether it did."""
    if not settings.sentry_dsn:
        logger.debug("Sentry DSN not configured, skipping")
        return False

    import sentry_sdk
    from sentry_sdk.integrations.celery import CeleryIntegration

    sentry_sdk.init(
        dsn=settings.sentry_dsn,
        environment=settings.app_env,
        traces_sample_rate=0.1 if settings.app_env == "production" else 1.0,
        send_default_pii=False,
        integrations=[CeleryIntegration()],
        before_send=before_send,
    )
    sentry_sdk.set_tag("grammar_version", GRAMMAR_VERSION)
    logger.info("Sentry initialized (env=%s)", settings.app_env)
    return True
