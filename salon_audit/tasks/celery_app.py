from celery import Celery
from celery.signals import setup_logging as celery_setup_logging
from celery.signals import worker_process_init

from salon_audit.core.config import settings

celery_app = Celery(
    "salon_audit",
    broker=settings.redis_url,
    backend=settings.redis_url,
)

celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    result_expires=settings.audit_result_ttl,
    timezone="UTC",
    enable_utc=True,
    task_track_started=True,
    # An audit is three model calls; re-deliver it if the worker dies mid-run
    task_acks_late=True,
    task_reject_on_worker_lost=True,
    task_soft_time_limit=int(settings.gemini_timeout * 3) + 30,
    worker_prefetch_multiplier=1,
    broker_connection_retry_on_startup=True,
    task_default_queue=settings.audit_queue,
    task_routes={
        "run_audit": {"queue": settings.audit_queue},
        "reanalyze_audit": {"queue": settings.audit_queue},
    },
)

# Explicit include (needed for CLI worker startup)
celery_app.conf.include = [
    "salon_audit.tasks.audit_tasks",
]


@celery_setup_logging.connect
def _configure_logging(**kwargs):
    """Use our handlers instead of Celery's default logging setup."""
    from salon_audit.core.logging import setup_logging

    setup_logging()


@worker_process_init.connect
def _init_worker(**kwargs):
    from salon_audit.core.config import validate_settings_for_production
    from salon_audit.core.sentry import init_sentry

    if settings.app_env != "test":
        validate_settings_for_production()
    init_sentry()
