"""Worker logging configuration.

Records emitted inside a Celery task carry the task name and id; audit
code adds ``audit_id``, ``step`` or ``validation_code`` through ``extra``.
"""

import json
import logging
import sys
from datetime import datetime, timezone

from celery import current_task

from salon_audit.core.config import settings

# Keys audit code passes via ``extra=`` that belong in structured output
AUDIT_FIELDS = ("audit_id", "step", "validation_code")

PLAIN_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(task)s%(message)s"


class TaskContextFilter(logging.Filter):
    """Attach the running Celery task (if any) to every record."""

    def filter(self, record: logging.LogRecord) -> bool:
        task = current_task
        request = getattr(task, "request", None) if task else None
        record.task_name = getattr(task, "name", None) if request and request.id else None
        record.task_id = request.id if request else None
        record.task = f"{record.task_name}[{record.task_id}] " if record.task_id else ""
        return True


class JSONFormatter(logging.Formatter):
    """One JSON object per line, with task context and audit fields."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if getattr(record, "task_id", None):
            log_data["task_id"] = record.task_id
            log_data["task_name"] = record.task_name
        for key in AUDIT_FIELDS:
            if hasattr(record, key):
                log_data[key] = getattr(record, key)
        if record.exc_info and record.exc_info[1]:
            log_data["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_data, ensure_ascii=False)


def setup_logging() -> None:
    """Replace root handlers with a single stdout handler for the worker."""
    level = getattr(logging, settings.log_level.upper(), logging.INFO)

    root = logging.getLogger()
    root.setLevel(level)
    for handler in root.handlers[:]:
        root.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.addFilter(TaskContextFilter())
    if settings.log_json:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(PLAIN_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    root.addHandler(handler)

    # Per-request lines from the model client
    for noisy in ("httpx", "httpcore"):
        logging.getLogger(noisy).setLevel(logging.WARNING)
    logging.getLogger("celery").setLevel(level)
