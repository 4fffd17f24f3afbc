"""Pydantic models for audit job results returned by the Celery tasks."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class AuditJobStatus(str, Enum):
    COMPLETED = "completed"
    FAILED = "failed"


class AuditProgress(BaseModel):
    stage: str = Field(description="Pipeline stage, e.g. parsing, analyzing")
    percent: int = Field(ge=0, le=100)
    message: str = Field(description="Polish progress message shown to the user")


class AuditJobResult(BaseModel):
    """Terminal state of one audit run. Exactly one is produced per job."""

    audit_id: str
    status: AuditJobStatus
    overall_score: int | None = Field(default=None, ge=0, le=100)

    # Payloads in the persisted camelCase shape
    document: dict[str, Any] | None = None
    statistics: dict[str, Any] | None = None
    scores: dict[str, Any] | None = Field(default=None, description="Rule-based completeness and UX points")
    keywords: dict[str, Any] | None = None
    report: dict[str, Any] | None = None

    error_code: str | None = Field(default=None, description="ValidationCode or exception class name")
    error_message: str | None = Field(default=None, description="Raw error, for logs and support")
    user_message: str | None = Field(default=None, description="Polish message safe to show the user")
    retryable: bool = False
