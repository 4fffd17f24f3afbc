"""Exceptions raised by the audit pipeline.

Parsing, validation and statistics never raise; these cover the hard stop
after validation, model failures and unreadable external payloads.
"""

from __future__ import annotations

from salon_audit.audit.types import ValidationFailure


class AuditError(Exception):
    """Base class for audit pipeline errors."""


class DocumentValidationError(AuditError):
    """The parsed listing is not analyzable. Carries the classified failure."""

    def __init__(self, failure: ValidationFailure) -> None:
        self.failure = failure
        super().__init__(failure.message)

    @property
    def retryable(self) -> bool:
        return self.failure.retryable


class AiResponseError(AuditError):
    """The model answered without usable content."""


class ReportPayloadError(AuditError):
    """An externally sourced report is not a structured object at all."""


class ListingPayloadError(AuditError):
    """A listing API response has no business data."""


class ConfigurationError(AuditError):
    """A required setting (e.g. the model API key) is missing."""
