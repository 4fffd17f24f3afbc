"""Listing Validator — Pipeline Step 2.

Decides whether a parsed listing carries enough signal to pay for AI
analysis. Checks run in a fixed order and the first failure wins:

  1. at least one category
  2. at least MIN_SERVICES services
  3. no more than half of the categories empty
"""

from __future__ import annotations

from salon_audit.audit.tokens import MIN_SERVICES
from salon_audit.audit.types import ScrapedDocument, ValidationCode, ValidationFailure

MAX_EMPTY_CATEGORY_RATIO = 0.5


def validate_document(document: ScrapedDocument) -> ValidationFailure | None:
    """Return None when the document is analyzable, else the first failing check."""
    if not document.categories:
        return ValidationFailure(
            code=ValidationCode.NO_CATEGORIES,
            message="Nie znaleziono kategorii usług na stronie Booksy",
        )

    total = document.total_service_count
    if total < MIN_SERVICES:
        return ValidationFailure(
            code=ValidationCode.TOO_FEW_SERVICES,
            message=f"Za mało usług do analizy (znaleziono: {total}, minimum: {MIN_SERVICES})",
            details={"found": total, "minimum": MIN_SERVICES},
        )

    empty = sum(1 for c in document.categories if not c.services)
    if empty > len(document.categories) * MAX_EMPTY_CATEGORY_RATIO:
        return ValidationFailure(
            code=ValidationCode.TOO_MANY_EMPTY_CATEGORIES,
            message="Dane niekompletne - zbyt wiele pustych kategorii",
            details={"total": len(document.categories), "empty": empty},
        )

    return None
