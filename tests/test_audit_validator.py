"""Tests for the listing validator (Pipeline Step 2)."""

from salon_audit.audit.types import ScrapedCategory, ScrapedDocument, ScrapedService, ValidationCode
from salon_audit.audit.validator import validate_document


def _services(*names: str) -> list[ScrapedService]:
    return [ScrapedService(name=name, price="100 zł") for name in names]


def _doc(*categories: ScrapedCategory) -> ScrapedDocument:
    return ScrapedDocument(categories=list(categories))


class TestValidateDocument:
    def test_valid_document(self):
        doc = _doc(ScrapedCategory("Test", _services("S1", "S2", "S3")))
        assert validate_document(doc) is None

    def test_no_categories(self):
        failure = validate_document(_doc())
        assert failure is not None
        assert failure.code == ValidationCode.NO_CATEGORIES
        assert failure.retryable is True

    def test_too_few_services(self):
        failure = validate_document(_doc(ScrapedCategory("Test", _services("S1", "S2"))))
        assert failure.code == ValidationCode.TOO_FEW_SERVICES
        assert failure.details == {"found": 2, "minimum": 3}
        assert "Za mało usług" in failure.message

    def test_too_few_services_not_retryable(self):
        failure = validate_document(_doc(ScrapedCategory("Test", _services("S1"))))
        assert failure.retryable is False

    def test_too_many_empty_categories(self):
        doc = _doc(
            ScrapedCategory("Empty1"),
            ScrapedCategory("Empty2"),
            ScrapedCategory("Empty3"),
            ScrapedCategory("HasServices", _services("S1", "S2", "S3")),
        )
        failure = validate_document(doc)
        assert failure.code == ValidationCode.TOO_MANY_EMPTY_CATEGORIES
        assert failure.details == {"total": 4, "empty": 3}

    def test_some_empty_categories_accepted(self):
        doc = _doc(
            ScrapedCategory("Empty1"),
            ScrapedCategory("HasServices1", _services("S1", "S2")),
            ScrapedCategory("HasServices2", _services("S3")),
        )
        assert validate_document(doc) is None

    def test_exactly_half_empty_accepted(self):
        doc = _doc(
            ScrapedCategory("Empty1"),
            ScrapedCategory("HasServices", _services("S1", "S2", "S3")),
        )
        assert validate_document(doc) is None

    def test_first_failing_check_wins(self):
        # Too few services and mostly empty: the service count is checked first
        doc = _doc(ScrapedCategory("Empty1"), ScrapedCategory("Empty2"), ScrapedCategory("One", _services("S1")))
        assert validate_document(doc).code == ValidationCode.TOO_FEW_SERVICES

    def test_failure_to_dict(self):
        failure = validate_document(_doc(ScrapedCategory("Test", _services("S1", "S2"))))
        assert failure.to_dict() == {
            "code": "TOO_FEW_SERVICES",
            "message": failure.message,
            "details": {"found": 2, "minimum": 3},
        }
