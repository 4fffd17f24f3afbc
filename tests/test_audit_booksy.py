"""Tests for Booksy URL helpers and listing API payload conversion."""

import pytest

from salon_audit.audit.booksy import (
    document_from_booksy_payload,
    extract_business_id,
    extract_salon_id,
    format_duration,
    is_valid_booksy_url,
)
from salon_audit.audit.exceptions import ListingPayloadError


def _payload() -> dict:
    return {
        "business": {
            "id": 98814,
            "name": "Beauty4ever",
            "photo": "https://d2zdpiztbgorvt.cloudfront.net/logo.jpg",
            "location": {"address": "ul. Wołoska 16, Warszawa"},
            "service_categories": [
                {
                    "name": "Medycyna estetyczna",
                    "services": [
                        {
                            "name": "Mezoterapia igłowa ",
                            "service_price": "od 400,00 zł",
                            "description": "Zabieg rewitalizujący skórę twarzy",
                            "variants": [{"duration": 45}, {"duration": 90}],
                        },
                        {"name": "Konsultacja", "price": 100, "variants": []},
                        {"name": "Pierwsza wizyta", "variants": [{"duration": 60}]},
                    ],
                },
                {"name": "Pusta", "services": []},
            ],
        }
    }


class TestIsValidBooksyUrl:
    @pytest.mark.parametrize(
        "url",
        [
            "https://booksy.com/pl-pl/98814_beauty4ever_medycyna-estetyczna_3_warszawa",
            "http://booksy.com/pl-pl/1_salon",
            "https://pl.booksy.com/salon",
        ],
    )
    def test_valid(self, url):
        assert is_valid_booksy_url(url) is True

    @pytest.mark.parametrize(
        "url",
        [
            "https://example.com/booksy.com",
            "https://notbooksy.com/pl-pl/1_salon",
            "ftp://booksy.com/file",
            "booksy.com/pl-pl/1_salon",
            "",
        ],
    )
    def test_invalid(self, url):
        assert is_valid_booksy_url(url) is False


class TestIdExtraction:
    def test_business_id(self):
        url = "https://booksy.com/pl-pl/98814_beauty4ever-ul-woloska-16_medycyna-estetyczna_3_warszawa"
        assert extract_business_id(url) == "98814"

    def test_business_id_missing(self):
        assert extract_business_id("https://booksy.com/en-us/salon") is None

    def test_salon_id_last_numeric_segment(self):
        assert extract_salon_id("https://booksy.com/pl-pl/123456/salon-name/789012") == "789012"

    def test_salon_id_with_query(self):
        assert extract_salon_id("https://booksy.com/pl-pl/salon/4242?utm_source=x") == "4242"

    def test_salon_id_missing(self):
        assert extract_salon_id("https://booksy.com/pl-pl/salon-name") is None


class TestFormatDuration:
    @pytest.mark.parametrize(
        "minutes,expected",
        [(45, "45min"), (60, "1h"), (90, "1h 30min"), (120, "2h"), (135, "2h 15min")],
    )
    def test_format(self, minutes, expected):
        assert format_duration(minutes) == expected


class TestDocumentFromBooksyPayload:
    def test_salon_fields(self):
        doc = document_from_booksy_payload(_payload())
        assert doc.salon_name == "Beauty4ever"
        assert doc.salon_address == "ul. Wołoska 16, Warszawa"
        assert doc.logo_url.endswith("logo.jpg")
        assert doc.source_text == "Booksy API data for Beauty4ever"

    def test_categories_kept_in_order(self):
        doc = document_from_booksy_payload(_payload())
        assert [c.name for c in doc.categories] == ["Medycyna estetyczna", "Pusta"]

    def test_variants_not_counted_as_services(self):
        doc = document_from_booksy_payload(_payload())
        assert doc.total_service_count == 3

    def test_price_fallbacks(self):
        services = document_from_booksy_payload(_payload()).categories[0].services
        assert [s.price for s in services] == ["od 400,00 zł", "100 zł", "Darmowa"]

    def test_duration_from_first_variant(self):
        services = document_from_booksy_payload(_payload()).categories[0].services
        assert [s.duration for s in services] == ["45min", None, "1h"]

    def test_name_trimmed_and_description_kept(self):
        first = document_from_booksy_payload(_payload()).categories[0].services[0]
        assert first.name == "Mezoterapia igłowa"
        assert first.description == "Zabieg rewitalizujący skórę twarzy"

    def test_long_description_truncated(self):
        payload = _payload()
        payload["business"]["service_categories"][0]["services"][0]["description"] = "x" * 800
        first = document_from_booksy_payload(payload).categories[0].services[0]
        assert len(first.description) == 500

    def test_missing_business_raises(self):
        with pytest.raises(ListingPayloadError):
            document_from_booksy_payload({"error": "not found"})
