"""Booksy listing helpers — URL recognition and API payload conversion.

The listing API is fetched by the caller; this module only turns an already
decoded response into a ScrapedDocument.
"""

from __future__ import annotations

import logging
import re
from typing import Any
from urllib.parse import urlparse

from salon_audit.audit.exceptions import ListingPayloadError
from salon_audit.audit.tokens import DESCRIPTION_MAX
from salon_audit.audit.types import ScrapedCategory, ScrapedDocument, ScrapedService

logger = logging.getLogger(__name__)

# https://booksy.com/pl-pl/98814_beauty4ever-ul-woloska-16_medycyna-estetyczna_3_warszawa
_BUSINESS_ID = re.compile(r"/pl-pl/(\d+)_")

# Last numeric path segment: https://booksy.com/pl-pl/123456/salon-name/789012
_SALON_ID = re.compile(r"booksy\.com/[^?#]*/(\d+)(?:[?#]|$)", re.IGNORECASE)

FREE_PRICE_LABEL = "Darmowa"


def is_valid_booksy_url(url: str) -> bool:
    """Check that *url* is an absolute http(s) URL on a booksy.com host."""
    try:
        parsed = urlparse(url)
    except ValueError:
        return False
    if parsed.scheme not in ("http", "https"):
        return False
    host = (parsed.hostname or "").lower()
    return host == "booksy.com" or host.endswith(".booksy.com")


def extract_business_id(url: str) -> str | None:
    match = _BUSINESS_ID.search(url)
    return match.group(1) if match else None


def extract_salon_id(url: str) -> str | None:
    match = _SALON_ID.search(url)
    return match.group(1) if match else None


def format_duration(minutes: int) -> str:
    """45 → "45min", 60 → "1h", 90 → "1h 30min"."""
    if minutes < 60:
        return f"{minutes}min"
    hours, mins = divmod(minutes, 60)
    if mins == 0:
        return f"{hours}h"
    return f"{hours}h {mins}min"


def _price_label(item: dict[str, Any]) -> str:
    if item.get("service_price"):
        return str(item["service_price"])
    if item.get("price"):
        return f"{item['price']} zł"
    return FREE_PRICE_LABEL


def _convert_service(raw: dict[str, Any]) -> ScrapedService:
    variants = raw.get("variants") or []
    first_duration = variants[0].get("duration") if variants else None
    description = raw.get("description") or None

    return ScrapedService(
        name=str(raw.get("name", "")).strip(),
        price=_price_label(raw),
        duration=format_duration(int(first_duration)) if first_duration else None,
        description=description[:DESCRIPTION_MAX] if description else None,
    )


def document_from_booksy_payload(payload: dict[str, Any]) -> ScrapedDocument:
    """Convert a decoded listing API response into a ScrapedDocument.

    Variants are not counted as separate services; the first variant only
    supplies the duration.
    """
    business = payload.get("business")
    if not business:
        raise ListingPayloadError("No business data in listing API response")

    categories = [
        ScrapedCategory(
            name=str(raw_cat.get("name", "")).strip(),
            services=[_convert_service(s) for s in raw_cat.get("services") or []],
        )
        for raw_cat in business.get("service_categories") or []
    ]
    location = business.get("location") or {}
    name = business.get("name")

    document = ScrapedDocument(
        categories=categories,
        source_text=f"Booksy API data for {name}",
        salon_name=name,
        salon_address=location.get("address"),
        logo_url=business.get("photo"),
    )
    logger.info(
        "Converted listing API payload for business %s: %d categories, %d services",
        business.get("id"),
        len(document.categories),
        document.total_service_count,
    )
    return document
