"""Listing Markup Parser — fallback for Pipeline Step 1.

Used only when the text parse is too thin. Looks for repeating containers
whose class names them as a service / item / offer and pulls a name and a
price out of each. Everything lands in a single category.
"""

from __future__ import annotations

import logging
import re

from bs4 import BeautifulSoup, Tag

from salon_audit.audit.tokens import (
    DEFAULT_CATEGORY_NAME,
    SERVICE_NAME_MAX,
    SERVICE_NAME_MIN,
    find_duration,
    find_price,
)
from salon_audit.audit.types import ScrapedCategory, ScrapedDocument, ScrapedService

logger = logging.getLogger(__name__)

_CONTAINER_TAGS = ["div", "li", "article"]
_CONTAINER_CLASS = re.compile(r"service|item|offer", re.IGNORECASE)
_NAME_CLASS = re.compile(r"name|title", re.IGNORECASE)
_NAME_TAGS_WITH_CLASS = ["h1", "h2", "h3", "h4", "h5", "h6", "span", "p"]
_NAME_TAGS_PLAIN = ["h1", "h2", "h3", "h4", "h5", "h6", "strong", "b"]


def _extract_name(container: Tag) -> str | None:
    tag = container.find(_NAME_TAGS_WITH_CLASS, class_=_NAME_CLASS) or container.find(_NAME_TAGS_PLAIN)
    if tag is None:
        return None
    name = tag.get_text(" ", strip=True)
    if SERVICE_NAME_MIN <= len(name) <= SERVICE_NAME_MAX:
        return name
    return None


def _extract_service(container: Tag) -> ScrapedService | None:
    name = _extract_name(container)
    text = container.get_text(" ", strip=True)
    price_match = find_price(text)
    if not name or not price_match:
        return None
    return ScrapedService(name=name, price=price_match.group(0).strip(), duration=find_duration(text))


def _extract_services(soup: BeautifulSoup) -> list[ScrapedService]:
    """One service per complete container; a wrapper around complete containers is skipped.

    A card such as ``service-item`` often holds ``service-name`` / ``service-price``
    children that match the container pattern too. Those fragments have no name
    and price of their own, so the card itself is kept.
    """
    candidates = soup.find_all(_CONTAINER_TAGS, class_=_CONTAINER_CLASS)
    extracted = {id(tag): _extract_service(tag) for tag in candidates}

    services = []
    for tag in candidates:
        service = extracted[id(tag)]
        if service is None:
            continue
        nested = tag.find_all(_CONTAINER_TAGS, class_=_CONTAINER_CLASS)
        if any(extracted.get(id(inner)) is not None for inner in nested):
            continue
        services.append(service)
    return services


def parse_listing_html(html: str) -> ScrapedDocument:
    """Extract services from page markup into a single-category document. Never raises."""
    if not html or not html.strip():
        return ScrapedDocument(source_text=html or "")

    soup = BeautifulSoup(html, "lxml")
    category = ScrapedCategory(name=DEFAULT_CATEGORY_NAME, services=_extract_services(soup))
    categories = [category] if category.services else []
    logger.debug("Parsed listing markup: %d services", len(category.services))
    return ScrapedDocument(categories=categories, source_text=html)
