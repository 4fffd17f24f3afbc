"""Listing Text Parser — Pipeline Step 1.

Turns the markdown-ish text of a scraped salon page into a ScrapedDocument:

  - "## Heading" or "**Heading**" lines open a new category
  - lines with a currency amount ("150 zł") are services
  - a duration ("60 min") is taken from the rest of the line or the next one
  - a prose line right after a service becomes its description

The parser never raises. Text without recognizable services produces an
empty document and validation rejects it later.
"""

from __future__ import annotations

import logging
import re

from salon_audit.audit.html_parser import parse_listing_html
from salon_audit.audit.tokens import (
    CATEGORY_NAME_MAX,
    CATEGORY_NAME_MIN,
    DEFAULT_CATEGORY_NAME,
    DESCRIPTION_MAX,
    DESCRIPTION_MIN,
    MIN_SERVICES,
    PRICE_PATTERN,
    SERVICE_NAME_MAX,
    SERVICE_NAME_MIN,
    find_duration,
)
from salon_audit.audit.types import ScrapedCategory, ScrapedDocument, ScrapedService

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Line patterns
# ---------------------------------------------------------------------------

# "## Zabiegi na twarz" (a single "#" is the salon name, not a category)
_HASH_HEADING = re.compile(r"^#{2,}\s*(.+?)\s*#*$")

# "**Manicure**": the whole line wrapped in bold
_BOLD_HEADING = re.compile(r"^\*\*([^*]+)\*\*:?$")

# "1. ", "2) ", "- ", "* ", "• "
_LIST_MARKER = re.compile(r"^(?:\d+[.)]|[-*•])\s+")

_TRAILING_DASH = re.compile(r"\s*[-–—:]\s*$")

_SALON_NAME_HEADING = re.compile(r"^#(?!#)\s*(.+?)\s*$", re.MULTILINE)
_SALON_NAME_LABEL = re.compile(r"^\s*(?:salon|nazwa)\s*:\s*(.+?)\s*$", re.MULTILINE | re.IGNORECASE)
_ADDRESS_LABEL = re.compile(r"^\s*(?:adres|lokalizacja)\s*:\s*(.+?)\s*$", re.MULTILINE | re.IGNORECASE)
_ADDRESS_STREET = re.compile(r"^\s*(ul\.\s.+?)\s*$", re.MULTILINE | re.IGNORECASE)


# ---------------------------------------------------------------------------
# Line classification
# ---------------------------------------------------------------------------


def heading_name(line: str) -> str | None:
    """Return the category name if *line* is a heading, else None."""
    match = _HASH_HEADING.match(line) or _BOLD_HEADING.match(line)
    if not match:
        return None
    name = match.group(1).replace("**", "").strip()
    if CATEGORY_NAME_MIN <= len(name) <= CATEGORY_NAME_MAX:
        return name
    return None


def _looks_like_heading(line: str) -> bool:
    """Looser check used to keep headings out of descriptions."""
    return line.startswith("#") or line.startswith("**")


def clean_service_name(raw: str) -> str:
    """Strip list markers, bold markers and a trailing dash from a name."""
    name = _LIST_MARKER.sub("", raw.strip())
    name = name.replace("**", "").strip()
    name = _TRAILING_DASH.sub("", name)
    return name.strip()


def _description_from(line: str) -> str | None:
    candidate = line.strip()
    if not candidate or _looks_like_heading(candidate) or PRICE_PATTERN.search(candidate):
        return None
    if DESCRIPTION_MIN <= len(candidate) <= DESCRIPTION_MAX:
        return candidate
    return None


def _extract_salon_name(text: str) -> str | None:
    match = _SALON_NAME_HEADING.search(text) or _SALON_NAME_LABEL.search(text)
    return match.group(1).strip() if match else None


def _extract_salon_address(text: str) -> str | None:
    match = _ADDRESS_LABEL.search(text) or _ADDRESS_STREET.search(text)
    return match.group(1).strip() if match else None


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


def parse_listing_text(text: str) -> ScrapedDocument:
    """Parse listing text into a ScrapedDocument. Pure; never raises."""
    text = text or ""
    lines = text.split("\n")
    categories: list[ScrapedCategory] = []
    current = ScrapedCategory(name=DEFAULT_CATEGORY_NAME)

    for i, raw_line in enumerate(lines):
        line = raw_line.strip()
        if not line:
            continue

        name = heading_name(line)
        if name is not None:
            if current.services:
                categories.append(current)
            current = ScrapedCategory(name=name)
            continue

        price_match = PRICE_PATTERN.search(line)
        if not price_match:
            continue

        service_name = clean_service_name(line[: price_match.start()])
        if not SERVICE_NAME_MIN <= len(service_name) <= SERVICE_NAME_MAX:
            continue

        next_line = lines[i + 1].strip() if i + 1 < len(lines) else ""
        duration = find_duration(line[price_match.end():])
        if duration is None and next_line:
            duration = find_duration(next_line)

        current.services.append(
            ScrapedService(
                name=service_name,
                price=price_match.group(0).strip(),
                duration=duration,
                description=_description_from(next_line),
            )
        )

    if current.services:
        categories.append(current)

    document = ScrapedDocument(
        categories=categories,
        source_text=text,
        salon_name=_extract_salon_name(text),
        salon_address=_extract_salon_address(text),
    )
    logger.debug(
        "Parsed listing text: %d categories, %d services",
        len(document.categories),
        document.total_service_count,
    )
    return document


def parse_listing(text: str, html: str | None = None) -> ScrapedDocument:
    """Parse listing text, falling back to the page markup when the text is too thin.

    The markup result replaces the text result entirely; the two are never merged.
    """
    document = parse_listing_text(text)
    if document.categories and document.total_service_count >= MIN_SERVICES:
        return document
    if not html:
        return document

    fallback = parse_listing_html(html)
    if not fallback.categories:
        return document

    logger.info(
        "Text parse found %d services, using markup fallback with %d services",
        document.total_service_count,
        fallback.total_service_count,
    )
    return fallback
