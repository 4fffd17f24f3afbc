"""Token patterns shared by the listing parsers."""

from __future__ import annotations

import re

# "150 zł", "99,90 zł", "100.50 PLN"
PRICE_PATTERN = re.compile(r"(\d+[.,]?\d*)\s*(zł|PLN)", re.IGNORECASE)

# "60 min", "1h", "2 godziny"
DURATION_PATTERN = re.compile(r"(\d+)\s*(min|godz\w*|h)", re.IGNORECASE)

# Services listed before any heading land here
DEFAULT_CATEGORY_NAME = "Usługi"

SERVICE_NAME_MIN, SERVICE_NAME_MAX = 2, 200
CATEGORY_NAME_MIN, CATEGORY_NAME_MAX = 2, 100
DESCRIPTION_MIN, DESCRIPTION_MAX = 10, 500

# Below this many services the text parse counts as insufficient
MIN_SERVICES = 3


def find_price(text: str) -> re.Match | None:
    return PRICE_PATTERN.search(text)


def find_duration(text: str) -> str | None:
    match = DURATION_PATTERN.search(text)
    return match.group(0) if match else None
