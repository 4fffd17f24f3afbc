"""Pricelist Statistics — hard numbers computed without AI.

Fully deterministic and I/O-free; empty documents yield placeholder values.
Besides the raw counts this module derives two rule-based dimension scores
(completeness, UX) and an industry keyword report.
"""

from __future__ import annotations

import math
import re

from salon_audit.audit.types import (
    AuditStatistics,
    CategoryKeywords,
    CategorySize,
    DimensionScores,
    KeywordHit,
    KeywordReport,
    ScrapedDocument,
)

OVERSIZED_CATEGORY = 20  # more than this many services
UNDERSIZED_CATEGORY = 3  # fewer than this many (but at least one)
NO_CATEGORY = "Brak"

# "od 150 zł", "od150 zł", "from 100"
_STARTING_FROM = re.compile(r"(?:^|\s)(?:od|from)(?=\s|\d)")

# "100 - 200 zł", "100–200 zł"
_RANGE_MARKERS = (" - ", "–")


def is_fixed_price(price: str) -> bool:
    """True when *price* is one concrete amount, not a range or a "starting from" value."""
    lowered = (price or "").lower().strip()
    if not lowered:
        return False
    if _STARTING_FROM.search(lowered):
        return False
    return not any(marker in lowered for marker in _RANGE_MARKERS)


def _normalize_name(name: str) -> str:
    return " ".join(name.split()).lower()


def _duplicate_names(document: ScrapedDocument) -> list[str]:
    counts: dict[str, int] = {}
    for service in document.iter_services():
        key = _normalize_name(service.name)
        counts[key] = counts.get(key, 0) + 1
    return [name for name, count in counts.items() if count > 1]


def calculate_statistics(document: ScrapedDocument) -> AuditStatistics:
    """Compute the deterministic quality metrics of a document."""
    services = list(document.iter_services())
    total_services = len(services)
    total_categories = len(document.categories)

    sizes = [CategorySize(c.name, len(c.services)) for c in document.categories]
    # Stable: ties keep listing order
    by_size = sorted(sizes, key=lambda s: s.count, reverse=True)

    avg = round(total_services / total_categories, 1) if total_categories else 0.0

    return AuditStatistics(
        total_services=total_services,
        total_categories=total_categories,
        services_with_description=sum(1 for s in services if s.description and s.description.strip()),
        services_with_duration=sum(1 for s in services if s.duration and s.duration.strip()),
        services_with_fixed_price=sum(1 for s in services if is_fixed_price(s.price)),
        avg_services_per_category=avg,
        largest_category=by_size[0] if by_size else CategorySize(NO_CATEGORY, 0),
        smallest_category=by_size[-1] if by_size else CategorySize(NO_CATEGORY, 0),
        duplicate_names=_duplicate_names(document),
        empty_categories=[c.name for c in document.categories if not c.services],
        oversized_categories=[c.name for c in document.categories if len(c.services) > OVERSIZED_CATEGORY],
        undersized_categories=[
            c.name for c in document.categories if 0 < len(c.services) < UNDERSIZED_CATEGORY
        ],
    )


# ---------------------------------------------------------------------------
# Dimension scores
# ---------------------------------------------------------------------------

COMPLETENESS_MAX = 15
UX_MAX = 5
UNEVEN_SIZE_RATIO = 10
UNDERSIZED_TOLERANCE = 2  # this many undersized categories go unpenalized


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def completeness_score(stats: AuditStatistics) -> int:
    """0-15 points for filled-in fields: descriptions 6, durations 5, fixed prices 4."""
    if not stats.total_services:
        return 0
    total = stats.total_services
    score = (
        stats.services_with_description / total * 6
        + stats.services_with_duration / total * 5
        + stats.services_with_fixed_price / total * 4
    )
    return min(COMPLETENESS_MAX, _round_half_up(score))


def ux_score(stats: AuditStatistics) -> int:
    """5 points minus one per structural problem a client would notice while browsing."""
    penalties = [
        bool(stats.empty_categories),
        bool(stats.oversized_categories),
        len(stats.undersized_categories) > UNDERSIZED_TOLERANCE,
        bool(stats.duplicate_names),
        stats.largest_category.count > stats.smallest_category.count * UNEVEN_SIZE_RATIO,
    ]
    return max(0, UX_MAX - sum(penalties))


def score_dimensions(stats: AuditStatistics) -> DimensionScores:
    return DimensionScores(completeness=completeness_score(stats), ux=ux_score(stats))


# ---------------------------------------------------------------------------
# Keywords
# ---------------------------------------------------------------------------

MAX_KEYWORDS = 50
TOP_KEYWORDS_PER_CATEGORY = 5

# Polish beauty-industry search terms, matched as lower-case substrings
BEAUTY_KEYWORDS = (
    # face
    "lifting", "mezoterapia", "botox", "kwas hialuronowy", "peeling", "mikrodermabrazja",
    "oczyszczanie", "nawilżanie", "odmładzanie", "redukcja zmarszczek", "ujędrnianie",
    "kolagen", "retinol", "witamina c", "hydrafacial", "peel", "laser", "rf",
    # body
    "endermologia", "lipoliza", "kriolipoliza", "masaż", "drenaż limfatyczny",
    "cellulit", "rozstępy", "wyszczuplanie", "modelowanie", "ujędrnianie ciała",
    "karboksyterapia", "liposukcja", "cavitation", "ultradźwięki",
    # hair removal
    "depilacja laserowa", "depilacja", "woskowanie", "ipl", "shr",
    "bikini", "nogi", "pachy", "twarz", "wąsik", "broda",
    # nails
    "manicure", "pedicure", "hybryda", "żel", "przedłużanie", "paznokcie",
    "stylizacja paznokci", "japoński",
    # hair
    "strzyżenie", "koloryzacja", "balayage", "ombre", "keratyna",
    "botox na włosy", "regeneracja", "laminowanie", "prostowanie",
    # brows and lashes
    "brwi", "rzęsy", "henna", "laminowanie brwi", "przedłużanie rzęs", "microblading",
    "pmu", "makijaż permanentny",
    # other
    "konsultacja", "pakiet", "promocja", "bestseller", "nowość", "premium",
    "relaks", "spa", "wellness", "detoks", "kroplówka", "infuzja",
)


def extract_keywords(document: ScrapedDocument) -> list[KeywordHit]:
    """Count industry keywords in service names and descriptions, most frequent first."""
    hits: dict[str, KeywordHit] = {}
    for category in document.categories:
        for service in category.services:
            haystack = f"{service.name} {service.description or ''}".lower()
            for keyword in BEAUTY_KEYWORDS:
                if keyword not in haystack:
                    continue
                hit = hits.setdefault(keyword, KeywordHit(keyword))
                hit.count += 1
                if category.name not in hit.categories:
                    hit.categories.append(category.name)
                hit.services.append(service.name)

    # Stable: ties keep first-seen order
    return sorted(hits.values(), key=lambda h: h.count, reverse=True)[:MAX_KEYWORDS]


def keyword_distribution(document: ScrapedDocument, keywords: list[KeywordHit]) -> list[CategoryKeywords]:
    """Keywords per category, categories with the most keywords first."""
    distribution = []
    for category in document.categories:
        found = [k.keyword for k in keywords if category.name in k.categories]
        distribution.append(
            CategoryKeywords(
                category_name=category.name,
                keyword_count=len(found),
                top_keywords=found[:TOP_KEYWORDS_PER_CATEGORY],
            )
        )
    return sorted(distribution, key=lambda c: c.keyword_count, reverse=True)


def build_keyword_report(document: ScrapedDocument) -> KeywordReport:
    keywords = extract_keywords(document)
    return KeywordReport(keywords=keywords, category_distribution=keyword_distribution(document, keywords))
