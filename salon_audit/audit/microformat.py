"""Line-oriented micro-format for model responses.

Model answers are requested in a narrow text format instead of JSON, which
kept getting truncated on longer reports. Grammar (version GRAMMAR_VERSION):

  - ``MARKER: value``   a scalar field; MARKER is an upper-case token
  - ``MARKER:``         a section header; following list items belong to it
  - ``- item``          a list item (``*``, ``•`` and ``1.`` are accepted too)
  - ``a | b | c``       sub-fields inside an item or field value
  - an unmarked line directly after a continuable field extends its value

Markdown emphasis around markers and values is tolerated and stripped.
The prompts in ``prompts.py`` embed GRAMMAR_VERSION; change both together.

Each call has its own parser here. Parsers are pure and fall back to safe
defaults when a marker is missing, so rendering never sees an empty field.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum

from salon_audit.audit.types import (
    BeforeAfterExample,
    GrowthTip,
    GrowthTipCategory,
    GrowthTipImpact,
    Weakness,
)

GRAMMAR_VERSION = "audit-microformat/1"

FIELD_SEPARATOR = "|"

# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------

DEFAULT_SCORE = 50
DEFAULT_SALES_POTENTIAL = "Średni"
DEFAULT_CONSEQUENCE = "Wpływa negatywnie na doświadczenie klienta"
PLACEHOLDER_STRENGTH = "Cennik jest dostępny online"
PLACEHOLDER_WEAKNESS = Weakness(point="Brak szczegółowej analizy", consequence="Wymaga weryfikacji")
PLACEHOLDER_RECOMMENDATION = "Dodaj opisy do wszystkich usług"
DEFAULT_AFTER_SUFFIX = " - Profesjonalny Zabieg"
DEFAULT_EXPLANATION = "Dodano opis korzyści dla klienta"
PLACEHOLDER_TIP = GrowthTip(
    category=GrowthTipCategory.SEO,
    title="Optymalizacja nazw usług",
    description="Dodaj słowa kluczowe do nazw usług, które klienci wyszukują",
    impact=GrowthTipImpact.HIGH,
)
DEFAULT_TIP_TITLE = "Porada"
DEFAULT_TIP_DESCRIPTION = "Szczegóły do uzupełnienia"
MAX_GROWTH_TIPS = 4


# ---------------------------------------------------------------------------
# Grammar
# ---------------------------------------------------------------------------


class LineKind(str, Enum):
    FIELD = "field"
    SECTION = "section"
    ITEM = "item"
    TEXT = "text"


@dataclass(frozen=True)
class Marker:
    name: str
    kind: LineKind  # FIELD or SECTION
    continues: bool = False  # unmarked lines after it extend the value


@dataclass
class MicroLine:
    kind: LineKind
    value: str = ""
    marker: str = ""


def _grammar(*markers: Marker) -> dict[str, Marker]:
    return {m.name: m for m in markers}


CORE_GRAMMAR = _grammar(
    Marker("SCORE", LineKind.FIELD),
    Marker("FEEDBACK", LineKind.FIELD, continues=True),
    Marker("POTENTIAL", LineKind.FIELD, continues=True),
    Marker("STRENGTHS", LineKind.SECTION),
    Marker("WEAKNESSES", LineKind.SECTION),
)

RECOMMENDATIONS_GRAMMAR = _grammar(
    Marker("RECOMMENDATIONS", LineKind.SECTION),
    Marker("BEFORE_AFTER", LineKind.SECTION),
    Marker("BEFORE", LineKind.FIELD),
    Marker("AFTER", LineKind.FIELD, continues=True),
    Marker("EXPLANATION", LineKind.FIELD, continues=True),
)

GROWTH_TIPS_GRAMMAR = _grammar(
    Marker("TIP", LineKind.FIELD),
)

# "SCORE: 72", "**SCORE:** 72", "## FEEDBACK: ..."
_MARKER_LINE = re.compile(r"^[#*_\s]*([A-Z][A-Z_]*)[*_]*\s*:[*_]*\s*(.*)$")

# "- item", "* item", "• item", "1. item", not "**bold**"
_ITEM_LINE = re.compile(r"^(?:[-•]|\*(?!\*)|\d+[.)])\s*(.*)$")

_BOLD = re.compile(r"\*\*(.+?)\*\*")
_BOLD_UNDERSCORE = re.compile(r"__(.+?)__")
_ITALIC = re.compile(r"(?<!\w)\*([^*]+)\*(?!\w)")
_ITALIC_UNDERSCORE = re.compile(r"(?<!\w)_([^_]+)_(?!\w)")
_INLINE_CODE = re.compile(r"`([^`]+)`")
_HEADER = re.compile(r"^#{1,6}\s+", re.MULTILINE)
_STRIKE = re.compile(r"~~(.+?)~~")
_EDGE_ASTERISKS = re.compile(r"^\*+|\*+$")


def strip_markdown(text: str) -> str:
    """Remove bold, italic, code, header and strikethrough markup."""
    text = _BOLD.sub(r"\1", text)
    text = _BOLD_UNDERSCORE.sub(r"\1", text)
    text = _ITALIC.sub(r"\1", text)
    text = _ITALIC_UNDERSCORE.sub(r"\1", text)
    text = _INLINE_CODE.sub(r"\1", text)
    text = _HEADER.sub("", text)
    text = _STRIKE.sub(r"\1", text)
    text = _EDGE_ASTERISKS.sub("", text)
    return text.strip()


def scan(text: str, grammar: dict[str, Marker]) -> list[MicroLine]:
    """Split a response into classified lines.

    Upper-case tokens not in *grammar* are treated as plain text. Blank lines
    are dropped but end any field continuation.
    """
    lines: list[MicroLine] = []
    open_field: MicroLine | None = None

    for raw in (text or "").splitlines():
        line = raw.strip()
        if not line:
            open_field = None
            continue

        match = _MARKER_LINE.match(line)
        marker = grammar.get(match.group(1)) if match else None
        if marker is not None:
            value = strip_markdown(match.group(2).strip())
            entry = MicroLine(kind=marker.kind, value=value, marker=marker.name)
            lines.append(entry)
            open_field = entry if marker.continues else None
            continue

        item = _ITEM_LINE.match(line)
        if item:
            lines.append(MicroLine(kind=LineKind.ITEM, value=strip_markdown(item.group(1).strip())))
            open_field = None
            continue

        if open_field is not None:
            extra = strip_markdown(line)
            open_field.value = f"{open_field.value} {extra}".strip() if open_field.value else extra
            continue

        lines.append(MicroLine(kind=LineKind.TEXT, value=line))

    return lines


def split_fields(value: str) -> list[str]:
    return [strip_markdown(part.strip()) for part in value.split(FIELD_SEPARATOR)]


# ---------------------------------------------------------------------------
# Call 1: core analysis
# ---------------------------------------------------------------------------


@dataclass
class CoreAnalysis:
    overall_score: int = DEFAULT_SCORE
    general_feedback: str = ""
    sales_potential: str = DEFAULT_SALES_POTENTIAL
    strengths: list[str] = field(default_factory=list)
    weaknesses: list[Weakness] = field(default_factory=list)


def parse_score(value: str) -> int:
    """First integer in *value*, clamped to 0-100; DEFAULT_SCORE if there is none."""
    match = re.search(r"-?\d+", value or "")
    if not match:
        return DEFAULT_SCORE
    return min(100, max(0, int(match.group(0))))


def parse_core_analysis(text: str) -> CoreAnalysis:
    result = CoreAnalysis()
    section = ""

    for line in scan(text, CORE_GRAMMAR):
        if line.kind == LineKind.SECTION:
            section = line.marker
        elif line.marker == "SCORE":
            result.overall_score = parse_score(line.value)
        elif line.marker == "FEEDBACK":
            result.general_feedback = line.value
        elif line.marker == "POTENTIAL":
            result.sales_potential = line.value or DEFAULT_SALES_POTENTIAL
        elif line.kind == LineKind.ITEM and line.value:
            if section == "STRENGTHS":
                result.strengths.append(line.value)
            elif section == "WEAKNESSES":
                parts = split_fields(line.value)
                result.weaknesses.append(
                    Weakness(
                        point=parts[0] or line.value,
                        consequence=parts[1] if len(parts) > 1 and parts[1] else DEFAULT_CONSEQUENCE,
                    )
                )

    if not result.strengths:
        result.strengths.append(PLACEHOLDER_STRENGTH)
    if not result.weaknesses:
        result.weaknesses.append(Weakness(PLACEHOLDER_WEAKNESS.point, PLACEHOLDER_WEAKNESS.consequence))
    return result


# ---------------------------------------------------------------------------
# Call 2: recommendations + before/after
# ---------------------------------------------------------------------------


@dataclass
class RecommendationSet:
    recommendations: list[str]
    before_after: BeforeAfterExample


def _normalize(name: str) -> str:
    return " ".join(name.split()).lower()


def match_known_name(value: str, known_names: list[str]) -> str | None:
    """The listing's own spelling of *value*, or None if it is not a real service name."""
    wanted = _normalize(value.strip("\"'„”“ "))
    if not wanted:
        return None
    for name in known_names:
        if _normalize(name) == wanted:
            return name
    return None


def parse_recommendations(text: str, sample_name: str, known_names: list[str]) -> RecommendationSet:
    """Parse call 2. ``before`` is always a service name taken from the listing."""
    recommendations: list[str] = []
    before = sample_name
    after = sample_name + DEFAULT_AFTER_SUFFIX
    explanation = DEFAULT_EXPLANATION
    section = ""

    for line in scan(text, RECOMMENDATIONS_GRAMMAR):
        if line.kind == LineKind.SECTION:
            section = line.marker
        elif line.marker == "BEFORE":
            before = match_known_name(line.value, known_names) or sample_name
        elif line.marker == "AFTER":
            after = line.value or after
        elif line.marker == "EXPLANATION":
            explanation = line.value or explanation
        elif line.kind == LineKind.ITEM and section == "RECOMMENDATIONS" and line.value:
            recommendations.append(line.value)

    if not recommendations:
        recommendations.append(PLACEHOLDER_RECOMMENDATION)

    return RecommendationSet(
        recommendations=recommendations,
        before_after=BeforeAfterExample(before=before, after=after, explanation=explanation),
    )


# ---------------------------------------------------------------------------
# Call 3: growth tips
# ---------------------------------------------------------------------------

_CATEGORY_ALIASES: dict[str, GrowthTipCategory] = {}
for _category in GrowthTipCategory:
    _CATEGORY_ALIASES[_category.value.lower()] = _category
    _CATEGORY_ALIASES[_category.name.lower()] = _category

_IMPACT_ALIASES: dict[str, GrowthTipImpact] = {"sredni": GrowthTipImpact.MEDIUM}
for _impact in GrowthTipImpact:
    _IMPACT_ALIASES[_impact.value.lower()] = _impact
    _IMPACT_ALIASES[_impact.name.lower()] = _impact


def _label(value: str) -> str:
    return value.strip("[]() ").lower()


def parse_growth_tips(text: str) -> list[GrowthTip]:
    """Parse call 3. Unknown labels are repaired, lines with too few sub-fields skipped."""
    tips: list[GrowthTip] = []

    for line in scan(text, GROWTH_TIPS_GRAMMAR):
        if line.marker != "TIP":
            continue
        parts = split_fields(line.value)
        if len(parts) < 4:
            continue
        tips.append(
            GrowthTip(
                category=_CATEGORY_ALIASES.get(_label(parts[0]), GrowthTipCategory.CONVERSION),
                title=parts[1] or DEFAULT_TIP_TITLE,
                description=parts[2] or DEFAULT_TIP_DESCRIPTION,
                impact=_IMPACT_ALIASES.get(_label(parts[3]), GrowthTipImpact.MEDIUM),
            )
        )

    if not tips:
        tips.append(
            GrowthTip(
                category=PLACEHOLDER_TIP.category,
                title=PLACEHOLDER_TIP.title,
                description=PLACEHOLDER_TIP.description,
                impact=PLACEHOLDER_TIP.impact,
            )
        )
    return tips[:MAX_GROWTH_TIPS]
