"""Report Sanitizer & Normalizer — Pipeline Step 5.

Three separate passes, each used at a different stage:

  - parse_audit_report:   shape and type coercion of an external report payload
  - sanitize_report_data: storage safety (control chars, line endings, length caps)
  - sanitize_ai_response: presentation (emoji stripped, whitespace trimmed)

None of them raise on bad field values. parse_audit_report raises
ReportPayloadError only when the payload is not a JSON object at all.
"""

from __future__ import annotations

import json
import logging
import math
import re
from typing import Any

from salon_audit.audit.exceptions import ReportPayloadError
from salon_audit.audit.types import (
    AuditReport,
    BeforeAfterExample,
    GrowthTip,
    GrowthTipCategory,
    GrowthTipImpact,
    Weakness,
)

logger = logging.getLogger(__name__)

DEFAULT_SCORE = 50
DEFAULT_SALES_POTENTIAL = "Średni"
MAX_TEXT_LENGTH = 5000
MAX_LIST_ENTRIES = 10
MAX_GROWTH_TIPS = 4

_VALID_CATEGORIES = {c.value: c for c in GrowthTipCategory}
_VALID_IMPACTS = {i.value: i for i in GrowthTipImpact}

# ---------------------------------------------------------------------------
# Structural coercion
# ---------------------------------------------------------------------------

_CODE_FENCE_START = re.compile(r"^```(?:json)?\s*")
_CODE_FENCE_END = re.compile(r"\s*```$")
_TRAILING_COMMA = re.compile(r",(\s*[}\]])")


def sanitize_json_response(text: str) -> str:
    """Cut a JSON object out of a model answer: fences, chatter and trailing commas removed."""
    cleaned = _CODE_FENCE_START.sub("", text.strip())
    cleaned = _CODE_FENCE_END.sub("", cleaned).strip()

    first, last = cleaned.find("{"), cleaned.rfind("}")
    if first != -1 and last > first:
        cleaned = cleaned[first : last + 1]

    return _TRAILING_COMMA.sub(r"\1", cleaned)


def _load_payload(payload: str | bytes | dict[str, Any]) -> dict[str, Any]:
    if isinstance(payload, dict):
        return payload
    if isinstance(payload, bytes):
        payload = payload.decode("utf-8", errors="replace")
    if not isinstance(payload, str):
        raise ReportPayloadError(f"Unsupported report payload type: {type(payload).__name__}")
    try:
        data = json.loads(sanitize_json_response(payload))
    except json.JSONDecodeError as exc:
        raise ReportPayloadError(f"Report payload is not valid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise ReportPayloadError("Report payload is not a JSON object")
    return data


def _coerce_score(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return DEFAULT_SCORE
    if not math.isfinite(value) or value < 0 or value > 100:
        return DEFAULT_SCORE
    return int(round(value))


def _as_list(value: Any) -> list:
    return value if isinstance(value, list) else []


def _coerce_weaknesses(value: Any) -> list[Weakness]:
    weaknesses = []
    for entry in _as_list(value):
        if not isinstance(entry, dict) or not isinstance(entry.get("point"), str):
            continue
        consequence = entry.get("consequence")
        weaknesses.append(
            Weakness(point=entry["point"], consequence=consequence if isinstance(consequence, str) else "")
        )
    return weaknesses


def _coerce_before_after(value: Any) -> BeforeAfterExample | None:
    if not isinstance(value, dict):
        return None

    def text(key: str) -> str:
        item = value.get(key)
        return item if isinstance(item, str) else ""

    return BeforeAfterExample(before=text("before"), after=text("after"), explanation=text("explanation"))


def _coerce_growth_tips(value: Any) -> list[GrowthTip]:
    tips = []
    for entry in _as_list(value):
        if not isinstance(entry, dict):
            continue
        category = _VALID_CATEGORIES.get(entry.get("category")) if isinstance(entry.get("category"), str) else None
        impact = _VALID_IMPACTS.get(entry.get("impact")) if isinstance(entry.get("impact"), str) else None
        title, description = entry.get("title"), entry.get("description")
        if category is None or impact is None:
            continue
        if not isinstance(title, str) or not isinstance(description, str):
            continue
        tips.append(GrowthTip(category=category, title=title, description=description, impact=impact))
    return tips


def parse_audit_report(payload: str | bytes | dict[str, Any]) -> AuditReport:
    """Coerce an externally sourced report into a well-formed AuditReport.

    Idempotent: ``parse_audit_report(report.to_dict()) == report``.
    Growth tips with an unknown category or impact, or a non-string title or
    description, are dropped, not repaired.
    """
    data = _load_payload(payload)

    feedback = data.get("generalFeedback")
    potential = data.get("salesPotential")
    before_after = data.get("beforeAfterExample", data.get("beforeAfter"))

    return AuditReport(
        overall_score=_coerce_score(data.get("overallScore")),
        general_feedback=feedback if isinstance(feedback, str) else "",
        sales_potential=potential if isinstance(potential, str) else "",
        strengths=[s for s in _as_list(data.get("strengths")) if isinstance(s, str)],
        weaknesses=_coerce_weaknesses(data.get("weaknesses")),
        recommendations=[r for r in _as_list(data.get("recommendations")) if isinstance(r, str)],
        before_after=_coerce_before_after(before_after),
        growth_tips=_coerce_growth_tips(data.get("growthTips")),
    )


# ---------------------------------------------------------------------------
# Persistence sanitization
# ---------------------------------------------------------------------------

# NUL and other control characters except \t (0x09), \n (0x0A), \r (0x0D, normalized below)
_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]")
_BAD_UNICODE = re.compile("[\U0000FFFD\U0000FFFE\U0000FFFF]")


def clean_text(value: str | None) -> str:
    """Storage-safe copy of *value*: control chars gone, LF line endings, length capped."""
    if not value:
        return ""
    value = _CONTROL_CHARS.sub("", value)
    value = _BAD_UNICODE.sub("", value)
    value = value.replace("\r\n", "\n").replace("\r", "\n")
    return value[:MAX_TEXT_LENGTH]


def sanitize_report_data(report: AuditReport) -> AuditReport:
    """Return a copy of *report* safe to persist. Empty entries are dropped, lists capped."""
    weaknesses = [Weakness(point=clean_text(w.point), consequence=clean_text(w.consequence)) for w in report.weaknesses]
    tips = [
        GrowthTip(
            category=t.category,
            title=clean_text(t.title),
            description=clean_text(t.description),
            impact=t.impact,
        )
        for t in report.growth_tips
    ]
    example = report.before_after or BeforeAfterExample(before="", after="", explanation="")

    return AuditReport(
        overall_score=min(100, max(0, report.overall_score)),
        general_feedback=clean_text(report.general_feedback),
        sales_potential=clean_text(report.sales_potential) or DEFAULT_SALES_POTENTIAL,
        strengths=[s for s in map(clean_text, report.strengths) if s][:MAX_LIST_ENTRIES],
        weaknesses=[w for w in weaknesses if w.point][:MAX_LIST_ENTRIES],
        recommendations=[r for r in map(clean_text, report.recommendations) if r][:MAX_LIST_ENTRIES],
        before_after=BeforeAfterExample(
            before=clean_text(example.before),
            after=clean_text(example.after),
            explanation=clean_text(example.explanation),
        ),
        growth_tips=[t for t in tips if t.title][:MAX_GROWTH_TIPS],
    )


# ---------------------------------------------------------------------------
# Display sanitization
# ---------------------------------------------------------------------------

_EMOJI = re.compile(
    "["
    "\U0001F300-\U0001F9FF"  # symbols & pictographs, emoticons, transport
    "\U0001FA70-\U0001FAFF"  # symbols & pictographs extended-A
    "\U0001F000-\U0001F02F"  # mahjong
    "\U0001F0A0-\U0001F0FF"  # playing cards
    "\U0001F1E6-\U0001F1FF"  # regional indicators (flags)
    "\U00002600-\U000026FF"  # misc symbols
    "\U00002700-\U000027BF"  # dingbats
    "\U0000FE0F"  # emoji presentation selector
    "\U0000200D"  # zero width joiner
    "]"
)


def sanitize_ai_response(text: str) -> str:
    """Strip emoji and pictographs, then surrounding whitespace."""
    return _EMOJI.sub("", text or "").strip()
