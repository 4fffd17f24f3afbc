"""Audit Report Orchestrator — Pipeline Step 4.

Builds an AuditReport from a validated listing with three narrow model calls
issued one after another:

  1. core analysis     — score, feedback, sales potential, strengths, weaknesses
  2. recommendations   — five recommendations plus one before/after example
  3. growth tips       — four tagged tips

Each answer comes back in the line-oriented micro-format and is parsed by
``microformat.py``. Parts are merged by field name with no cross-checks.
A failing call fails the whole report; no partial report is returned.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Awaitable, Callable

from salon_audit.audit.microformat import (
    parse_core_analysis,
    parse_growth_tips,
    parse_recommendations,
)
from salon_audit.audit.prompts import (
    build_core_analysis_prompt,
    build_growth_tips_prompt,
    build_pricelist_summary,
    build_recommendations_prompt,
    sample_service_name,
)
from salon_audit.audit.types import AuditReport, ScrapedDocument
from salon_audit.core.metrics import AI_CALL_DURATION, AI_CALLS
from salon_audit.llm.base import BaseLlmClient

logger = logging.getLogger(__name__)

TOTAL_STEPS = 3

# Called as progress(step, total_steps) right before each model call
StepCallback = Callable[[int, int], Awaitable[None] | None]


class AuditReportOrchestrator:
    """Runs the three report calls against one model client."""

    def __init__(self, client: BaseLlmClient, on_step: StepCallback | None = None):
        self.client = client
        self.on_step = on_step

    async def _notify(self, step: int) -> None:
        if self.on_step is None:
            return
        result = self.on_step(step, TOTAL_STEPS)
        if result is not None:
            await result

    async def _call(self, step: int, name: str, prompt: str) -> str:
        await self._notify(step)
        logger.info("[Audit] Step %d/%d: %s", step, TOTAL_STEPS, name)

        started = time.monotonic()
        try:
            response = await self.client.complete(prompt)
        except Exception:
            AI_CALLS.labels(step=name, status="error").inc()
            logger.error("[Audit] Step %d/%d (%s) failed", step, TOTAL_STEPS, name, extra={"step": name})
            raise
        finally:
            AI_CALL_DURATION.labels(step=name).observe(time.monotonic() - started)

        AI_CALLS.labels(step=name, status="success").inc()
        logger.debug(
            "[Audit] Step %d answer: model=%s tokens=%d chars=%d",
            step,
            response.model,
            response.tokens,
            len(response.text),
        )
        if response.truncated:
            # Parsers fall back to defaults for whatever was cut off
            logger.warning("[Audit] Step %d answer truncated at max_tokens", step, extra={"step": name})
        return response.text

    async def generate(self, document: ScrapedDocument) -> AuditReport:
        """Generate the report. Any call failure propagates to the caller."""
        summary = build_pricelist_summary(document)
        sample_name = sample_service_name(document)
        known_names = [s.name for s in document.iter_services()]

        core_text = await self._call(1, "core_analysis", build_core_analysis_prompt(summary))
        core = parse_core_analysis(core_text)

        rec_text = await self._call(2, "recommendations", build_recommendations_prompt(summary, sample_name))
        recs = parse_recommendations(rec_text, sample_name, known_names)

        tips_text = await self._call(3, "growth_tips", build_growth_tips_prompt(summary))
        tips = parse_growth_tips(tips_text)

        report = AuditReport(
            overall_score=core.overall_score,
            general_feedback=core.general_feedback,
            sales_potential=core.sales_potential,
            strengths=core.strengths,
            weaknesses=core.weaknesses,
            recommendations=recs.recommendations,
            before_after=recs.before_after,
            growth_tips=tips,
        )
        logger.info(
            "[Audit] Report generation complete: score=%d, strengths=%d, weaknesses=%d, tips=%d",
            report.overall_score,
            len(report.strengths),
            len(report.weaknesses),
            len(report.growth_tips),
        )
        return report


async def generate_audit_report(
    document: ScrapedDocument,
    client: BaseLlmClient,
    on_step: StepCallback | None = None,
) -> AuditReport:
    """Convenience wrapper around AuditReportOrchestrator.generate()."""
    return await AuditReportOrchestrator(client, on_step=on_step).generate(document)
