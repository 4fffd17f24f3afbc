"""Core types and DTOs for the salon pricelist audit pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class GrowthTipCategory(str, Enum):
    """Area a growth tip targets. Values are the product's wire labels."""

    SEO = "SEO"
    CONVERSION = "Konwersja"
    RETENTION = "Retencja"
    IMAGE = "Wizerunek"


class GrowthTipImpact(str, Enum):
    """Expected impact of a growth tip."""

    HIGH = "Wysoki"
    MEDIUM = "Średni"
    LOW = "Niski"


class ValidationCode(str, Enum):
    """Classification of a listing that cannot be analyzed."""

    NO_CATEGORIES = "NO_CATEGORIES"
    TOO_FEW_SERVICES = "TOO_FEW_SERVICES"
    TOO_MANY_EMPTY_CATEGORIES = "TOO_MANY_EMPTY_CATEGORIES"


# ---------------------------------------------------------------------------
# Scraped listing
# ---------------------------------------------------------------------------


@dataclass
class ScrapedService:
    """A single priced service. Identified only by its position in the category."""

    name: str
    price: str
    duration: str | None = None
    description: str | None = None

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "price": self.price,
            "duration": self.duration,
            "description": self.description,
        }


@dataclass
class ScrapedCategory:
    name: str
    services: list[ScrapedService] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "services": [s.to_dict() for s in self.services],
        }


@dataclass
class ScrapedDocument:
    """Structured result of extracting salon services from a listing."""

    categories: list[ScrapedCategory] = field(default_factory=list)
    source_text: str = ""
    salon_name: str | None = None
    salon_address: str | None = None
    logo_url: str | None = None

    @property
    def total_service_count(self) -> int:
        return sum(len(c.services) for c in self.categories)

    def iter_services(self):
        for category in self.categories:
            yield from category.services

    def to_dict(self) -> dict:
        """Serialize to the persisted camelCase payload."""
        return {
            "salonName": self.salon_name,
            "salonAddress": self.salon_address,
            "logoUrl": self.logo_url,
            "categories": [c.to_dict() for c in self.categories],
            "totalServiceCount": self.total_service_count,
            "sourceText": self.source_text,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ScrapedDocument:
        """Rebuild a document from its persisted payload.

        The stored ``totalServiceCount`` is ignored; the count is always
        derived from the categories.
        """
        categories = []
        for raw_cat in data.get("categories") or []:
            services = [
                ScrapedService(
                    name=str(raw_svc.get("name", "")),
                    price=str(raw_svc.get("price", "")),
                    duration=raw_svc.get("duration") or None,
                    description=raw_svc.get("description") or None,
                )
                for raw_svc in raw_cat.get("services") or []
            ]
            categories.append(ScrapedCategory(name=str(raw_cat.get("name", "")), services=services))

        return cls(
            categories=categories,
            source_text=data.get("sourceText") or "",
            salon_name=data.get("salonName"),
            salon_address=data.get("salonAddress"),
            logo_url=data.get("logoUrl"),
        )


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


@dataclass
class ValidationFailure:
    """Why a document cannot go to analysis. Returned, never raised."""

    code: ValidationCode
    message: str
    details: dict[str, int] = field(default_factory=dict)

    @property
    def retryable(self) -> bool:
        # Re-fetching the same listing will not produce more services
        return self.code != ValidationCode.TOO_FEW_SERVICES

    def to_dict(self) -> dict:
        return {"code": self.code.value, "message": self.message, "details": dict(self.details)}


# ---------------------------------------------------------------------------
# Statistics
# ---------------------------------------------------------------------------


@dataclass
class CategorySize:
    name: str
    count: int


@dataclass
class AuditStatistics:
    """Deterministic, non-AI metrics. Recomputed on every run."""

    total_services: int = 0
    total_categories: int = 0
    services_with_description: int = 0
    services_with_duration: int = 0
    services_with_fixed_price: int = 0
    avg_services_per_category: float = 0.0
    largest_category: CategorySize = field(default_factory=lambda: CategorySize("Brak", 0))
    smallest_category: CategorySize = field(default_factory=lambda: CategorySize("Brak", 0))
    duplicate_names: list[str] = field(default_factory=list)
    empty_categories: list[str] = field(default_factory=list)
    oversized_categories: list[str] = field(default_factory=list)  # > 20 services
    undersized_categories: list[str] = field(default_factory=list)  # 1-2 services

    def to_dict(self) -> dict:
        return {
            "totalServices": self.total_services,
            "totalCategories": self.total_categories,
            "servicesWithDescription": self.services_with_description,
            "servicesWithDuration": self.services_with_duration,
            "servicesWithFixedPrice": self.services_with_fixed_price,
            "avgServicesPerCategory": self.avg_services_per_category,
            "largestCategory": {"name": self.largest_category.name, "count": self.largest_category.count},
            "smallestCategory": {"name": self.smallest_category.name, "count": self.smallest_category.count},
            "duplicateNames": list(self.duplicate_names),
            "emptyCategories": list(self.empty_categories),
            "oversizedCategories": list(self.oversized_categories),
            "undersizedCategories": list(self.undersized_categories),
        }


@dataclass
class DimensionScores:
    """Rule-based partial scores derived from AuditStatistics."""

    completeness: int = 0  # 0-15: descriptions, durations, fixed prices
    ux: int = 0  # 0-5: penalties for structural problems

    def to_dict(self) -> dict:
        return {"completeness": self.completeness, "ux": self.ux}


# ---------------------------------------------------------------------------
# Keywords
# ---------------------------------------------------------------------------


@dataclass
class KeywordHit:
    """One industry keyword found in service names or descriptions."""

    keyword: str
    count: int = 0
    categories: list[str] = field(default_factory=list)
    services: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "keyword": self.keyword,
            "count": self.count,
            "categories": list(self.categories),
            "services": list(self.services),
        }


@dataclass
class CategoryKeywords:
    category_name: str
    keyword_count: int
    top_keywords: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "categoryName": self.category_name,
            "keywordCount": self.keyword_count,
            "topKeywords": list(self.top_keywords),
        }


@dataclass
class KeywordReport:
    keywords: list[KeywordHit] = field(default_factory=list)
    category_distribution: list[CategoryKeywords] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "keywords": [k.to_dict() for k in self.keywords],
            "categoryDistribution": [c.to_dict() for c in self.category_distribution],
        }


# ---------------------------------------------------------------------------
# Audit report
# ---------------------------------------------------------------------------


@dataclass
class Weakness:
    point: str
    consequence: str


@dataclass
class BeforeAfterExample:
    before: str
    after: str
    explanation: str


@dataclass
class GrowthTip:
    category: GrowthTipCategory
    title: str
    description: str
    impact: GrowthTipImpact


@dataclass
class AuditReport:
    """Composite narrative-plus-score assessment of a pricelist.

    Created fresh per analysis; re-analysis produces a new report.
    """

    overall_score: int = 50
    general_feedback: str = ""
    sales_potential: str = ""
    strengths: list[str] = field(default_factory=list)
    weaknesses: list[Weakness] = field(default_factory=list)
    recommendations: list[str] = field(default_factory=list)
    before_after: BeforeAfterExample | None = None
    growth_tips: list[GrowthTip] = field(default_factory=list)

    def to_dict(self) -> dict:
        """Serialize to the persisted camelCase payload."""
        return {
            "overallScore": self.overall_score,
            "generalFeedback": self.general_feedback,
            "salesPotential": self.sales_potential,
            "strengths": list(self.strengths),
            "weaknesses": [{"point": w.point, "consequence": w.consequence} for w in self.weaknesses],
            "recommendations": list(self.recommendations),
            "beforeAfterExample": (
                {
                    "before": self.before_after.before,
                    "after": self.before_after.after,
                    "explanation": self.before_after.explanation,
                }
                if self.before_after is not None
                else None
            ),
            "growthTips": [
                {
                    "category": t.category.value,
                    "title": t.title,
                    "description": t.description,
                    "impact": t.impact.value,
                }
                for t in self.growth_tips
            ],
        }


@dataclass
class AuditOutcome:
    """Everything one successful pipeline run hands off to persistence."""

    document: ScrapedDocument
    statistics: AuditStatistics
    report: AuditReport
    scores: DimensionScores = field(default_factory=DimensionScores)
    keywords: KeywordReport = field(default_factory=KeywordReport)
