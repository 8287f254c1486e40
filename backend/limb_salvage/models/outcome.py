"""
Derived limb salvage outputs: score, recommendations, amputation level and
management strategy. Recomputed on every call and never mutated.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple


class RiskCategory(str, Enum):
    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"
    VERY_HIGH = "very_high"


class SalvageProbability(str, Enum):
    EXCELLENT = "excellent"
    GOOD = "good"
    FAIR = "fair"
    POOR = "poor"
    VERY_POOR = "very_poor"


class RecommendationCategory(str, Enum):
    IMMEDIATE = "immediate"
    SHORT_TERM = "short_term"
    LONG_TERM = "long_term"


class RecommendationPriority(str, Enum):
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class AmputationLevel(str, Enum):
    """Least to most proximal."""
    NONE = "none"
    TOE_DISARTICULATION = "toe_disarticulation"
    RAY_AMPUTATION = "ray_amputation"
    TRANSMETATARSAL = "transmetatarsal"
    BKA = "bka"
    AKA = "aka"

    @property
    def is_major(self) -> bool:
        return self in (AmputationLevel.BKA, AmputationLevel.AKA)


class ManagementStrategy(str, Enum):
    CONSERVATIVE = "conservative"
    REVASCULARIZATION = "revascularization"
    MINOR_AMPUTATION = "minor_amputation"
    MAJOR_AMPUTATION = "major_amputation"


@dataclass(frozen=True)
class LimbSalvageScore:
    wound_score: float
    ischemia_score: float
    infection_score: float
    renal_score: float
    comorbidity_score: float
    age_score: float
    nutritional_score: float
    total_score: float
    max_score: int
    percentage: float
    risk_category: RiskCategory
    salvage_probability: SalvageProbability

    def __post_init__(self):
        # Accept raw values when a stored score is re-hydrated by a caller
        if not isinstance(self.risk_category, RiskCategory):
            object.__setattr__(self, "risk_category", RiskCategory(self.risk_category))
        if not isinstance(self.salvage_probability, SalvageProbability):
            object.__setattr__(
                self, "salvage_probability", SalvageProbability(self.salvage_probability)
            )


@dataclass(frozen=True)
class LimbSalvageRecommendation:
    category: RecommendationCategory
    priority: RecommendationPriority
    recommendation: str
    rationale: str
    timeframe: str


@dataclass(frozen=True)
class AmputationDecision:
    level: AmputationLevel
    rule: str  # Name of the precedence rule that selected the level


@dataclass(frozen=True)
class SINBADScore:
    site: int
    ischemia: int
    neuropathy: int
    bacterial_infection: int
    area: int
    depth: int
    total: int = 0  # Never populated; see component_sum

    @property
    def component_sum(self) -> int:
        return (
            self.site + self.ischemia + self.neuropathy
            + self.bacterial_infection + self.area + self.depth
        )


@dataclass(frozen=True)
class ScoreDisplay:
    summary: str
    color: str
    recommendation: str


@dataclass(frozen=True)
class LimbSalvageEvaluation:
    score: LimbSalvageScore
    amputation_level: AmputationLevel
    amputation_rule: str
    management: ManagementStrategy
    recommendations: Tuple[LimbSalvageRecommendation, ...]
    sinbad: Optional[SINBADScore] = None
