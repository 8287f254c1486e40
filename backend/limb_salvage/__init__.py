"""Diabetic foot limb salvage decision support."""
from .models import (
    AmputationDecision,
    AmputationLevel,
    LimbSalvageAssessment,
    LimbSalvageEvaluation,
    LimbSalvageRecommendation,
    LimbSalvageScore,
    ManagementStrategy,
)
from .services.amputation import (
    determine_management,
    explain_amputation_level,
    recommend_amputation_level,
)
from .services.classification import (
    calculate_sinbad_score,
    format_score_display,
    get_texas_description,
    get_wagner_description,
)
from .services.limb_salvage_engine import LimbSalvageEngine, limb_salvage_engine
from .services.recommendations import generate_recommendations, sort_by_priority
from .services.scoring import calculate_limb_salvage_score
from .services.sepsis_criteria import calculate_qsofa_score, calculate_sirs_score

__version__ = "1.0.0"

__all__ = [
    "AmputationDecision",
    "AmputationLevel",
    "LimbSalvageAssessment",
    "LimbSalvageEvaluation",
    "LimbSalvageEngine",
    "LimbSalvageRecommendation",
    "LimbSalvageScore",
    "ManagementStrategy",
    "calculate_limb_salvage_score",
    "calculate_qsofa_score",
    "calculate_sinbad_score",
    "calculate_sirs_score",
    "determine_management",
    "explain_amputation_level",
    "format_score_display",
    "generate_recommendations",
    "get_texas_description",
    "get_wagner_description",
    "limb_salvage_engine",
    "recommend_amputation_level",
    "sort_by_priority",
]
