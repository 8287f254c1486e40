"""
Amputation level recommender and management strategy determiner.

The level is chosen by an ordered list of named rules; the first rule that
returns a level wins. Chronic osteomyelitis with treatment failure or
established bone destruction sits at the head of the list so it can force
an amputation even when the aggregate score predicts good salvage.
"""
import logging
from typing import Callable, Optional, Tuple

from ..models.assessment import LimbSalvageAssessment, VesselPatency, WagnerGrade
from ..models.outcome import (
    AmputationDecision,
    AmputationLevel,
    ManagementStrategy,
    SalvageProbability,
)
from . import clinical_defaults as defaults

logger = logging.getLogger(__name__)

# Revascularisation window
REVASC_MIN_ABI = 0.3
REVASC_MAX_ABI = 0.9
REVASC_PREFERRED_ABI = 0.7

AmputationRule = Callable[[LimbSalvageAssessment], Optional[AmputationLevel]]


def _salvage_probability(assessment: LimbSalvageAssessment) -> Optional[SalvageProbability]:
    """None when no score has been attached to the assessment."""
    if assessment.limb_salvage_score is None:
        return None
    return assessment.limb_salvage_score.salvage_probability


# ── Rules ─────────────────────────────────────────────────────────────────

def chronic_osteomyelitis_override(assessment: LimbSalvageAssessment) -> Optional[AmputationLevel]:
    if not assessment.has_suspected_osteomyelitis:
        return None
    osteo = assessment.osteomyelitis
    if not osteo.is_chronic:
        return None
    if not (osteo.has_failed_treatment or osteo.has_severe_bone_changes):
        return None

    abi = defaults.effective_abi(assessment)

    # Extensive involvement or poor perfusion pushes the level proximally
    if osteo.bone_count >= 3 or abi < 0.5:
        return AmputationLevel.BKA if abi < 0.4 else AmputationLevel.TRANSMETATARSAL

    on_toe = "toe" in defaults.wound_location(assessment)
    phalanx = any("phalanx" in bone.lower() for bone in osteo.affected_bones)
    if osteo.bone_count <= 2 and (on_toe or phalanx):
        return AmputationLevel.RAY_AMPUTATION if abi >= 0.6 else AmputationLevel.TRANSMETATARSAL

    return AmputationLevel.TRANSMETATARSAL


def favourable_salvage(assessment: LimbSalvageAssessment) -> Optional[AmputationLevel]:
    if _salvage_probability(assessment) in (SalvageProbability.EXCELLENT, SalvageProbability.GOOD):
        return AmputationLevel.NONE
    return None


def wagner_5(assessment: LimbSalvageAssessment) -> Optional[AmputationLevel]:
    if assessment.wagner_grade is not WagnerGrade.GRADE_5:
        return None

    abi = defaults.effective_abi(assessment)
    arterial = assessment.arterial
    femoral_occluded = (
        arterial is not None and arterial.femoral_artery is VesselPatency.OCCLUDED
    )
    if abi < 0.4 and femoral_occluded:
        return AmputationLevel.AKA
    if abi < 0.5:
        return AmputationLevel.BKA
    return AmputationLevel.TRANSMETATARSAL


def wagner_4(assessment: LimbSalvageAssessment) -> Optional[AmputationLevel]:
    if assessment.wagner_grade is not WagnerGrade.GRADE_4:
        return None

    abi = defaults.effective_abi(assessment)
    location = defaults.wound_location(assessment)

    if "toe" in location or "digit" in location:
        if abi >= 0.6:
            return AmputationLevel.RAY_AMPUTATION
        if abi >= 0.4:
            return AmputationLevel.TRANSMETATARSAL
        return AmputationLevel.BKA

    # Forefoot gangrene
    if abi >= 0.5:
        return AmputationLevel.TRANSMETATARSAL
    return AmputationLevel.BKA


def wagner_3_very_poor(assessment: LimbSalvageAssessment) -> Optional[AmputationLevel]:
    if assessment.wagner_grade is not WagnerGrade.GRADE_3:
        return None
    if _salvage_probability(assessment) is not SalvageProbability.VERY_POOR:
        return None
    if defaults.effective_abi(assessment) < 0.4:
        return AmputationLevel.BKA
    return AmputationLevel.TRANSMETATARSAL


def very_poor_salvage(assessment: LimbSalvageAssessment) -> Optional[AmputationLevel]:
    if _salvage_probability(assessment) is not SalvageProbability.VERY_POOR:
        return None
    if defaults.effective_abi(assessment) < 0.4:
        return AmputationLevel.BKA
    return AmputationLevel.RAY_AMPUTATION


def poor_salvage(assessment: LimbSalvageAssessment) -> Optional[AmputationLevel]:
    if _salvage_probability(assessment) is SalvageProbability.POOR:
        return AmputationLevel.TOE_DISARTICULATION
    return None


def no_amputation(assessment: LimbSalvageAssessment) -> Optional[AmputationLevel]:
    return AmputationLevel.NONE


AMPUTATION_RULES: Tuple[Tuple[str, AmputationRule], ...] = (
    ("chronic_osteomyelitis_override", chronic_osteomyelitis_override),
    ("favourable_salvage", favourable_salvage),
    ("wagner_5", wagner_5),
    ("wagner_4", wagner_4),
    ("wagner_3_very_poor", wagner_3_very_poor),
    ("very_poor_salvage", very_poor_salvage),
    ("poor_salvage", poor_salvage),
    ("default", no_amputation),
)


def explain_amputation_level(assessment: LimbSalvageAssessment) -> AmputationDecision:
    """Run the precedence list and report the level with the rule that chose it."""
    for name, rule in AMPUTATION_RULES:
        level = rule(assessment)
        if level is not None:
            logger.debug("Amputation level %s selected by rule %s", level.value, name)
            return AmputationDecision(level=level, rule=name)
    # The final rule always answers
    raise RuntimeError("No amputation rule produced a level")


def recommend_amputation_level(assessment: LimbSalvageAssessment) -> AmputationLevel:
    return explain_amputation_level(assessment).level


def is_revascularization_feasible(assessment: LimbSalvageAssessment) -> bool:
    abi = defaults.effective_abi(assessment)
    arterial = assessment.arterial
    calcified = arterial is not None and arterial.calcification
    return REVASC_MIN_ABI <= abi < REVASC_MAX_ABI and not calcified


def determine_management(assessment: LimbSalvageAssessment) -> ManagementStrategy:
    """
    Management strategy from salvage probability, amputation level and
    revascularisation feasibility.

    Uses ``recommended_amputation_level`` when the caller attached one,
    otherwise recomputes it.
    """
    probability = _salvage_probability(assessment)
    level = assessment.recommended_amputation_level
    if level is None:
        level = recommend_amputation_level(assessment)
    feasible = is_revascularization_feasible(assessment)

    if probability in (SalvageProbability.EXCELLENT, SalvageProbability.GOOD):
        abi = defaults.effective_abi(assessment)
        if feasible and abi < REVASC_PREFERRED_ABI:
            strategy = ManagementStrategy.REVASCULARIZATION
        else:
            strategy = ManagementStrategy.CONSERVATIVE
    elif probability is SalvageProbability.FAIR:
        strategy = ManagementStrategy.REVASCULARIZATION if feasible else ManagementStrategy.CONSERVATIVE
    elif not level.is_major:
        strategy = ManagementStrategy.REVASCULARIZATION if feasible else ManagementStrategy.MINOR_AMPUTATION
    else:
        strategy = ManagementStrategy.MAJOR_AMPUTATION

    logger.debug(
        "Management %s (salvage=%s, level=%s, revascularizable=%s)",
        strategy.value, probability.value if probability else None, level.value, feasible,
    )
    return strategy
