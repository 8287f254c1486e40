"""
Limb salvage recommendation generator.

Inspects the raw assessment (not only the aggregate score) and emits
recommendations in three tiers, concatenated immediate -> short-term ->
long-term. The chronic osteomyelitis block can issue critical amputation
recommendations whatever the aggregate score says.
"""
import logging
from typing import List

from ..models.assessment import LimbSalvageAssessment, SepsisSeverity, WagnerGrade
from ..models.outcome import (
    LimbSalvageRecommendation,
    RecommendationCategory,
    RecommendationPriority,
)
from . import clinical_defaults as defaults

logger = logging.getLogger(__name__)

CRITICAL_ISCHEMIA_ABI = 0.4
ARTERIAL_DISEASE_ABI = 0.9
HBA1C_TARGET = 8.0
LOW_ALBUMIN = 3.5
ADVANCED_CKD_STAGE = 4
EXTENSIVE_BONE_COUNT = 3

_PRIORITY_ORDER = {
    RecommendationPriority.CRITICAL: 0,
    RecommendationPriority.HIGH: 1,
    RecommendationPriority.MEDIUM: 2,
    RecommendationPriority.LOW: 3,
}


def generate_immediate_recommendations(
    assessment: LimbSalvageAssessment,
) -> List[LimbSalvageRecommendation]:
    recommendations = []
    sepsis = assessment.sepsis
    severity = sepsis.sepsis_severity if sepsis is not None else None

    # ── Sepsis ────────────────────────────────────────────────────────────
    if severity is SepsisSeverity.SEPTIC_SHOCK:
        recommendations.append(LimbSalvageRecommendation(
            category=RecommendationCategory.IMMEDIATE,
            priority=RecommendationPriority.CRITICAL,
            recommendation="Initiate sepsis bundle protocol",
            rationale="Patient in septic shock - requires immediate hemodynamic support and antibiotics",
            timeframe="Within 1 hour",
        ))
    elif severity in (SepsisSeverity.SEVERE_SEPSIS, SepsisSeverity.SEPSIS):
        recommendations.append(LimbSalvageRecommendation(
            category=RecommendationCategory.IMMEDIATE,
            priority=RecommendationPriority.CRITICAL,
            recommendation="Start broad-spectrum IV antibiotics",
            rationale="Active sepsis requires immediate antimicrobial therapy",
            timeframe="Within 3 hours",
        ))

    # ── Critical limb ischemia ────────────────────────────────────────────
    if defaults.effective_abi(assessment) < CRITICAL_ISCHEMIA_ABI:
        recommendations.append(LimbSalvageRecommendation(
            category=RecommendationCategory.IMMEDIATE,
            priority=RecommendationPriority.CRITICAL,
            recommendation="Urgent vascular surgery consultation",
            rationale="Critical limb ischemia (ABI < 0.4) - revascularization assessment needed",
            timeframe="Within 24 hours",
        ))

    # ── Whole-foot gangrene ───────────────────────────────────────────────
    if assessment.wagner_grade is WagnerGrade.GRADE_5:
        recommendations.append(LimbSalvageRecommendation(
            category=RecommendationCategory.IMMEDIATE,
            priority=RecommendationPriority.CRITICAL,
            recommendation="Emergency surgical debridement or amputation",
            rationale="Wagner Grade 5 (gangrene involving entire foot) - source control required",
            timeframe="Within 24-48 hours",
        ))

    # ── Osteomyelitis with active sepsis ──────────────────────────────────
    if assessment.has_suspected_osteomyelitis and assessment.has_active_sepsis:
        recommendations.append(LimbSalvageRecommendation(
            category=RecommendationCategory.IMMEDIATE,
            priority=RecommendationPriority.HIGH,
            recommendation="Obtain cultures (blood, bone if possible) before antibiotics",
            rationale="Osteomyelitis with sepsis - targeted therapy requires culture data",
            timeframe="Before antibiotic initiation",
        ))

    recommendations.extend(_chronic_osteomyelitis_recommendations(assessment))
    return recommendations


def _chronic_osteomyelitis_recommendations(
    assessment: LimbSalvageAssessment,
) -> List[LimbSalvageRecommendation]:
    """
    Osteomyelitis rules that run regardless of the aggregate score.

    Chronic disease (> 6 weeks) with treatment failure or established bone
    destruction triggers a primary-amputation discussion. Failed treatment
    is flagged on its own even when the infection is not yet chronic.
    """
    if not assessment.has_suspected_osteomyelitis:
        return []

    osteo = assessment.osteomyelitis
    recommendations = []

    if osteo.is_chronic:
        if osteo.has_failed_treatment or osteo.has_severe_bone_changes:
            rationale = [
                "Chronic osteomyelitis (>6 weeks) has cure rates of only 60-80% even with "
                "combined surgical debridement and prolonged antibiotics."
            ]
            if osteo.sequestrum:
                rationale.append(
                    "Presence of sequestrum indicates established chronic infection with dead "
                    "bone that will not respond to antibiotics alone."
                )
            if osteo.has_failed_treatment:
                rationale.append("Previous treatment failure significantly worsens prognosis.")
            rationale.append(
                "Weigh quality of life, multiple surgery burden, and definitive cure with "
                "amputation vs prolonged limb salvage attempts."
            )
            recommendations.append(LimbSalvageRecommendation(
                category=RecommendationCategory.IMMEDIATE,
                priority=RecommendationPriority.CRITICAL,
                recommendation="CHRONIC OSTEOMYELITIS: Strongly consider primary amputation",
                rationale=" ".join(rationale),
                timeframe="Immediate MDT discussion required",
            ))

        if osteo.sequestrum:
            recommendations.append(LimbSalvageRecommendation(
                category=RecommendationCategory.IMMEDIATE,
                priority=RecommendationPriority.CRITICAL,
                recommendation="Sequestrum requires surgical removal or amputation",
                rationale=(
                    "Sequestrum (dead bone) acts as a foreign body and biofilm nidus - antibiotics "
                    "cannot penetrate. Without removal, infection will persist indefinitely."
                ),
                timeframe="Within 48-72 hours",
            ))

        if osteo.cloacae:
            recommendations.append(LimbSalvageRecommendation(
                category=RecommendationCategory.IMMEDIATE,
                priority=RecommendationPriority.HIGH,
                recommendation="Sinus tracts indicate chronic draining osteomyelitis",
                rationale=(
                    "Cloacae (drainage tracts through bone) are pathognomonic of chronic "
                    "osteomyelitis and rarely heal without radical surgery or amputation."
                ),
                timeframe="Surgical planning required",
            ))

    if osteo.has_failed_treatment:
        rationale = []
        if osteo.recurrent:
            rationale.append(
                "Recurrent osteomyelitis after treatment indicates antibiotic-resistant "
                "organisms or inadequate source control."
            )
        if osteo.has_failed_combined_therapy:
            rationale.append(
                "Failure of combined antibiotic + surgical treatment carries very poor "
                "prognosis for limb salvage."
            )
        rationale.append(
            "Consider quality of life benefits of definitive amputation over prolonged "
            "treatment attempts."
        )
        recommendations.append(LimbSalvageRecommendation(
            category=RecommendationCategory.IMMEDIATE,
            priority=RecommendationPriority.CRITICAL,
            recommendation="Treatment-resistant osteomyelitis: Amputation strongly indicated",
            rationale=" ".join(rationale),
            timeframe="Urgent surgical decision required",
        ))

    if osteo.bone_count >= EXTENSIVE_BONE_COUNT:
        recommendations.append(LimbSalvageRecommendation(
            category=RecommendationCategory.IMMEDIATE,
            priority=RecommendationPriority.HIGH,
            recommendation="Extensive multi-bone osteomyelitis: Consider proximal amputation",
            rationale=(
                f"Involvement of {osteo.bone_count} bones ({', '.join(osteo.affected_bones)}) "
                "indicates extensive infection. Multiple debridements rarely achieve cure and "
                "amputation level should be proximal to all infected bone."
            ),
            timeframe="Surgical planning required",
        ))

    return recommendations


def generate_short_term_recommendations(
    assessment: LimbSalvageAssessment,
) -> List[LimbSalvageRecommendation]:
    recommendations = []
    comorbidities = assessment.comorbidities

    if comorbidities is not None and comorbidities.hba1c is not None and comorbidities.hba1c > HBA1C_TARGET:
        recommendations.append(LimbSalvageRecommendation(
            category=RecommendationCategory.SHORT_TERM,
            priority=RecommendationPriority.HIGH,
            recommendation="Optimize glycemic control - target HbA1c < 8%",
            rationale=(
                f"Current HbA1c: {comorbidities.hba1c:g}% - Poor glycemic control impairs wound healing"
            ),
            timeframe="Within 1-2 weeks",
        ))

    abi = defaults.recorded_abi(assessment)
    if not assessment.angiogram_performed and abi is not None and abi < ARTERIAL_DISEASE_ABI:
        recommendations.append(LimbSalvageRecommendation(
            category=RecommendationCategory.SHORT_TERM,
            priority=RecommendationPriority.HIGH,
            recommendation="Perform CT or conventional angiography",
            rationale=(
                "ABI indicates arterial disease - detailed vascular mapping needed for "
                "revascularization planning"
            ),
            timeframe="Within 1 week",
        ))

    if assessment.wagner_grade is not None and assessment.wagner_grade >= WagnerGrade.GRADE_2:
        recommendations.append(LimbSalvageRecommendation(
            category=RecommendationCategory.SHORT_TERM,
            priority=RecommendationPriority.MEDIUM,
            recommendation="Surgical debridement of necrotic tissue",
            rationale="Deep wound (Wagner ≥2) requires removal of non-viable tissue",
            timeframe="Within 48-72 hours",
        ))

    recommendations.append(LimbSalvageRecommendation(
        category=RecommendationCategory.SHORT_TERM,
        priority=RecommendationPriority.MEDIUM,
        recommendation="Implement total contact casting or offloading device",
        rationale="Pressure relief is essential for diabetic foot ulcer healing",
        timeframe="Immediate and ongoing",
    ))

    if assessment.albumin is not None and assessment.albumin < LOW_ALBUMIN:
        recommendations.append(LimbSalvageRecommendation(
            category=RecommendationCategory.SHORT_TERM,
            priority=RecommendationPriority.MEDIUM,
            recommendation="Nutritional supplementation - high protein diet",
            rationale=f"Low albumin ({assessment.albumin:g} g/dL) impairs wound healing",
            timeframe="Start immediately",
        ))

    renal = assessment.renal_status
    if renal is not None and renal.ckd_stage is not None and renal.ckd_stage >= ADVANCED_CKD_STAGE:
        recommendations.append(LimbSalvageRecommendation(
            category=RecommendationCategory.SHORT_TERM,
            priority=RecommendationPriority.HIGH,
            recommendation="Nephrology consultation",
            rationale="Advanced CKD (Stage 4-5) affects wound healing and surgical risk",
            timeframe="Within 1 week",
        ))

    return recommendations


def generate_long_term_recommendations(
    assessment: LimbSalvageAssessment,
) -> List[LimbSalvageRecommendation]:
    recommendations = []
    comorbidities = assessment.comorbidities

    if comorbidities is not None and comorbidities.smoking:
        recommendations.append(LimbSalvageRecommendation(
            category=RecommendationCategory.LONG_TERM,
            priority=RecommendationPriority.HIGH,
            recommendation="Smoking cessation program",
            rationale="Smoking significantly impairs wound healing and increases amputation risk",
            timeframe="Ongoing",
        ))

    if comorbidities is not None and (
        comorbidities.coronary_artery_disease or comorbidities.peripheral_vascular_disease
    ):
        recommendations.append(LimbSalvageRecommendation(
            category=RecommendationCategory.LONG_TERM,
            priority=RecommendationPriority.MEDIUM,
            recommendation="Optimize cardiovascular risk factors (statin, antiplatelet)",
            rationale="Cardiovascular disease increases limb loss risk",
            timeframe="Ongoing",
        ))

    recommendations.extend([
        LimbSalvageRecommendation(
            category=RecommendationCategory.LONG_TERM,
            priority=RecommendationPriority.MEDIUM,
            recommendation="Regular podiatric surveillance every 1-3 months",
            rationale="Diabetic patients with ulcer history have high recurrence risk",
            timeframe="After wound healing",
        ),
        LimbSalvageRecommendation(
            category=RecommendationCategory.LONG_TERM,
            priority=RecommendationPriority.MEDIUM,
            recommendation="Custom therapeutic footwear",
            rationale="Prevents recurrence by reducing pressure on vulnerable areas",
            timeframe="After wound healing",
        ),
        LimbSalvageRecommendation(
            category=RecommendationCategory.LONG_TERM,
            priority=RecommendationPriority.LOW,
            recommendation="Diabetes foot care education",
            rationale="Patient education reduces reulceration rates by 50%",
            timeframe="During hospitalization and follow-up",
        ),
    ])
    return recommendations


def generate_recommendations(assessment: LimbSalvageAssessment) -> List[LimbSalvageRecommendation]:
    """
    All recommendations for the assessment, immediate first.
    Callers expect ``assessment.limb_salvage_score`` to be populated already.
    """
    recommendations = []
    recommendations.extend(generate_immediate_recommendations(assessment))
    recommendations.extend(generate_short_term_recommendations(assessment))
    recommendations.extend(generate_long_term_recommendations(assessment))

    critical = sum(1 for r in recommendations if r.priority is RecommendationPriority.CRITICAL)
    logger.debug("Generated %d recommendation(s), %d critical", len(recommendations), critical)
    return recommendations


def sort_by_priority(
    recommendations: List[LimbSalvageRecommendation],
) -> List[LimbSalvageRecommendation]:
    """Critical first; generation order is kept within a priority."""
    return sorted(recommendations, key=lambda r: _PRIORITY_ORDER[r.priority])
