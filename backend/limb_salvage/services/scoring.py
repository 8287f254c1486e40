"""
Limb Salvage Score.

Seven domain sub-scores, each clamped to its own maximum, summed into a
0-100 composite. Higher scores indicate higher risk and lower salvage
probability.

    wound 25 | ischemia 20 | infection 20 | renal 10
    comorbidity 15 | age 5 | nutrition 5
"""
import logging
from typing import Sequence, Tuple

from ..models.assessment import (
    BiopsyResult,
    CortexInvolvement,
    ImagingResult,
    LimbSalvageAssessment,
    OsteomyelitisAssessment,
    SepsisSeverity,
    VesselPatency,
    WagnerGrade,
    Waveform,
    exhaustive_table,
)
from ..models.outcome import LimbSalvageScore, RiskCategory, SalvageProbability
from . import clinical_defaults as defaults

logger = logging.getLogger(__name__)

MAX_SCORE = 100

WOUND_MAX = 25
ISCHEMIA_MAX = 20
INFECTION_MAX = 20
RENAL_MAX = 10
COMORBIDITY_MAX = 15
AGE_MAX = 5
NUTRITION_MAX = 5

WAGNER_POINTS = exhaustive_table(WagnerGrade, {
    WagnerGrade.GRADE_0: 0,
    WagnerGrade.GRADE_1: 2,
    WagnerGrade.GRADE_2: 4,
    WagnerGrade.GRADE_3: 6,
    WagnerGrade.GRADE_4: 9,
    WagnerGrade.GRADE_5: 12,
})

WAVEFORM_POINTS = exhaustive_table(Waveform, {
    Waveform.TRIPHASIC: 0,
    Waveform.BIPHASIC: 1,
    Waveform.MONOPHASIC: 3,
    Waveform.ABSENT: 4,
})

VESSEL_POINTS = exhaustive_table(VesselPatency, {
    VesselPatency.PATENT: 0.0,
    VesselPatency.STENOSIS: 0.5,
    VesselPatency.OCCLUDED: 1.0,
})

SEPSIS_POINTS = exhaustive_table(SepsisSeverity, {
    SepsisSeverity.NONE: 0,
    SepsisSeverity.SIRS: 2,
    SepsisSeverity.SEPSIS: 4,
    SepsisSeverity.SEVERE_SEPSIS: 6,
    SepsisSeverity.SEPTIC_SHOCK: 8,
})

MRI_POINTS = exhaustive_table(ImagingResult, {
    ImagingResult.POSITIVE: 2,
    ImagingResult.SUSPICIOUS: 1,
    ImagingResult.NEGATIVE: 0,
    ImagingResult.NOT_DONE: 0,
})

CORTEX_POINTS = exhaustive_table(CortexInvolvement, {
    CortexInvolvement.SUPERFICIAL: 0,
    CortexInvolvement.DEEP: 1,
    CortexInvolvement.FULL_THICKNESS: 2,
})

CKD_POINTS = {1: 0, 2: 1, 3: 2, 4: 4, 5: 6}

# (threshold, points) ladders, most severe rung first
WOUND_DURATION_LADDER = ((90, 4), (60, 3), (30, 2), (14, 1))      # days, strictly above
ABI_LADDER = ((0.4, 8), (0.6, 6), (0.8, 4), (0.9, 2))            # strictly below
HBA1C_LADDER = ((10, 3), (8.5, 2), (7.5, 1))                     # strictly above
DIABETES_DURATION_LADDER = ((20, 2), (10, 1))                    # years, strictly above
AGE_LADDER = ((80, 5), (70, 3), (60, 2), (50, 1))                # at or above
ALBUMIN_LADDER = ((2.5, 3), (3.0, 2), (3.5, 1))                  # strictly below

MAX_OCCLUSION_POINTS = 6


def _above(value: float, ladder: Sequence[Tuple[float, int]]) -> int:
    for threshold, points in ladder:
        if value > threshold:
            return points
    return 0


def _at_or_above(value: float, ladder: Sequence[Tuple[float, int]]) -> int:
    for threshold, points in ladder:
        if value >= threshold:
            return points
    return 0


def _below(value: float, ladder: Sequence[Tuple[float, int]]) -> int:
    for threshold, points in ladder:
        if value < threshold:
            return points
    return 0


def _clamp(score: float, maximum: float) -> float:
    return max(0, min(score, maximum))


def calculate_wound_score(assessment: LimbSalvageAssessment) -> float:
    """Wagner grade, WIfI wound grade, duration and debridement history (0-25)."""
    score = 0

    if assessment.wagner_grade is not None:
        score += WAGNER_POINTS[assessment.wagner_grade]

    if assessment.wifi_classification is not None:
        wifi_wound = defaults.or_default(
            assessment.wifi_classification.wound, defaults.DEFAULT_WIFI_GRADE
        )
        score += wifi_wound * 2

    duration = defaults.or_default(assessment.wound_duration, defaults.DEFAULT_WOUND_DURATION_DAYS)
    score += _above(duration, WOUND_DURATION_LADDER)

    # Repeated debridement without healing
    if assessment.previous_debridement:
        count = defaults.or_default(assessment.debridement_count, defaults.DEFAULT_DEBRIDEMENT_COUNT)
        score += 3 if count >= 3 else 1

    return _clamp(score, WOUND_MAX)


def calculate_ischemia_score(assessment: LimbSalvageAssessment) -> float:
    """ABI, Doppler waveform, named-artery occlusion and calcification (0-20)."""
    arterial = assessment.arterial
    if arterial is None:
        return 0

    score = _below(defaults.effective_abi(assessment), ABI_LADDER)

    if arterial.waveform is not None:
        score += WAVEFORM_POINTS[arterial.waveform]

    occlusion = sum(
        VESSEL_POINTS[patency] for patency in arterial.vessel_patency() if patency is not None
    )
    score += min(occlusion, MAX_OCCLUSION_POINTS)

    if arterial.calcification:
        score += 2

    return _clamp(score, ISCHEMIA_MAX)


def calculate_osteomyelitis_points(osteo: OsteomyelitisAssessment) -> int:
    """
    Osteomyelitis contribution to the infection score, uncapped.

    Chronic disease (tagged chronic or > 6 weeks) carries +4 on top of the
    acute baseline, and its structural markers add further weight. Treatment
    failure and multi-bone involvement compound independently.
    """
    if not osteo.suspected:
        return 0

    points = 2
    if osteo.probe_to_bone:
        points += 1
    if osteo.mri_findings is not None:
        points += MRI_POINTS[osteo.mri_findings]
    if osteo.bone_biopsy is BiopsyResult.POSITIVE:
        points += 2
    if osteo.radiographic_changes:
        points += 1

    if osteo.is_chronic:
        points += 4
        if osteo.sequestrum:
            points += 2
        if osteo.involucrum:
            points += 1
        if osteo.cloacae:
            points += 1
        if osteo.involved_cortex is not None:
            points += CORTEX_POINTS[osteo.involved_cortex]
    elif osteo.is_subacute:
        points += 2

    if osteo.recurrent:
        points += 3
    if osteo.has_failed_combined_therapy:
        points += 2
    elif osteo.previous_antibiotic or osteo.previous_debridement:
        points += 1

    if osteo.bone_count >= 3:
        points += 2
    elif osteo.bone_count == 2:
        points += 1

    return points


def calculate_infection_score(assessment: LimbSalvageAssessment) -> float:
    """Sepsis tier, qSOFA, osteomyelitis and inflammatory markers (0-20)."""
    score = 0
    sepsis = assessment.sepsis

    if sepsis is not None:
        if sepsis.sepsis_severity is not None:
            score += SEPSIS_POINTS[sepsis.sepsis_severity]
        score += defaults.or_default(sepsis.qsofa_score, defaults.DEFAULT_QSOFA)

    if assessment.osteomyelitis is not None:
        score += calculate_osteomyelitis_points(assessment.osteomyelitis)

    if sepsis is not None and sepsis.laboratory_features is not None:
        labs = sepsis.laboratory_features
        if defaults.or_default(labs.wbc, defaults.DEFAULT_LAB_VALUE) > 15:
            score += 1
        if defaults.or_default(labs.crp, defaults.DEFAULT_LAB_VALUE) > 100:
            score += 1
        if defaults.or_default(labs.procalcitonin, defaults.DEFAULT_LAB_VALUE) > 2:
            score += 1

    return _clamp(score, INFECTION_MAX)


def calculate_renal_score(assessment: LimbSalvageAssessment) -> float:
    """CKD stage and dialysis (0-10)."""
    renal = assessment.renal_status
    if renal is None:
        return 0

    score = CKD_POINTS.get(renal.ckd_stage, 0)
    if renal.on_dialysis:
        score += 4
    return _clamp(score, RENAL_MAX)


def calculate_comorbidity_score(assessment: LimbSalvageAssessment) -> float:
    """Glycaemic control, diabetes duration and cardiovascular burden (0-15)."""
    comorbidities = assessment.comorbidities
    if comorbidities is None:
        return 0

    score = _above(defaults.hba1c(assessment), HBA1C_LADDER)
    score += _above(
        defaults.or_default(comorbidities.diabetes_duration, defaults.DEFAULT_DIABETES_DURATION_YEARS),
        DIABETES_DURATION_LADDER,
    )

    if comorbidities.coronary_artery_disease:
        score += 2
    if comorbidities.heart_failure:
        score += 2
    if comorbidities.previous_stroke:
        score += 1
    if comorbidities.peripheral_vascular_disease:
        score += 2
    if comorbidities.previous_amputation:
        score += 2
    if comorbidities.smoking:
        score += 1

    return _clamp(score, COMORBIDITY_MAX)


def calculate_age_score(assessment: LimbSalvageAssessment) -> float:
    return _clamp(_at_or_above(defaults.patient_age(assessment), AGE_LADDER), AGE_MAX)


def calculate_nutritional_score(assessment: LimbSalvageAssessment) -> float:
    """Serum albumin and MUST screening score (0-5)."""
    score = _below(defaults.albumin(assessment), ALBUMIN_LADDER)

    must = defaults.must_score(assessment)
    if must >= 2:
        score += 2
    elif must == 1:
        score += 1

    return _clamp(score, NUTRITION_MAX)


def get_risk_category(percentage: float) -> RiskCategory:
    if percentage >= 70:
        return RiskCategory.VERY_HIGH
    if percentage >= 50:
        return RiskCategory.HIGH
    if percentage >= 30:
        return RiskCategory.MODERATE
    return RiskCategory.LOW


def get_salvage_probability(percentage: float) -> SalvageProbability:
    # Not a mirror of the risk ladder; the thresholds differ on purpose
    if percentage >= 80:
        return SalvageProbability.VERY_POOR
    if percentage >= 60:
        return SalvageProbability.POOR
    if percentage >= 40:
        return SalvageProbability.FAIR
    if percentage >= 20:
        return SalvageProbability.GOOD
    return SalvageProbability.EXCELLENT


def calculate_limb_salvage_score(assessment: LimbSalvageAssessment) -> LimbSalvageScore:
    """Sum the seven clamped domain sub-scores and classify the result."""
    wound = calculate_wound_score(assessment)
    ischemia = calculate_ischemia_score(assessment)
    infection = calculate_infection_score(assessment)
    renal = calculate_renal_score(assessment)
    comorbidity = calculate_comorbidity_score(assessment)
    age = calculate_age_score(assessment)
    nutritional = calculate_nutritional_score(assessment)

    total = wound + ischemia + infection + renal + comorbidity + age + nutritional
    percentage = total * 100 / MAX_SCORE

    score = LimbSalvageScore(
        wound_score=wound,
        ischemia_score=ischemia,
        infection_score=infection,
        renal_score=renal,
        comorbidity_score=comorbidity,
        age_score=age,
        nutritional_score=nutritional,
        total_score=total,
        max_score=MAX_SCORE,
        percentage=percentage,
        risk_category=get_risk_category(percentage),
        salvage_probability=get_salvage_probability(percentage),
    )
    logger.debug(
        "Limb salvage score %.1f/%d (risk=%s, salvage=%s)",
        total, MAX_SCORE, score.risk_category.value, score.salvage_probability.value,
    )
    return score
