"""
Central default table for missing assessment values.

Every calculator resolves a missing (None) field through this module rather
than carrying its own fallback literal. Defaults sit at the normal end of
each domain, so an incomplete assessment scores towards lower risk instead of
failing. Zero is a recorded value and is never replaced.
"""
from typing import Optional

from ..models.assessment import LimbSalvageAssessment

DEFAULT_ABI = 1.0
DEFAULT_HBA1C = 7.0                  # %
DEFAULT_ALBUMIN = 4.0                # g/dL
DEFAULT_MUST_SCORE = 0
DEFAULT_PATIENT_AGE = 0              # contributes no age points
DEFAULT_WOUND_DURATION_DAYS = 0
DEFAULT_DEBRIDEMENT_COUNT = 0
DEFAULT_QSOFA = 0
DEFAULT_LAB_VALUE = 0.0              # WBC, CRP, procalcitonin
DEFAULT_DIABETES_DURATION_YEARS = 0
DEFAULT_WIFI_GRADE = 0
DEFAULT_WOUND_AREA_CM2 = 0.0
DEFAULT_WOUND_DEPTH_CM = 0.0
# A missing CKD stage contributes nothing; there is no stage default.


def or_default(value, default):
    return default if value is None else value


def recorded_abi(assessment: LimbSalvageAssessment) -> Optional[float]:
    """The measured ABI, or None when no arterial Doppler value was recorded."""
    arterial = assessment.arterial
    if arterial is None:
        return None
    return arterial.abi


def effective_abi(assessment: LimbSalvageAssessment) -> float:
    return or_default(recorded_abi(assessment), DEFAULT_ABI)


def patient_age(assessment: LimbSalvageAssessment) -> int:
    return or_default(assessment.patient_age, DEFAULT_PATIENT_AGE)


def hba1c(assessment: LimbSalvageAssessment) -> float:
    if assessment.comorbidities is None:
        return DEFAULT_HBA1C
    return or_default(assessment.comorbidities.hba1c, DEFAULT_HBA1C)


def albumin(assessment: LimbSalvageAssessment) -> float:
    return or_default(assessment.albumin, DEFAULT_ALBUMIN)


def must_score(assessment: LimbSalvageAssessment) -> int:
    return or_default(assessment.must_score, DEFAULT_MUST_SCORE)


def wound_area(assessment: LimbSalvageAssessment) -> float:
    if assessment.wound_size is None:
        return DEFAULT_WOUND_AREA_CM2
    return or_default(assessment.wound_size.area, DEFAULT_WOUND_AREA_CM2)


def wound_depth(assessment: LimbSalvageAssessment) -> float:
    if assessment.wound_size is None:
        return DEFAULT_WOUND_DEPTH_CM
    return or_default(assessment.wound_size.depth, DEFAULT_WOUND_DEPTH_CM)


def wound_location(assessment: LimbSalvageAssessment) -> str:
    """Lower-cased location text; empty when not recorded."""
    return (assessment.wound_location or "").lower()
