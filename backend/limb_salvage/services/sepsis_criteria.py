"""
Bedside sepsis criteria used when an assessment is captured.

A missing observation never counts as a positive criterion.
"""
from typing import Optional

from ..models.assessment import SepsisClinicalFeatures

# qSOFA
QSOFA_RESPIRATORY_RATE = 22   # >=
QSOFA_SYSTOLIC_BP = 100       # <=

# SIRS
SIRS_TEMP_HIGH = 38.0
SIRS_TEMP_LOW = 36.0
SIRS_HEART_RATE = 90
SIRS_RESPIRATORY_RATE = 20
SIRS_WBC_HIGH = 12.0
SIRS_WBC_LOW = 4.0


def calculate_qsofa_score(features: SepsisClinicalFeatures) -> int:
    """quick SOFA, 0-3."""
    score = 0
    if features.altered_mental_status:
        score += 1
    if features.respiratory_rate is not None and features.respiratory_rate >= QSOFA_RESPIRATORY_RATE:
        score += 1
    if features.systolic_bp is not None and features.systolic_bp <= QSOFA_SYSTOLIC_BP:
        score += 1
    return score


def calculate_sirs_score(features: SepsisClinicalFeatures, wbc: Optional[float] = None) -> int:
    """SIRS criteria met, 0-4. The WBC criterion needs a laboratory value."""
    score = 0
    temperature = features.temperature
    if temperature is not None and (temperature > SIRS_TEMP_HIGH or temperature < SIRS_TEMP_LOW):
        score += 1
    if features.heart_rate is not None and features.heart_rate > SIRS_HEART_RATE:
        score += 1
    if features.respiratory_rate is not None and features.respiratory_rate > SIRS_RESPIRATORY_RATE:
        score += 1
    if wbc is not None and (wbc > SIRS_WBC_HIGH or wbc < SIRS_WBC_LOW):
        score += 1
    return score
