"""
Shared fixtures for limb salvage engine tests.
"""
import pytest

from limb_salvage.models import (
    ArterialDoppler,
    DopplerFindings,
    LimbSalvageScore,
    RiskCategory,
    SalvageProbability,
)

# A representative percentage inside each salvage band
_BAND_PERCENTAGE = {
    SalvageProbability.EXCELLENT: 10.0,
    SalvageProbability.GOOD: 30.0,
    SalvageProbability.FAIR: 50.0,
    SalvageProbability.POOR: 70.0,
    SalvageProbability.VERY_POOR: 90.0,
}


@pytest.fixture
def make_score():
    """Factory for an attached score in a given salvage band."""
    def _make(probability) -> LimbSalvageScore:
        probability = SalvageProbability(probability)
        percentage = _BAND_PERCENTAGE[probability]
        return LimbSalvageScore(
            wound_score=0,
            ischemia_score=0,
            infection_score=0,
            renal_score=0,
            comorbidity_score=0,
            age_score=0,
            nutritional_score=0,
            total_score=percentage,
            max_score=100,
            percentage=percentage,
            risk_category=RiskCategory.LOW,
            salvage_probability=probability,
        )
    return _make


@pytest.fixture
def doppler():
    """Factory for doppler findings with only arterial values set."""
    def _make(**arterial) -> DopplerFindings:
        return DopplerFindings(arterial=ArterialDoppler(**arterial))
    return _make
