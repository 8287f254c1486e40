"""
Wound classification helpers: SINBAD, Wagner and Texas descriptions, and the
display summary for a computed score.
"""
from ..models.assessment import LimbSalvageAssessment, TexasStage, WagnerGrade, exhaustive_table
from ..models.outcome import LimbSalvageScore, RiskCategory, SalvageProbability, ScoreDisplay, SINBADScore
from . import clinical_defaults as defaults

FOREFOOT_TERMS = ("toe", "metatarsal", "forefoot")

WAGNER_DESCRIPTIONS = exhaustive_table(WagnerGrade, {
    WagnerGrade.GRADE_0: "Pre-ulcerative lesion, healed ulcer, bony deformity",
    WagnerGrade.GRADE_1: "Superficial ulcer, skin and subcutaneous tissue only",
    WagnerGrade.GRADE_2: "Deep ulcer, extending to tendon, capsule, or bone",
    WagnerGrade.GRADE_3: "Deep ulcer with abscess, osteomyelitis, or tendinitis",
    WagnerGrade.GRADE_4: "Localized gangrene (toe, forefoot, heel)",
    WagnerGrade.GRADE_5: "Gangrene of entire foot",
})

TEXAS_GRADES = {
    0: "Pre or post-ulcerative",
    1: "Superficial (no tendon/capsule/bone)",
    2: "Wound penetrating to tendon/capsule",
    3: "Wound penetrating to bone/joint",
}

TEXAS_STAGES = exhaustive_table(TexasStage, {
    TexasStage.A: "Clean wound",
    TexasStage.B: "Infected wound",
    TexasStage.C: "Ischemic wound",
    TexasStage.D: "Infected and ischemic",
})

RISK_SUMMARIES = exhaustive_table(RiskCategory, {
    RiskCategory.LOW: "Low Risk - Favorable prognosis for limb salvage",
    RiskCategory.MODERATE: "Moderate Risk - Guarded prognosis, aggressive treatment needed",
    RiskCategory.HIGH: "High Risk - Poor prognosis, consider amputation if no improvement",
    RiskCategory.VERY_HIGH: "Very High Risk - Limb salvage unlikely, amputation recommended",
})

RISK_COLORS = exhaustive_table(RiskCategory, {
    RiskCategory.LOW: "green",
    RiskCategory.MODERATE: "yellow",
    RiskCategory.HIGH: "orange",
    RiskCategory.VERY_HIGH: "red",
})

SALVAGE_RECOMMENDATIONS = exhaustive_table(SalvageProbability, {
    SalvageProbability.EXCELLENT: "Conservative management with close monitoring",
    SalvageProbability.GOOD: "Aggressive wound care and optimize comorbidities",
    SalvageProbability.FAIR: "Consider revascularization if feasible",
    SalvageProbability.POOR: "Evaluate for limited amputation vs palliation",
    SalvageProbability.VERY_POOR: "Primary amputation likely necessary",
})


def calculate_sinbad_score(assessment: LimbSalvageAssessment) -> SINBADScore:
    """
    SINBAD components, one point each.

    ``total`` is left at 0; use ``component_sum`` for the summed score.
    """
    location = defaults.wound_location(assessment)
    forefoot = any(term in location for term in FOREFOOT_TERMS)

    return SINBADScore(
        site=0 if forefoot else 1,
        ischemia=1 if defaults.effective_abi(assessment) < 0.8 else 0,
        neuropathy=1 if assessment.monofilament_test else 0,
        bacterial_infection=1 if assessment.has_active_sepsis else 0,
        area=1 if defaults.wound_area(assessment) >= 1 else 0,
        depth=1 if defaults.wound_depth(assessment) > 0.5 else 0,
    )


def get_wagner_description(grade) -> str:
    try:
        return WAGNER_DESCRIPTIONS[WagnerGrade(grade)]
    except ValueError:
        raise ValueError(f"Invalid Wagner grade: {grade!r}") from None


def get_texas_description(grade: int, stage) -> str:
    if grade not in TEXAS_GRADES:
        raise ValueError(f"Invalid Texas grade: {grade!r}")
    try:
        stage_text = TEXAS_STAGES[TexasStage(stage)]
    except ValueError:
        raise ValueError(f"Invalid Texas stage: {stage!r}") from None
    return f"{TEXAS_GRADES[grade]} - {stage_text}"


def format_score_display(score: LimbSalvageScore) -> ScoreDisplay:
    return ScoreDisplay(
        summary=RISK_SUMMARIES[score.risk_category],
        color=RISK_COLORS[score.risk_category],
        recommendation=SALVAGE_RECOMMENDATIONS[score.salvage_probability],
    )
