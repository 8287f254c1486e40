"""
Limb Salvage Engine.
Stateless facade over the scoring, recommendation, amputation and
classification services, plus the full evaluation pipeline.
"""
import dataclasses
import logging
from typing import List

from ..models.assessment import LimbSalvageAssessment, SepsisClinicalFeatures
from ..models.outcome import (
    AmputationDecision,
    AmputationLevel,
    LimbSalvageEvaluation,
    LimbSalvageRecommendation,
    LimbSalvageScore,
    ManagementStrategy,
    ScoreDisplay,
    SINBADScore,
)
from . import amputation, classification, recommendations, scoring, sepsis_criteria

logger = logging.getLogger(__name__)


class LimbSalvageEngine:
    """
    Diabetic foot limb salvage decision support.
    Scores an assessment across seven risk domains, generates tiered
    recommendations and suggests an amputation level and management strategy.
    Holds no state; every method is a pure function of its arguments.
    """

    def calculate_limb_salvage_score(self, assessment: LimbSalvageAssessment) -> LimbSalvageScore:
        return scoring.calculate_limb_salvage_score(assessment)

    def generate_recommendations(
        self, assessment: LimbSalvageAssessment, sort: bool = False
    ) -> List[LimbSalvageRecommendation]:
        generated = recommendations.generate_recommendations(assessment)
        if sort:
            return recommendations.sort_by_priority(generated)
        return generated

    def recommend_amputation_level(self, assessment: LimbSalvageAssessment) -> AmputationLevel:
        return amputation.recommend_amputation_level(assessment)

    def explain_amputation_level(self, assessment: LimbSalvageAssessment) -> AmputationDecision:
        return amputation.explain_amputation_level(assessment)

    def determine_management(self, assessment: LimbSalvageAssessment) -> ManagementStrategy:
        return amputation.determine_management(assessment)

    def calculate_sinbad_score(self, assessment: LimbSalvageAssessment) -> SINBADScore:
        return classification.calculate_sinbad_score(assessment)

    def calculate_qsofa_score(self, features: SepsisClinicalFeatures) -> int:
        return sepsis_criteria.calculate_qsofa_score(features)

    def calculate_sirs_score(self, features: SepsisClinicalFeatures, wbc=None) -> int:
        return sepsis_criteria.calculate_sirs_score(features, wbc)

    def get_wagner_description(self, grade) -> str:
        return classification.get_wagner_description(grade)

    def get_texas_description(self, grade: int, stage) -> str:
        return classification.get_texas_description(grade, stage)

    def format_score_display(self, score: LimbSalvageScore) -> ScoreDisplay:
        return classification.format_score_display(score)

    def with_score(self, assessment: LimbSalvageAssessment) -> LimbSalvageAssessment:
        """Copy of the assessment with a freshly computed score attached."""
        return dataclasses.replace(
            assessment, limb_salvage_score=scoring.calculate_limb_salvage_score(assessment)
        )

    def evaluate(self, assessment: LimbSalvageAssessment) -> LimbSalvageEvaluation:
        """
        Run the whole pipeline on a copy of the assessment.

        The score is computed first and attached, so the amputation rules see
        the current salvage probability rather than a stale caller-supplied
        one. The chosen level is attached before management is decided.
        """
        scored = self.with_score(assessment)
        decision = amputation.explain_amputation_level(scored)
        scored = dataclasses.replace(scored, recommended_amputation_level=decision.level)

        management = amputation.determine_management(scored)
        generated = recommendations.generate_recommendations(scored)

        score = scored.limb_salvage_score
        logger.debug(
            "Evaluation: %.1f%% %s risk, amputation=%s (%s), management=%s",
            score.percentage, score.risk_category.value, decision.level.value,
            decision.rule, management.value,
        )
        return LimbSalvageEvaluation(
            score=score,
            amputation_level=decision.level,
            amputation_rule=decision.rule,
            management=management,
            recommendations=tuple(generated),
            sinbad=classification.calculate_sinbad_score(scored),
        )


limb_salvage_engine = LimbSalvageEngine()
