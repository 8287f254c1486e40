"""Tests for amputation level precedence rules and management strategy."""
import dataclasses

import pytest

from limb_salvage.models import (
    AmputationLevel,
    LimbSalvageAssessment,
    ManagementStrategy,
    OsteomyelitisAssessment,
)
from limb_salvage.services import amputation


class TestAmputationLevelEnum:
    def test_members_run_distal_to_proximal(self):
        """Declaration order runs from no amputation up to above-knee."""
        assert [level.value for level in AmputationLevel] == [
            "none", "toe_disarticulation", "ray_amputation", "transmetatarsal", "bka", "aka",
        ]

    @pytest.mark.parametrize("level,major", [
        (AmputationLevel.NONE, False),
        (AmputationLevel.TOE_DISARTICULATION, False),
        (AmputationLevel.RAY_AMPUTATION, False),
        (AmputationLevel.TRANSMETATARSAL, False),
        (AmputationLevel.BKA, True),
        (AmputationLevel.AKA, True),
    ])
    def test_is_major(self, level, major):
        """Only below-knee and above-knee count as major."""
        assert level.is_major is major


class TestAmputationScenarios:
    def test_whole_foot_gangrene_with_femoral_occlusion(self, doppler):
        """Wagner 5, ABI 0.3 and an occluded femoral artery need an above-knee amputation."""
        assessment = LimbSalvageAssessment(
            wagner_grade=5,
            doppler_findings=doppler(abi=0.3, femoral_artery="occluded"),
        )
        decision = amputation.explain_amputation_level(assessment)
        assert decision.level is AmputationLevel.AKA
        assert decision.rule == "wagner_5"

    def test_chronic_multi_bone_osteomyelitis(self, doppler):
        """Three infected bones with recurrence and ABI 0.45 gives a transmetatarsal level."""
        assessment = LimbSalvageAssessment(
            osteomyelitis=OsteomyelitisAssessment(
                suspected=True,
                chronicity="chronic",
                recurrent=True,
                affected_bones=["first metatarsal", "second metatarsal", "third metatarsal"],
            ),
            doppler_findings=doppler(abi=0.45),
        )
        decision = amputation.explain_amputation_level(assessment)
        assert decision.level is AmputationLevel.TRANSMETATARSAL
        assert decision.rule == "chronic_osteomyelitis_override"


class TestChronicOsteomyelitisOverride:
    def setup_method(self):
        self.osteo = OsteomyelitisAssessment(
            suspected=True, duration_in_weeks=8, sequestrum=True, recurrent=True
        )

    def test_overrides_excellent_salvage(self, make_score):
        """Failed chronic disease amputates even with an excellent prognosis."""
        assessment = LimbSalvageAssessment(
            osteomyelitis=self.osteo, limb_salvage_score=make_score("excellent")
        )
        decision = amputation.explain_amputation_level(assessment)
        assert decision.level is not AmputationLevel.NONE
        assert decision.rule == "chronic_osteomyelitis_override"

    def test_poor_perfusion_goes_below_knee(self, doppler):
        """ABI under 0.4 pushes the override to below-knee."""
        assessment = LimbSalvageAssessment(osteomyelitis=self.osteo, doppler_findings=doppler(abi=0.35))
        assert amputation.recommend_amputation_level(assessment) is AmputationLevel.BKA

    def test_phalanx_allows_ray_amputation(self, doppler):
        """A phalanx-only infection with fair perfusion stays at ray level."""
        osteo = dataclasses.replace(self.osteo, affected_bones=("Distal Phalanx",))
        assessment = LimbSalvageAssessment(osteomyelitis=osteo, doppler_findings=doppler(abi=0.7))
        assert amputation.recommend_amputation_level(assessment) is AmputationLevel.RAY_AMPUTATION

    def test_toe_wound_with_marginal_perfusion(self, doppler):
        """A toe wound below ABI 0.6 moves up to transmetatarsal."""
        assessment = LimbSalvageAssessment(
            osteomyelitis=self.osteo, wound_location="Right 2nd toe", doppler_findings=doppler(abi=0.55)
        )
        assert amputation.recommend_amputation_level(assessment) is AmputationLevel.TRANSMETATARSAL

    def test_missing_abi_uses_normal_default(self):
        """An unrecorded ABI is treated as normal perfusion."""
        assessment = LimbSalvageAssessment(osteomyelitis=self.osteo, wound_location="hallux toe")
        assert amputation.recommend_amputation_level(assessment) is AmputationLevel.RAY_AMPUTATION

    def test_chronic_without_failure_does_not_override(self, make_score):
        """Chronicity alone leaves the salvage rules in charge."""
        osteo = OsteomyelitisAssessment(suspected=True, chronicity="chronic")
        assessment = LimbSalvageAssessment(osteomyelitis=osteo, limb_salvage_score=make_score("good"))
        decision = amputation.explain_amputation_level(assessment)
        assert decision.level is AmputationLevel.NONE
        assert decision.rule == "favourable_salvage"


class TestSalvageRules:
    def test_favourable_salvage_beats_gangrene(self, make_score, doppler):
        """A good prognosis outranks the Wagner 5 rule."""
        assessment = LimbSalvageAssessment(
            wagner_grade=5, doppler_findings=doppler(abi=0.3), limb_salvage_score=make_score("good")
        )
        assert amputation.recommend_amputation_level(assessment) is AmputationLevel.NONE

    @pytest.mark.parametrize("abi,expected", [
        (0.35, AmputationLevel.BKA),
        (0.45, AmputationLevel.BKA),
        (0.5, AmputationLevel.TRANSMETATARSAL),
    ])
    def test_wagner_5_without_femoral_occlusion(self, doppler, abi, expected):
        """Gangrene level follows the ABI when the femoral artery is open."""
        assessment = LimbSalvageAssessment(wagner_grade=5, doppler_findings=doppler(abi=abi))
        assert amputation.recommend_amputation_level(assessment) is expected

    @pytest.mark.parametrize("location,abi,expected", [
        ("left great toe", 0.6, AmputationLevel.RAY_AMPUTATION),
        ("Digit 3", 0.45, AmputationLevel.TRANSMETATARSAL),
        ("toe", 0.3, AmputationLevel.BKA),
        ("forefoot", 0.5, AmputationLevel.TRANSMETATARSAL),
        ("heel", 0.45, AmputationLevel.BKA),
    ])
    def test_wagner_4(self, doppler, location, abi, expected):
        """Forefoot gangrene level depends on wound site and ABI."""
        assessment = LimbSalvageAssessment(
            wagner_grade=4, wound_location=location, doppler_findings=doppler(abi=abi)
        )
        decision = amputation.explain_amputation_level(assessment)
        assert decision.level is expected
        assert decision.rule == "wagner_4"

    def test_wagner_3_very_poor(self, make_score, doppler):
        """Deep infection with a very poor prognosis and low ABI goes below-knee."""
        assessment = LimbSalvageAssessment(
            wagner_grade=3, doppler_findings=doppler(abi=0.3), limb_salvage_score=make_score("very_poor")
        )
        decision = amputation.explain_amputation_level(assessment)
        assert decision.level is AmputationLevel.BKA
        assert decision.rule == "wagner_3_very_poor"

    def test_very_poor_salvage(self, make_score, doppler):
        """A very poor prognosis with ABI 0.6 allows ray amputation."""
        assessment = LimbSalvageAssessment(
            wagner_grade=2, doppler_findings=doppler(abi=0.6), limb_salvage_score=make_score("very_poor")
        )
        assert amputation.recommend_amputation_level(assessment) is AmputationLevel.RAY_AMPUTATION

    def test_poor_salvage(self, make_score):
        """A poor prognosis falls to toe disarticulation."""
        assessment = LimbSalvageAssessment(wagner_grade=3, limb_salvage_score=make_score("poor"))
        decision = amputation.explain_amputation_level(assessment)
        assert decision.level is AmputationLevel.TOE_DISARTICULATION
        assert decision.rule == "poor_salvage"

    def test_unscored_assessment_falls_through_to_default(self):
        """Without an attached score the salvage-gated rules stay silent."""
        assessment = LimbSalvageAssessment(wagner_grade=3)
        decision = amputation.explain_amputation_level(assessment)
        assert decision.level is AmputationLevel.NONE
        assert decision.rule == "default"

    def test_rule_order(self):
        """Rules are evaluated in clinical precedence order."""
        names = [name for name, _ in amputation.AMPUTATION_RULES]
        assert names == [
            "chronic_osteomyelitis_override",
            "favourable_salvage",
            "wagner_5",
            "wagner_4",
            "wagner_3_very_poor",
            "very_poor_salvage",
            "poor_salvage",
            "default",
        ]


class TestManagementStrategy:
    def test_revascularization_window(self, doppler):
        """Feasible for ABI in [0.3, 0.9) without calcification."""
        def feasible(**arterial):
            return amputation.is_revascularization_feasible(
                LimbSalvageAssessment(doppler_findings=doppler(**arterial))
            )

        assert feasible(abi=0.3)
        assert feasible(abi=0.89)
        assert not feasible(abi=0.29)
        assert not feasible(abi=0.9)
        assert not feasible(abi=0.5, calcification=True)
        assert not feasible()

    @pytest.mark.parametrize("probability,abi,expected", [
        ("excellent", 1.0, ManagementStrategy.CONSERVATIVE),
        ("good", 0.5, ManagementStrategy.REVASCULARIZATION),
        ("good", 0.8, ManagementStrategy.CONSERVATIVE),
        ("fair", 0.8, ManagementStrategy.REVASCULARIZATION),
        ("fair", 0.2, ManagementStrategy.CONSERVATIVE),
    ])
    def test_favourable_and_fair(self, make_score, doppler, probability, abi, expected):
        """Salvageable limbs are managed conservatively or revascularised."""
        assessment = LimbSalvageAssessment(
            doppler_findings=doppler(abi=abi), limb_salvage_score=make_score(probability)
        )
        assert amputation.determine_management(assessment) is expected

    def test_minor_level_with_feasible_revascularization(self, make_score, doppler):
        """A minor level still prefers revascularisation when feasible."""
        assessment = LimbSalvageAssessment(
            doppler_findings=doppler(abi=0.5),
            limb_salvage_score=make_score("very_poor"),
            recommended_amputation_level="ray_amputation",
        )
        assert amputation.determine_management(assessment) is ManagementStrategy.REVASCULARIZATION

    def test_minor_amputation(self, make_score):
        """A minor level without a revascularisation window is a minor amputation."""
        assessment = LimbSalvageAssessment(
            limb_salvage_score=make_score("poor"),
            recommended_amputation_level=AmputationLevel.TOE_DISARTICULATION,
        )
        assert amputation.determine_management(assessment) is ManagementStrategy.MINOR_AMPUTATION

    @pytest.mark.parametrize("level", [level for level in AmputationLevel if not level.is_major])
    def test_every_minor_level_without_window(self, make_score, level):
        """No non-major level escalates to a major amputation."""
        assessment = LimbSalvageAssessment(
            limb_salvage_score=make_score("very_poor"), recommended_amputation_level=level
        )
        assert amputation.determine_management(assessment) is ManagementStrategy.MINOR_AMPUTATION

    @pytest.mark.parametrize("level", ["bka", "aka"])
    def test_major_amputation(self, make_score, doppler, level):
        """Below-knee and above-knee levels are major even inside the revascularisation window."""
        assessment = LimbSalvageAssessment(
            doppler_findings=doppler(abi=0.5),
            limb_salvage_score=make_score("very_poor"),
            recommended_amputation_level=level,
        )
        assert amputation.determine_management(assessment) is ManagementStrategy.MAJOR_AMPUTATION

    def test_level_is_recomputed_when_absent(self, make_score, doppler):
        """Management derives the level itself when none is attached."""
        assessment = LimbSalvageAssessment(
            wagner_grade=5,
            doppler_findings=doppler(abi=0.25, femoral_artery="occluded"),
            limb_salvage_score=make_score("very_poor"),
        )
        assert amputation.determine_management(assessment) is ManagementStrategy.MAJOR_AMPUTATION

    def test_unknown_level_rejected(self):
        """Levels outside the closed set are refused at construction."""
        with pytest.raises(ValueError):
            LimbSalvageAssessment(recommended_amputation_level="hip_disarticulation")
