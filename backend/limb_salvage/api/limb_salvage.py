from fastapi import APIRouter, HTTPException, Query
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
import dataclasses
import logging
from ..models.assessment import (
    ArterialDoppler,
    BiopsyResult,
    Chronicity,
    CortexInvolvement,
    DiabeticFootComorbidities,
    DopplerFindings,
    ImagingResult,
    LaboratoryMarkers,
    LimbSalvageAssessment,
    OsteomyelitisAssessment,
    RenalStatus,
    SepsisAssessment,
    SepsisClinicalFeatures,
    SepsisSeverity,
    TexasClassification,
    TexasStage,
    VesselPatency,
    WagnerGrade,
    Waveform,
    WIfIClassification,
    WoundSize,
)
from ..models.outcome import (
    AmputationLevel,
    LimbSalvageScore,
    ManagementStrategy,
    RecommendationCategory,
    RecommendationPriority,
    RiskCategory,
    SalvageProbability,
    SINBADScore,
)
from ..services.limb_salvage_engine import limb_salvage_engine

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/limb-salvage", tags=["limb-salvage"])


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ── Request schemas ──────────────────────────────────────────────────────

class TexasIn(CamelModel):
    grade: int = Field(0, ge=0, le=3)
    stage: TexasStage = TexasStage.A


class WIfIIn(CamelModel):
    wound: Optional[int] = Field(None, ge=0, le=3)
    ischemia: Optional[int] = Field(None, ge=0, le=3)
    foot_infection: Optional[int] = Field(None, ge=0, le=3)


class ArterialIn(CamelModel):
    abi: Optional[float] = Field(None, ge=0)
    waveform: Optional[Waveform] = None
    femoral_artery: Optional[VesselPatency] = None
    popliteal_artery: Optional[VesselPatency] = None
    anterior_tibial_artery: Optional[VesselPatency] = None
    posterior_tibial_artery: Optional[VesselPatency] = None
    dorsalis_pedis_artery: Optional[VesselPatency] = None
    peroneal_artery: Optional[VesselPatency] = None
    calcification: bool = False


class DopplerIn(CamelModel):
    arterial: Optional[ArterialIn] = None


class ClinicalFeaturesIn(CamelModel):
    temperature: Optional[float] = None
    heart_rate: Optional[float] = None
    respiratory_rate: Optional[float] = None
    systolic_bp: Optional[float] = None
    altered_mental_status: bool = False


class LaboratoryIn(CamelModel):
    wbc: Optional[float] = None
    crp: Optional[float] = None
    procalcitonin: Optional[float] = None


class SepsisIn(CamelModel):
    sepsis_severity: Optional[SepsisSeverity] = None
    qsofa_score: Optional[int] = Field(None, ge=0, le=3)
    clinical_features: Optional[ClinicalFeaturesIn] = None
    laboratory_features: Optional[LaboratoryIn] = None

    def to_dataclass(self) -> SepsisAssessment:
        clinical = None
        if self.clinical_features is not None:
            clinical = SepsisClinicalFeatures(**self.clinical_features.model_dump())
        labs = None
        if self.laboratory_features is not None:
            labs = LaboratoryMarkers(**self.laboratory_features.model_dump())

        qsofa = self.qsofa_score
        if qsofa is None and clinical is not None:
            # Bedside observations without a recorded score: derive it
            qsofa = limb_salvage_engine.calculate_qsofa_score(clinical)

        return SepsisAssessment(
            sepsis_severity=self.sepsis_severity,
            qsofa_score=qsofa,
            clinical_features=clinical,
            laboratory_features=labs,
        )


class OsteomyelitisIn(CamelModel):
    suspected: bool = False
    probe_to_bone: bool = False
    mri_findings: Optional[ImagingResult] = None
    bone_biopsy: Optional[BiopsyResult] = None
    radiographic_changes: bool = False
    chronicity: Optional[Chronicity] = None
    duration_in_weeks: Optional[float] = Field(None, ge=0)
    sequestrum: bool = False
    involucrum: bool = False
    cloacae: bool = False
    involved_cortex: Optional[CortexInvolvement] = None
    recurrent: bool = False
    previous_antibiotic: bool = False
    previous_debridement: bool = False
    affected_bones: List[str] = []


class RenalIn(CamelModel):
    ckd_stage: Optional[int] = Field(None, ge=1, le=5)
    on_dialysis: bool = False


class ComorbiditiesIn(CamelModel):
    hba1c: Optional[float] = Field(None, ge=0)
    diabetes_duration: Optional[float] = Field(None, ge=0)
    coronary_artery_disease: bool = False
    heart_failure: bool = False
    previous_stroke: bool = False
    peripheral_vascular_disease: bool = False
    previous_amputation: bool = False
    smoking: bool = False


class WoundSizeIn(CamelModel):
    area: Optional[float] = Field(None, ge=0)
    depth: Optional[float] = Field(None, ge=0)


class ScoreSchema(CamelModel):
    wound_score: float
    ischemia_score: float
    infection_score: float
    renal_score: float
    comorbidity_score: float
    age_score: float
    nutritional_score: float
    total_score: float
    max_score: int
    percentage: float
    risk_category: RiskCategory
    salvage_probability: SalvageProbability


class AssessmentRequest(CamelModel):
    patient_age: Optional[int] = Field(None, ge=0)
    wagner_grade: Optional[WagnerGrade] = None
    texas_classification: Optional[TexasIn] = None
    wifi_classification: Optional[WIfIIn] = None
    wound_duration: Optional[int] = Field(None, ge=0)
    previous_debridement: bool = False
    debridement_count: Optional[int] = Field(None, ge=0)
    doppler_findings: Optional[DopplerIn] = None
    sepsis: Optional[SepsisIn] = None
    osteomyelitis: Optional[OsteomyelitisIn] = None
    renal_status: Optional[RenalIn] = None
    comorbidities: Optional[ComorbiditiesIn] = None
    albumin: Optional[float] = Field(None, ge=0)
    must_score: Optional[int] = Field(None, ge=0)
    wound_location: Optional[str] = None
    wound_size: Optional[WoundSizeIn] = None
    monofilament_test: bool = False
    angiogram_performed: bool = False
    limb_salvage_score: Optional[ScoreSchema] = None
    recommended_amputation_level: Optional[AmputationLevel] = None

    def to_assessment(self) -> LimbSalvageAssessment:
        doppler = None
        if self.doppler_findings is not None:
            arterial = self.doppler_findings.arterial
            doppler = DopplerFindings(
                arterial=ArterialDoppler(**arterial.model_dump()) if arterial is not None else None
            )

        return LimbSalvageAssessment(
            patient_age=self.patient_age,
            wagner_grade=self.wagner_grade,
            texas_classification=_convert(TexasClassification, self.texas_classification),
            wifi_classification=_convert(WIfIClassification, self.wifi_classification),
            wound_duration=self.wound_duration,
            previous_debridement=self.previous_debridement,
            debridement_count=self.debridement_count,
            doppler_findings=doppler,
            sepsis=self.sepsis.to_dataclass() if self.sepsis is not None else None,
            osteomyelitis=_convert(OsteomyelitisAssessment, self.osteomyelitis),
            renal_status=_convert(RenalStatus, self.renal_status),
            comorbidities=_convert(DiabeticFootComorbidities, self.comorbidities),
            albumin=self.albumin,
            must_score=self.must_score,
            wound_location=self.wound_location,
            wound_size=_convert(WoundSize, self.wound_size),
            monofilament_test=self.monofilament_test,
            angiogram_performed=self.angiogram_performed,
            limb_salvage_score=_convert(LimbSalvageScore, self.limb_salvage_score),
            recommended_amputation_level=self.recommended_amputation_level,
        )


def _convert(dataclass_type, model: Optional[BaseModel]):
    if model is None:
        return None
    return dataclass_type(**model.model_dump())


# ── Response schemas ─────────────────────────────────────────────────────

class RecommendationResponse(CamelModel):
    category: RecommendationCategory
    priority: RecommendationPriority
    recommendation: str
    rationale: str
    timeframe: str


class AmputationLevelResponse(CamelModel):
    level: AmputationLevel
    rule: str


class ManagementResponse(CamelModel):
    strategy: ManagementStrategy


class SINBADResponse(CamelModel):
    site: int
    ischemia: int
    neuropathy: int
    bacterial_infection: int
    area: int
    depth: int
    total: int
    component_sum: int


class ScoreDisplayResponse(CamelModel):
    summary: str
    color: str
    recommendation: str


class EvaluationResponse(CamelModel):
    score: ScoreSchema
    display: ScoreDisplayResponse
    amputation_level: AmputationLevel
    amputation_rule: str
    management: ManagementStrategy
    recommendations: List[RecommendationResponse]
    sinbad: Optional[SINBADResponse]


class DescriptionResponse(CamelModel):
    description: str


def _sinbad_dict(sinbad: SINBADScore) -> dict:
    return {**dataclasses.asdict(sinbad), "component_sum": sinbad.component_sum}


def _to_assessment(assessment_in: AssessmentRequest) -> LimbSalvageAssessment:
    try:
        return assessment_in.to_assessment()
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


def _scored_assessment(assessment_in: AssessmentRequest) -> LimbSalvageAssessment:
    """The decision rules need a salvage probability; attach a score when none was posted."""
    assessment = _to_assessment(assessment_in)
    if assessment.limb_salvage_score is None:
        assessment = limb_salvage_engine.with_score(assessment)
    return assessment


# ── Endpoints ────────────────────────────────────────────────────────────

@router.post("/score", response_model=ScoreSchema)
def calculate_score(assessment_in: AssessmentRequest):
    assessment = _to_assessment(assessment_in)
    return dataclasses.asdict(limb_salvage_engine.calculate_limb_salvage_score(assessment))


@router.post("/recommendations", response_model=List[RecommendationResponse])
def generate_recommendations(
    assessment_in: AssessmentRequest,
    sort: Optional[str] = Query(None, pattern="^priority$"),
):
    """Score is computed and attached first when the request does not carry one."""
    assessment = _scored_assessment(assessment_in)
    recommendations = limb_salvage_engine.generate_recommendations(
        assessment, sort=sort == "priority"
    )
    return [dataclasses.asdict(r) for r in recommendations]


@router.post("/amputation-level", response_model=AmputationLevelResponse)
def recommend_amputation_level(assessment_in: AssessmentRequest):
    assessment = _scored_assessment(assessment_in)
    return dataclasses.asdict(limb_salvage_engine.explain_amputation_level(assessment))


@router.post("/management", response_model=ManagementResponse)
def determine_management(assessment_in: AssessmentRequest):
    assessment = _scored_assessment(assessment_in)
    if assessment.recommended_amputation_level is None:
        level = limb_salvage_engine.recommend_amputation_level(assessment)
        assessment = dataclasses.replace(assessment, recommended_amputation_level=level)
    return {"strategy": limb_salvage_engine.determine_management(assessment)}


@router.post("/evaluate", response_model=EvaluationResponse)
def evaluate(assessment_in: AssessmentRequest):
    assessment = _to_assessment(assessment_in)
    evaluation = limb_salvage_engine.evaluate(assessment)
    logger.info(
        "Limb salvage evaluation: risk=%s, amputation=%s, management=%s",
        evaluation.score.risk_category.value,
        evaluation.amputation_level.value,
        evaluation.management.value,
    )
    return {
        "score": dataclasses.asdict(evaluation.score),
        "display": dataclasses.asdict(limb_salvage_engine.format_score_display(evaluation.score)),
        "amputation_level": evaluation.amputation_level,
        "amputation_rule": evaluation.amputation_rule,
        "management": evaluation.management,
        "recommendations": [dataclasses.asdict(r) for r in evaluation.recommendations],
        "sinbad": _sinbad_dict(evaluation.sinbad) if evaluation.sinbad is not None else None,
    }


@router.post("/sinbad", response_model=SINBADResponse)
def calculate_sinbad(assessment_in: AssessmentRequest):
    assessment = _to_assessment(assessment_in)
    return _sinbad_dict(limb_salvage_engine.calculate_sinbad_score(assessment))


@router.get("/wagner/{grade}", response_model=DescriptionResponse)
def wagner_description(grade: int):
    try:
        return {"description": limb_salvage_engine.get_wagner_description(grade)}
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/texas/{grade}/{stage}", response_model=DescriptionResponse)
def texas_description(grade: int, stage: str):
    try:
        return {"description": limb_salvage_engine.get_texas_description(grade, stage.upper())}
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
