from .assessment import (
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
from .outcome import (
    AmputationDecision,
    AmputationLevel,
    LimbSalvageEvaluation,
    LimbSalvageRecommendation,
    LimbSalvageScore,
    ManagementStrategy,
    RecommendationCategory,
    RecommendationPriority,
    RiskCategory,
    SalvageProbability,
    ScoreDisplay,
    SINBADScore,
)
