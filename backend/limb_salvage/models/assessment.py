"""
Limb salvage assessment snapshot.

One immutable record per patient-wound evaluation. Every attribute is
optional: a missing value is resolved through the central default table in
``services/clinical_defaults.py`` by whichever calculator consumes it.
"""
from dataclasses import dataclass
from enum import Enum, IntEnum
from types import MappingProxyType
from typing import Mapping, Optional, Tuple, TYPE_CHECKING

if TYPE_CHECKING:
    from .outcome import AmputationLevel, LimbSalvageScore


class WagnerGrade(IntEnum):
    GRADE_0 = 0  # Pre-ulcerative lesion / healed ulcer
    GRADE_1 = 1  # Superficial ulcer
    GRADE_2 = 2  # Deep ulcer to tendon, capsule or bone
    GRADE_3 = 3  # Deep ulcer with abscess or osteomyelitis
    GRADE_4 = 4  # Localized gangrene
    GRADE_5 = 5  # Gangrene of entire foot


class TexasStage(str, Enum):
    A = "A"  # Clean
    B = "B"  # Infected
    C = "C"  # Ischemic
    D = "D"  # Infected and ischemic


class Waveform(str, Enum):
    TRIPHASIC = "triphasic"
    BIPHASIC = "biphasic"
    MONOPHASIC = "monophasic"
    ABSENT = "absent"


class VesselPatency(str, Enum):
    PATENT = "patent"
    STENOSIS = "stenosis"
    OCCLUDED = "occluded"


class SepsisSeverity(str, Enum):
    NONE = "none"
    SIRS = "sirs"
    SEPSIS = "sepsis"
    SEVERE_SEPSIS = "severe_sepsis"
    SEPTIC_SHOCK = "septic_shock"


class ImagingResult(str, Enum):
    POSITIVE = "positive"
    SUSPICIOUS = "suspicious"
    NEGATIVE = "negative"
    NOT_DONE = "not_done"


class BiopsyResult(str, Enum):
    POSITIVE = "positive"
    NEGATIVE = "negative"
    NOT_DONE = "not_done"


class Chronicity(str, Enum):
    ACUTE = "acute"        # < 2 weeks
    SUBACUTE = "subacute"  # 2-6 weeks
    CHRONIC = "chronic"    # > 6 weeks


class CortexInvolvement(str, Enum):
    SUPERFICIAL = "superficial"
    DEEP = "deep"
    FULL_THICKNESS = "full_thickness"


def exhaustive_table(enum_cls, table: Mapping) -> Mapping:
    """
    Freeze a lookup keyed by ``enum_cls`` after checking it maps every member.
    Called at import time so an unmapped category fails on start-up.
    """
    missing = [member for member in enum_cls if member not in table]
    if missing:
        raise ValueError(
            f"Lookup for {enum_cls.__name__} has no entry for: "
            + ", ".join(str(m.value) for m in missing)
        )
    return MappingProxyType(dict(table))


def _coerce(instance, enum_cls, *names: str) -> None:
    # Frozen dataclasses: accept raw values and store the enum member.
    for name in names:
        value = getattr(instance, name)
        if value is not None and not isinstance(value, enum_cls):
            object.__setattr__(instance, name, enum_cls(value))


@dataclass(frozen=True)
class TexasClassification:
    grade: int = 0  # 0-3
    stage: TexasStage = TexasStage.A

    def __post_init__(self):
        _coerce(self, TexasStage, "stage")


@dataclass(frozen=True)
class WIfIClassification:
    """Wound / Ischemia / foot Infection, each graded 0-3."""
    wound: Optional[int] = None
    ischemia: Optional[int] = None
    foot_infection: Optional[int] = None


@dataclass(frozen=True)
class ArterialDoppler:
    abi: Optional[float] = None  # Ankle-brachial index, nominal 0-1.4
    waveform: Optional[Waveform] = None
    femoral_artery: Optional[VesselPatency] = None
    popliteal_artery: Optional[VesselPatency] = None
    anterior_tibial_artery: Optional[VesselPatency] = None
    posterior_tibial_artery: Optional[VesselPatency] = None
    dorsalis_pedis_artery: Optional[VesselPatency] = None
    peroneal_artery: Optional[VesselPatency] = None
    calcification: bool = False

    VESSELS = (
        "femoral_artery",
        "popliteal_artery",
        "anterior_tibial_artery",
        "posterior_tibial_artery",
        "dorsalis_pedis_artery",
        "peroneal_artery",
    )

    def __post_init__(self):
        _coerce(self, Waveform, "waveform")
        _coerce(self, VesselPatency, *self.VESSELS)

    def vessel_patency(self) -> Tuple[Optional[VesselPatency], ...]:
        return tuple(getattr(self, name) for name in self.VESSELS)


@dataclass(frozen=True)
class DopplerFindings:
    arterial: Optional[ArterialDoppler] = None


@dataclass(frozen=True)
class SepsisClinicalFeatures:
    """Bedside observations behind the qSOFA and SIRS counts."""
    temperature: Optional[float] = None        # °C
    heart_rate: Optional[float] = None         # bpm
    respiratory_rate: Optional[float] = None   # breaths/min
    systolic_bp: Optional[float] = None        # mmHg
    altered_mental_status: bool = False


@dataclass(frozen=True)
class LaboratoryMarkers:
    wbc: Optional[float] = None            # x10^9/L
    crp: Optional[float] = None            # mg/L
    procalcitonin: Optional[float] = None  # ng/mL


@dataclass(frozen=True)
class SepsisAssessment:
    sepsis_severity: Optional[SepsisSeverity] = None
    qsofa_score: Optional[int] = None  # 0-3
    clinical_features: Optional[SepsisClinicalFeatures] = None
    laboratory_features: Optional[LaboratoryMarkers] = None

    def __post_init__(self):
        _coerce(self, SepsisSeverity, "sepsis_severity")

    @property
    def is_active(self) -> bool:
        """Any recorded tier above ``none``."""
        return self.sepsis_severity is not None and self.sepsis_severity is not SepsisSeverity.NONE


@dataclass(frozen=True)
class OsteomyelitisAssessment:
    suspected: bool = False
    probe_to_bone: bool = False
    mri_findings: Optional[ImagingResult] = None
    bone_biopsy: Optional[BiopsyResult] = None
    radiographic_changes: bool = False
    chronicity: Optional[Chronicity] = None
    duration_in_weeks: Optional[float] = None
    sequestrum: bool = False
    involucrum: bool = False
    cloacae: bool = False
    involved_cortex: Optional[CortexInvolvement] = None
    recurrent: bool = False
    previous_antibiotic: bool = False
    previous_debridement: bool = False
    affected_bones: Tuple[str, ...] = ()

    def __post_init__(self):
        _coerce(self, ImagingResult, "mri_findings")
        _coerce(self, BiopsyResult, "bone_biopsy")
        _coerce(self, Chronicity, "chronicity")
        _coerce(self, CortexInvolvement, "involved_cortex")
        if not isinstance(self.affected_bones, tuple):
            object.__setattr__(self, "affected_bones", tuple(self.affected_bones or ()))

    @property
    def is_chronic(self) -> bool:
        """Tagged chronic, or present for more than 6 weeks."""
        if self.chronicity is Chronicity.CHRONIC:
            return True
        return self.duration_in_weeks is not None and self.duration_in_weeks > 6

    @property
    def is_subacute(self) -> bool:
        if self.is_chronic:
            return False
        if self.chronicity is Chronicity.SUBACUTE:
            return True
        return self.duration_in_weeks is not None and self.duration_in_weeks > 2

    @property
    def has_failed_combined_therapy(self) -> bool:
        return self.previous_antibiotic and self.previous_debridement

    @property
    def has_failed_treatment(self) -> bool:
        """Recurrence, or failure of both antibiotics and debridement."""
        return self.recurrent or self.has_failed_combined_therapy

    @property
    def has_severe_bone_changes(self) -> bool:
        return self.sequestrum or self.involved_cortex is CortexInvolvement.FULL_THICKNESS

    @property
    def bone_count(self) -> int:
        return len(self.affected_bones)


@dataclass(frozen=True)
class RenalStatus:
    ckd_stage: Optional[int] = None  # 1-5
    on_dialysis: bool = False


@dataclass(frozen=True)
class DiabeticFootComorbidities:
    hba1c: Optional[float] = None              # %
    diabetes_duration: Optional[float] = None  # years
    coronary_artery_disease: bool = False
    heart_failure: bool = False
    previous_stroke: bool = False
    peripheral_vascular_disease: bool = False
    previous_amputation: bool = False
    smoking: bool = False


@dataclass(frozen=True)
class WoundSize:
    area: Optional[float] = None   # cm²
    depth: Optional[float] = None  # cm


@dataclass(frozen=True)
class LimbSalvageAssessment:
    patient_age: Optional[int] = None
    wagner_grade: Optional[WagnerGrade] = None
    texas_classification: Optional[TexasClassification] = None
    wifi_classification: Optional[WIfIClassification] = None
    wound_duration: Optional[int] = None  # days
    previous_debridement: bool = False
    debridement_count: Optional[int] = None
    doppler_findings: Optional[DopplerFindings] = None
    sepsis: Optional[SepsisAssessment] = None
    osteomyelitis: Optional[OsteomyelitisAssessment] = None
    renal_status: Optional[RenalStatus] = None
    comorbidities: Optional[DiabeticFootComorbidities] = None
    albumin: Optional[float] = None  # g/dL
    must_score: Optional[int] = None
    wound_location: Optional[str] = None
    wound_size: Optional[WoundSize] = None
    monofilament_test: bool = False  # Loss of protective sensation
    angiogram_performed: bool = False

    # Populated by the caller (or by the evaluation pipeline)
    limb_salvage_score: Optional["LimbSalvageScore"] = None
    recommended_amputation_level: Optional["AmputationLevel"] = None

    def __post_init__(self):
        _coerce(self, WagnerGrade, "wagner_grade")
        if self.recommended_amputation_level is not None:
            from .outcome import AmputationLevel
            _coerce(self, AmputationLevel, "recommended_amputation_level")

    @property
    def arterial(self) -> Optional[ArterialDoppler]:
        if self.doppler_findings is None:
            return None
        return self.doppler_findings.arterial

    @property
    def has_active_sepsis(self) -> bool:
        return self.sepsis is not None and self.sepsis.is_active

    @property
    def has_suspected_osteomyelitis(self) -> bool:
        return self.osteomyelitis is not None and self.osteomyelitis.suspected
