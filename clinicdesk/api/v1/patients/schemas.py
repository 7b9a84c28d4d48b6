"""
Schémas Pydantic pour le dossier patient.

Correspondance stockage -> application (appliquée une seule fois, ici) :
    visits.visit_date       -> date
    visits.image_url        -> prescription_image
    vitals_logs.recorded_at -> date
"""
from datetime import datetime
from typing import List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from clinicdesk.models.enums import Gender

BLOOD_TYPES = ["A+", "A-", "B+", "B-", "AB+", "AB-", "O+", "O-"]


def _clean_diseases(values: Optional[List[str]]) -> Optional[List[str]]:
    """Supprime les libellés vides et les doublons en gardant l'ordre."""
    if values is None:
        return None
    seen = []
    for value in values:
        label = value.strip()
        if label and label not in seen:
            seen.append(label)
    return seen


def _normalize_blood_type(v: Optional[str]) -> Optional[str]:
    if v is None or v == "":
        return None
    v = v.strip().upper()
    if v not in BLOOD_TYPES:
        raise ValueError(f"Groupe sanguin invalide. Valeurs acceptées: {BLOOD_TYPES}")
    return v


# =============================================================================
# PATIENT SCHEMAS
# =============================================================================

class PatientBase(BaseModel):
    """Champs communs pour Patient."""
    name: str = Field(..., min_length=1, max_length=255)
    age: Optional[int] = Field(None, ge=0, le=150)
    phone: Optional[str] = Field(None, max_length=50)
    gender: Optional[Gender] = None
    blood_type: Optional[str] = Field(None, description=f"Groupe sanguin {BLOOD_TYPES}")
    chronic_diseases: List[str] = Field(default_factory=list)
    weight: Optional[float] = Field(None, ge=0, le=500, description="Poids en kg")
    allergies: Optional[str] = None

    @field_validator("blood_type")
    @classmethod
    def validate_blood_type(cls, v: Optional[str]) -> Optional[str]:
        return _normalize_blood_type(v)

    @field_validator("chronic_diseases")
    @classmethod
    def validate_chronic_diseases(cls, v: List[str]) -> List[str]:
        return _clean_diseases(v)


class PatientCreate(PatientBase):
    """Schéma pour créer un patient."""
    pass


class PatientUpdate(BaseModel):
    """Schéma pour mettre à jour un patient (tous les champs sont optionnels)."""
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    age: Optional[int] = Field(None, ge=0, le=150)
    phone: Optional[str] = Field(None, max_length=50)
    gender: Optional[Gender] = None
    blood_type: Optional[str] = None
    chronic_diseases: Optional[List[str]] = None
    weight: Optional[float] = Field(None, ge=0, le=500)
    allergies: Optional[str] = None

    @field_validator("blood_type")
    @classmethod
    def validate_blood_type(cls, v: Optional[str]) -> Optional[str]:
        return _normalize_blood_type(v)

    @field_validator("chronic_diseases")
    @classmethod
    def validate_chronic_diseases(cls, v: Optional[List[str]]) -> Optional[List[str]]:
        return _clean_diseases(v)


class PatientResponse(PatientBase):
    """Schéma de réponse pour un patient."""
    id: int
    clinic_id: int
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PatientList(BaseModel):
    """Liste paginée de patients."""
    items: List[PatientResponse]
    total: int
    page: int
    size: int
    pages: int


# =============================================================================
# VISIT SCHEMAS
# =============================================================================

class VisitCreate(BaseModel):
    """
    Nouvelle consultation.

    prescription_image accepte une URL existante ou une image encodée
    (data URL), envoyée au stockage avant l'enregistrement.
    """
    date: Optional[datetime] = Field(None, description="Date de consultation (défaut: maintenant)")
    diagnosis: Optional[str] = None
    treatment: Optional[str] = None
    notes: Optional[str] = None
    prescription_image: Optional[str] = None
    allergies: Optional[str] = None


class VisitUpdate(BaseModel):
    date: Optional[datetime] = None
    diagnosis: Optional[str] = None
    treatment: Optional[str] = None
    notes: Optional[str] = None
    prescription_image: Optional[str] = None
    allergies: Optional[str] = None


class VisitResponse(BaseModel):
    id: int
    patient_id: int
    clinic_id: int
    date: datetime = Field(validation_alias=AliasChoices("visit_date", "date"))
    diagnosis: Optional[str] = None
    treatment: Optional[str] = None
    notes: Optional[str] = None
    prescription_image: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("image_url", "prescription_image"),
    )
    allergies: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class VisitList(BaseModel):
    items: List[VisitResponse]
    total: int


# =============================================================================
# VITALS SCHEMAS
# =============================================================================

class VitalCreate(BaseModel):
    """Relevé de constantes (au moins une mesure)."""
    date: Optional[datetime] = Field(None, description="Date du relevé (défaut: maintenant)")
    blood_pressure: Optional[str] = Field(
        None,
        pattern=r"^\d{2,3}/\d{2,3}$",
        description="Tension systolique/diastolique, ex: 120/80",
    )
    heart_rate: Optional[int] = Field(None, ge=20, le=300, description="bpm")
    oxygen_level: Optional[int] = Field(None, ge=0, le=100, description="SpO2 %")
    temperature: Optional[float] = Field(None, ge=25, le=45, description="°C")
    blood_sugar: Optional[float] = Field(None, ge=0, le=2000, description="mg/dL")

    @property
    def has_measure(self) -> bool:
        return any(
            value is not None
            for value in (
                self.blood_pressure,
                self.heart_rate,
                self.oxygen_level,
                self.temperature,
                self.blood_sugar,
            )
        )


class VitalResponse(BaseModel):
    id: int
    patient_id: int
    date: datetime = Field(validation_alias=AliasChoices("recorded_at", "date"))
    blood_pressure: Optional[str] = None
    heart_rate: Optional[int] = None
    oxygen_level: Optional[int] = None
    temperature: Optional[float] = None
    blood_sugar: Optional[float] = None

    model_config = ConfigDict(from_attributes=True)


class VitalList(BaseModel):
    items: List[VitalResponse]
    total: int
