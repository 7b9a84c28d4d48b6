"""
Schémas Pydantic pour la gestion des cliniques par l'opérateur.

Le plafond IA est stocké dans la colonne `ai_limit` et exposé sous le nom
`ai_usage_limit` (valeur par défaut appliquée si non renseigné).
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from clinicdesk.core.security.hashing import MAX_PASSWORD_BYTES
from clinicdesk.models.enums import ClinicRole


def _check_password_bytes(v: Optional[str]) -> Optional[str]:
    """bcrypt limite le mot de passe à 72 octets (et non caractères)."""
    if v is not None and len(v.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise ValueError(f"Mot de passe trop long (max {MAX_PASSWORD_BYTES} octets)")
    return v


# =============================================================================
# CLINIC
# =============================================================================

class ClinicCreate(BaseModel):
    """Création d'une clinique cliente."""
    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=72)
    ai_usage_limit: Optional[int] = Field(None, ge=0, description="Plafond mensuel (défaut: 50)")
    subscription_end_date: Optional[datetime] = Field(
        None,
        description="Échéance initiale (défaut: dans un mois)"
    )

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        return _check_password_bytes(v)


class ClinicUpdate(BaseModel):
    """Mise à jour partielle (le mot de passe n'est changé que s'il est fourni)."""
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(None, min_length=6, max_length=72)
    ai_usage_limit: Optional[int] = Field(None, ge=0)
    subscription_end_date: Optional[datetime] = None

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: Optional[str]) -> Optional[str]:
        return _check_password_bytes(v)


class ClinicResponse(BaseModel):
    id: int
    name: str
    email: str
    role: ClinicRole
    subscription_active: bool
    subscription_end_date: Optional[datetime] = None
    ai_usage_count: int
    ai_usage_limit: int
    last_ai_usage_reset: Optional[datetime] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ClinicList(BaseModel):
    items: List[ClinicResponse]
    total: int


# =============================================================================
# ABONNEMENT & QUOTA
# =============================================================================

class SubscriptionExtendRequest(BaseModel):
    days: int = Field(..., gt=0, le=3650, description="Nombre de jours ajoutés")


class QuotaStatusResponse(BaseModel):
    count: int
    limit: int
    remaining: int
    last_reset: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
