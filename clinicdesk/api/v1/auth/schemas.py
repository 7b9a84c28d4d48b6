"""Schémas Pydantic de l'authentification."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from clinicdesk.models.enums import ClinicRole


class LoginRequest(BaseModel):
    """Identifiants de connexion d'une clinique ou de l'opérateur."""
    email: EmailStr
    password: str = Field(..., min_length=1, max_length=72)


class SessionResponse(BaseModel):
    """Contexte de session exposé au client (sans l'identifiant de session)."""
    clinic_id: int
    name: str
    email: str
    role: ClinicRole
    subscription_active: bool
    subscription_end_date: Optional[datetime] = None
    ai_usage_limit: int
    created_at: datetime
    expires_at: datetime

    model_config = ConfigDict(from_attributes=True)


class LoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int = Field(..., description="Durée de validité en secondes")
    clinic: SessionResponse
