"""Schémas Pydantic de la configuration globale."""

from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class SystemConfigResponse(BaseModel):
    payment_barcode_url: Optional[str] = ""
    payment_instructions: Optional[str] = ""
    support_whatsapp: Optional[str] = ""
    custom_logo_url: Optional[str] = ""
    app_logo_url: Optional[str] = ""
    social_links: Dict[str, str] = Field(default_factory=dict)

    model_config = ConfigDict(from_attributes=True)


class SystemConfigUpdate(BaseModel):
    """
    Mise à jour partielle ; les champs image acceptent une URL existante
    ou une image encodée en ligne (data URL), envoyée au stockage.
    """
    payment_barcode_url: Optional[str] = None
    payment_instructions: Optional[str] = None
    support_whatsapp: Optional[str] = Field(None, max_length=50)
    custom_logo_url: Optional[str] = None
    app_logo_url: Optional[str] = None
    social_links: Optional[Dict[str, str]] = None
