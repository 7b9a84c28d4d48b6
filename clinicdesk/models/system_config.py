# clinicdesk/models/system_config.py
"""
Configuration globale de la plateforme (ligne unique id=1).

Pilotée par l'opérateur, lue par toutes les cliniques : instructions de
paiement, QR code, contact support, logos, réseaux sociaux.
"""

from typing import Optional

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from clinicdesk.database.base_class import Base
from clinicdesk.models.mixins import TimestampMixin
from clinicdesk.models.types import JSONLinks

SYSTEM_CONFIG_ID = 1

DEFAULT_PAYMENT_INSTRUCTIONS = (
    "Please transfer the subscription amount using the payment code, "
    "then send the receipt to support on WhatsApp."
)

DEFAULT_SOCIAL_LINKS = {"facebook": "", "instagram": "", "youtube": ""}


class SystemConfig(Base, TimestampMixin):
    """Singleton de configuration (toujours id = 1)."""

    __tablename__ = "system_config"

    id: Mapped[int] = mapped_column(primary_key=True, default=SYSTEM_CONFIG_ID)

    # ========================
    # Paiement
    # ========================
    payment_barcode_url: Mapped[Optional[str]] = mapped_column(String(1024), default="")
    payment_instructions: Mapped[Optional[str]] = mapped_column(
        Text,
        default=DEFAULT_PAYMENT_INSTRUCTIONS,
    )

    # ========================
    # Support et image de marque
    # ========================
    support_whatsapp: Mapped[Optional[str]] = mapped_column(String(50), default="")
    custom_logo_url: Mapped[Optional[str]] = mapped_column(String(1024), default="")
    app_logo_url: Mapped[Optional[str]] = mapped_column(String(1024), default="")
    social_links: Mapped[dict] = mapped_column(
        JSONLinks,
        default=lambda: dict(DEFAULT_SOCIAL_LINKS),
        nullable=False,
    )

    @classmethod
    def defaults(cls) -> "SystemConfig":
        """Instance transitoire (non persistée) portant les valeurs par défaut."""
        return cls(
            id=SYSTEM_CONFIG_ID,
            payment_barcode_url="",
            payment_instructions=DEFAULT_PAYMENT_INSTRUCTIONS,
            support_whatsapp="",
            custom_logo_url="",
            app_logo_url="",
            social_links=dict(DEFAULT_SOCIAL_LINKS),
        )
