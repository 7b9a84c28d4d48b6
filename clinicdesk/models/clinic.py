# clinicdesk/models/clinic.py
"""
Modèle Clinic - Représente un compte (locataire) de la plateforme ClinicDesk.

Un compte est soit une clinique cliente (rôle doctor), soit l'opérateur SaaS
qui administre les abonnements de toutes les cliniques.
"""

from datetime import datetime
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import Boolean, DateTime, Enum, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from clinicdesk.core.config import settings
from clinicdesk.core.utils.datetime_utils import ensure_utc
from clinicdesk.database.base_class import Base
from clinicdesk.models.enums import ClinicRole, enum_values
from clinicdesk.models.mixins import TimestampMixin

if TYPE_CHECKING:
    from clinicdesk.models.patient import Patient
    from clinicdesk.models.finance import FinancialTransaction


class Clinic(Base, TimestampMixin):
    """
    Compte d'une clinique (tenant) ou de l'opérateur.

    Porte les informations d'authentification, l'état de l'abonnement
    et le compteur mensuel d'utilisation de l'assistant IA.
    """

    __tablename__ = "clinics"

    # ========================
    # Clé primaire
    # ========================
    id: Mapped[int] = mapped_column(primary_key=True)

    # ========================
    # Identification
    # ========================
    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Nom de la clinique"
    )
    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        index=True,
        nullable=False,
        comment="Identifiant de connexion"
    )
    password_hash: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Hash bcrypt du mot de passe"
    )
    role: Mapped[ClinicRole] = mapped_column(
        Enum(
            ClinicRole,
            name="clinic_role_enum",
            create_constraint=True,
            values_callable=enum_values,
        ),
        default=ClinicRole.DOCTOR,
        nullable=False,
    )

    # ========================
    # Abonnement
    # ========================
    subscription_active: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False,
        comment="Abonnement actif (désactivé par l'opérateur ou à l'expiration)"
    )
    subscription_end_date: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        comment="Fin de l'abonnement (NULL = sans échéance)"
    )

    # ========================
    # Quota assistant IA
    # ========================
    ai_usage_count: Mapped[int] = mapped_column(
        Integer,
        default=0,
        nullable=False,
        comment="Questions posées à l'assistant depuis la dernière remise à zéro"
    )
    ai_limit: Mapped[Optional[int]] = mapped_column(
        Integer,
        default=settings.DEFAULT_AI_USAGE_LIMIT,
        comment="Plafond mensuel (NULL = valeur par défaut)"
    )
    last_ai_usage_reset: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        comment="Dernière remise à zéro du compteur"
    )

    # ========================
    # Relations
    # ========================
    patients: Mapped[List["Patient"]] = relationship(
        "Patient",
        back_populates="clinic",
        cascade="all, delete-orphan",
    )
    transactions: Mapped[List["FinancialTransaction"]] = relationship(
        "FinancialTransaction",
        back_populates="clinic",
        cascade="all, delete-orphan",
    )

    # ========================
    # Propriétés
    # ========================

    @property
    def is_operator(self) -> bool:
        return self.role == ClinicRole.OPERATOR

    @property
    def ai_usage_limit(self) -> int:
        """Plafond effectif (valeur par défaut si non renseigné)."""
        if self.ai_limit is None:
            return settings.DEFAULT_AI_USAGE_LIMIT
        return self.ai_limit

    @property
    def ai_usage_remaining(self) -> int:
        return max(0, self.ai_usage_limit - self.ai_usage_count)

    def is_expired_at(self, moment: datetime) -> bool:
        """True si une date de fin existe et est dépassée."""
        end = ensure_utc(self.subscription_end_date)
        return end is not None and ensure_utc(moment) > end

    def __repr__(self) -> str:
        return f"<Clinic(id={self.id}, email='{self.email}', role='{self.role}')>"
