# clinicdesk/models/patient.py
"""
Dossier patient : Patient, Visit (consultations) et VitalLog (constantes).

Les noms de colonnes sont ceux du stockage ; les schémas API exposent
certains champs sous leur nom applicatif (visit_date -> date,
image_url -> prescription_image, recorded_at -> date).
"""

from datetime import datetime
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import DateTime, Enum, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from clinicdesk.core.utils.datetime_utils import utcnow
from clinicdesk.database.base_class import Base
from clinicdesk.models.enums import Gender, enum_values
from clinicdesk.models.mixins import TimestampMixin
from clinicdesk.models.types import JSONStringList

if TYPE_CHECKING:
    from clinicdesk.models.clinic import Clinic


# =============================================================================
# PATIENT
# =============================================================================

class Patient(Base, TimestampMixin):
    """Patient suivi par une clinique (propriété exclusive du tenant)."""

    __tablename__ = "patients"

    id: Mapped[int] = mapped_column(primary_key=True)
    clinic_id: Mapped[int] = mapped_column(
        ForeignKey("clinics.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )

    # ========================
    # Identité
    # ========================
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    age: Mapped[Optional[int]] = mapped_column(Integer)
    phone: Mapped[Optional[str]] = mapped_column(String(50))
    gender: Mapped[Optional[Gender]] = mapped_column(
        Enum(Gender, name="gender_enum", create_constraint=True, values_callable=enum_values)
    )

    # ========================
    # Données médicales
    # ========================
    blood_type: Mapped[Optional[str]] = mapped_column(String(5))
    weight: Mapped[Optional[float]] = mapped_column(Float, comment="Poids en kg")
    allergies: Mapped[Optional[str]] = mapped_column(Text)
    chronic_diseases: Mapped[list] = mapped_column(
        JSONStringList,
        default=list,
        nullable=False,
        comment="Maladies chroniques (liste de libellés)"
    )

    # ========================
    # Relations
    # ========================
    clinic: Mapped["Clinic"] = relationship("Clinic", back_populates="patients")
    visits: Mapped[List["Visit"]] = relationship(
        "Visit",
        back_populates="patient",
        cascade="all, delete-orphan",
        order_by="Visit.visit_date.desc()",
    )
    vitals: Mapped[List["VitalLog"]] = relationship(
        "VitalLog",
        back_populates="patient",
        cascade="all, delete-orphan",
        order_by="VitalLog.recorded_at.desc()",
    )

    def __repr__(self) -> str:
        return f"<Patient(id={self.id}, clinic_id={self.clinic_id})>"


# =============================================================================
# VISIT
# =============================================================================

class Visit(Base, TimestampMixin):
    """Consultation : diagnostic, traitement, ordonnance éventuelle."""

    __tablename__ = "visits"

    id: Mapped[int] = mapped_column(primary_key=True)
    clinic_id: Mapped[int] = mapped_column(
        ForeignKey("clinics.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )
    patient_id: Mapped[int] = mapped_column(
        ForeignKey("patients.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )

    visit_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
    )
    diagnosis: Mapped[Optional[str]] = mapped_column(Text)
    treatment: Mapped[Optional[str]] = mapped_column(Text)
    notes: Mapped[Optional[str]] = mapped_column(Text)
    image_url: Mapped[Optional[str]] = mapped_column(
        String(1024),
        comment="URL publique de la photo d'ordonnance"
    )
    allergies: Mapped[Optional[str]] = mapped_column(Text)

    patient: Mapped["Patient"] = relationship("Patient", back_populates="visits")

    def __repr__(self) -> str:
        return f"<Visit(id={self.id}, patient_id={self.patient_id})>"


# =============================================================================
# VITAL LOG
# =============================================================================

class VitalLog(Base):
    """
    Relevé de constantes (append-only).

    La tension est conservée telle que saisie ("120/80").
    """

    __tablename__ = "vitals_logs"

    id: Mapped[int] = mapped_column(primary_key=True)
    patient_id: Mapped[int] = mapped_column(
        ForeignKey("patients.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )

    recorded_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
    )
    blood_pressure: Mapped[Optional[str]] = mapped_column(String(20))
    heart_rate: Mapped[Optional[int]] = mapped_column(Integer)
    oxygen_level: Mapped[Optional[int]] = mapped_column(Integer, comment="SpO2 en %")
    temperature: Mapped[Optional[float]] = mapped_column(Float, comment="°C")
    blood_sugar: Mapped[Optional[float]] = mapped_column(Float, comment="mg/dL")

    patient: Mapped["Patient"] = relationship("Patient", back_populates="vitals")

    def __repr__(self) -> str:
        return f"<VitalLog(id={self.id}, patient_id={self.patient_id})>"
