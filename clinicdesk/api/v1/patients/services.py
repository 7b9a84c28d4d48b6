"""
Services du dossier patient : patients, consultations, constantes.

MULTI-TENANT : chaque service est instancié avec le clinic_id de la session ;
un enregistrement d'une autre clinique est traité comme inexistant.
"""

import logging
from typing import List, Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from clinicdesk.api.v1.patients.schemas import (
    PatientCreate,
    PatientUpdate,
    VisitCreate,
    VisitUpdate,
    VitalCreate,
)
from clinicdesk.core.utils.datetime_utils import utcnow
from clinicdesk.models.patient import Patient, Visit, VitalLog
from clinicdesk.services.storage import VISITS_FOLDER, ImageUploader

logger = logging.getLogger(__name__)


# Champs applicatifs -> colonnes stockées
VISIT_FIELD_MAP = {
    "date": "visit_date",
    "prescription_image": "image_url",
}


# =============================================================================
# EXCEPTIONS
# =============================================================================

class PatientNotFoundError(Exception):
    """Patient non trouvé (ou appartenant à une autre clinique)."""
    pass


class VisitNotFoundError(Exception):
    """Consultation non trouvée."""
    pass


class EmptyVitalsError(Exception):
    """Relevé sans aucune mesure."""
    pass


# =============================================================================
# PATIENT SERVICE
# =============================================================================

class PatientService:
    """Service pour la gestion des patients d'une clinique."""

    def __init__(self, db: Session, clinic_id: int):
        self.db = db
        self.clinic_id = clinic_id

    def get_all(
            self,
            page: int = 1,
            size: int = 20,
            search: Optional[str] = None,
    ) -> Tuple[List[Patient], int]:
        """Liste les patients (recherche par nom ou téléphone)."""
        query = select(Patient).where(Patient.clinic_id == self.clinic_id)

        if search:
            pattern = f"%{search.strip()}%"
            query = query.where(Patient.name.ilike(pattern) | Patient.phone.ilike(pattern))

        count_query = select(func.count()).select_from(query.subquery())
        total = self.db.execute(count_query).scalar() or 0

        query = query.order_by(Patient.created_at.desc(), Patient.id.desc())
        query = query.offset((page - 1) * size).limit(size)

        items = self.db.execute(query).scalars().all()
        return list(items), total

    def get_by_id(self, patient_id: int) -> Patient:
        patient = self.db.execute(
            select(Patient).where(
                Patient.id == patient_id,
                Patient.clinic_id == self.clinic_id,
            )
        ).scalar_one_or_none()

        if not patient:
            raise PatientNotFoundError(f"Patient {patient_id} non trouvé")
        return patient

    def create(self, data: PatientCreate) -> Patient:
        patient = Patient(clinic_id=self.clinic_id, **data.model_dump())
        self.db.add(patient)
        self.db.commit()
        self.db.refresh(patient)
        return patient

    def update(self, patient_id: int, data: PatientUpdate) -> Patient:
        patient = self.get_by_id(patient_id)
        for field, value in data.model_dump(exclude_unset=True).items():
            if field == "name" and value is None:
                continue
            if field == "chronic_diseases" and value is None:
                value = []
            setattr(patient, field, value)

        self.db.commit()
        self.db.refresh(patient)
        return patient

    def delete(self, patient_id: int) -> None:
        """Suppression définitive (consultations et constantes incluses)."""
        patient = self.get_by_id(patient_id)
        self.db.delete(patient)
        self.db.commit()
        logger.info(f"Patient {patient_id} supprimé (clinique {self.clinic_id})")


# =============================================================================
# VISIT SERVICE
# =============================================================================

class VisitService:
    """
    Service pour les consultations.

    L'image d'ordonnance passe par ImageUploader (upload-if-new). Un échec
    d'envoi abandonne l'écriture : ImageUploadError est propagée et rien
    n'est enregistré.
    """

    def __init__(self, db: Session, clinic_id: int, uploader: Optional[ImageUploader] = None):
        self.db = db
        self.clinic_id = clinic_id
        self.uploader = uploader
        self.patients = PatientService(db, clinic_id)

    async def _resolve_image(self, value: Optional[str]) -> Optional[str]:
        if self.uploader is None:
            return value
        result = await self.uploader.upload_if_new(value, VISITS_FOLDER)
        return result.unwrap()

    def get_all_for_patient(self, patient_id: int) -> List[Visit]:
        """Consultations du patient, les plus récentes en premier."""
        self.patients.get_by_id(patient_id)
        query = (
            select(Visit)
            .where(Visit.patient_id == patient_id, Visit.clinic_id == self.clinic_id)
            .order_by(Visit.visit_date.desc(), Visit.id.desc())
        )
        return list(self.db.execute(query).scalars().all())

    def get_by_id(self, visit_id: int, patient_id: int) -> Visit:
        self.patients.get_by_id(patient_id)
        visit = self.db.get(Visit, visit_id)
        if not visit or visit.patient_id != patient_id or visit.clinic_id != self.clinic_id:
            raise VisitNotFoundError(f"Consultation {visit_id} non trouvée")
        return visit

    async def create(self, patient_id: int, data: VisitCreate) -> Visit:
        self.patients.get_by_id(patient_id)

        values = data.model_dump()
        values["prescription_image"] = await self._resolve_image(data.prescription_image)
        if values["date"] is None:
            values["date"] = utcnow()

        visit = Visit(
            clinic_id=self.clinic_id,
            patient_id=patient_id,
            **{VISIT_FIELD_MAP.get(k, k): v for k, v in values.items()},
        )
        self.db.add(visit)
        self.db.commit()
        self.db.refresh(visit)
        return visit

    async def update(self, visit_id: int, patient_id: int, data: VisitUpdate) -> Visit:
        visit = self.get_by_id(visit_id, patient_id)

        values = data.model_dump(exclude_unset=True)
        if "prescription_image" in values:
            values["prescription_image"] = await self._resolve_image(values["prescription_image"])
        if "date" in values and values["date"] is None:
            del values["date"]

        for field, value in values.items():
            setattr(visit, VISIT_FIELD_MAP.get(field, field), value)

        self.db.commit()
        self.db.refresh(visit)
        return visit

    def delete(self, visit_id: int, patient_id: int) -> None:
        visit = self.get_by_id(visit_id, patient_id)
        self.db.delete(visit)
        self.db.commit()


# =============================================================================
# VITALS SERVICE
# =============================================================================

class VitalsService:
    """Relevés de constantes (ajout et consultation uniquement)."""

    def __init__(self, db: Session, clinic_id: int):
        self.db = db
        self.clinic_id = clinic_id
        self.patients = PatientService(db, clinic_id)

    def get_all_for_patient(self, patient_id: int) -> List[VitalLog]:
        """Relevés du patient, du plus récent au plus ancien."""
        self.patients.get_by_id(patient_id)
        query = (
            select(VitalLog)
            .where(VitalLog.patient_id == patient_id)
            .order_by(VitalLog.recorded_at.desc(), VitalLog.id.desc())
        )
        return list(self.db.execute(query).scalars().all())

    def create(self, patient_id: int, data: VitalCreate) -> VitalLog:
        self.patients.get_by_id(patient_id)
        if not data.has_measure:
            raise EmptyVitalsError("Le relevé doit contenir au moins une mesure")

        vital = VitalLog(
            patient_id=patient_id,
            recorded_at=data.date or utcnow(),
            blood_pressure=data.blood_pressure,
            heart_rate=data.heart_rate,
            oxygen_level=data.oxygen_level,
            temperature=data.temperature,
            blood_sugar=data.blood_sugar,
        )
        self.db.add(vital)
        self.db.commit()
        self.db.refresh(vital)
        return vital
