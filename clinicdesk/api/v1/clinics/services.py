"""
Service de gestion des cliniques (opérateur).

Création, consultation, modification et suppression des comptes clinique.
Les opérations d'abonnement et de quota sont déléguées au moteur
d'abonnement (clinicdesk.services.subscription).
"""

import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from clinicdesk.api.v1.clinics.schemas import ClinicCreate, ClinicUpdate
from clinicdesk.core.security.hashing import hash_password
from clinicdesk.core.session_store import SessionStore
from clinicdesk.core.utils.datetime_utils import add_months, utcnow
from clinicdesk.models.clinic import Clinic
from clinicdesk.models.enums import ClinicRole
from clinicdesk.services.subscription import ClinicNotFoundError, normalize_email

logger = logging.getLogger(__name__)


# =============================================================================
# EXCEPTIONS
# =============================================================================

class DuplicateEmailError(Exception):
    """Email déjà utilisé par un autre compte."""
    pass


# =============================================================================
# SERVICE
# =============================================================================

class ClinicService:
    """CRUD des comptes clinique (rôle doctor)."""

    def __init__(self, db: Session, session_store: Optional[SessionStore] = None):
        self.db = db
        self.session_store = session_store

    def _ensure_email_available(self, email: str, exclude_id: Optional[int] = None) -> None:
        query = select(Clinic.id).where(Clinic.email == email)
        if exclude_id is not None:
            query = query.where(Clinic.id != exclude_id)
        if self.db.execute(query).first() is not None:
            raise DuplicateEmailError(f"L'email {email} est déjà utilisé")

    def list_clinics(self) -> List[Clinic]:
        """Cliniques clientes, les plus récentes en premier."""
        query = (
            select(Clinic)
            .where(Clinic.role == ClinicRole.DOCTOR)
            .order_by(Clinic.created_at.desc(), Clinic.id.desc())
        )
        return list(self.db.execute(query).scalars().all())

    def get_by_id(self, clinic_id: int) -> Clinic:
        clinic = self.db.get(Clinic, clinic_id)
        if clinic is None or clinic.is_operator:
            raise ClinicNotFoundError(f"Clinique {clinic_id} non trouvée")
        return clinic

    def create(self, data: ClinicCreate, now: Optional[datetime] = None) -> Clinic:
        """
        Crée une clinique active.

        Échéance par défaut : un mois calendaire après la création.
        """
        now = now or utcnow()
        email = normalize_email(data.email)
        self._ensure_email_available(email)

        clinic = Clinic(
            name=data.name.strip(),
            email=email,
            password_hash=hash_password(data.password),
            role=ClinicRole.DOCTOR,
            subscription_active=True,
            subscription_end_date=data.subscription_end_date or add_months(now, 1),
            ai_usage_count=0,
            last_ai_usage_reset=now,
        )
        if data.ai_usage_limit is not None:
            clinic.ai_limit = data.ai_usage_limit

        self.db.add(clinic)
        self.db.commit()
        self.db.refresh(clinic)

        logger.info(f"Clinique {clinic.id} créée ({clinic.email})")
        return clinic

    def update(self, clinic_id: int, data: ClinicUpdate) -> Clinic:
        clinic = self.get_by_id(clinic_id)
        update_data = data.model_dump(exclude_unset=True)

        if update_data.get("email"):
            email = normalize_email(update_data["email"])
            self._ensure_email_available(email, exclude_id=clinic.id)
            clinic.email = email
        if update_data.get("name"):
            clinic.name = update_data["name"].strip()
        if update_data.get("password"):
            clinic.password_hash = hash_password(update_data["password"])
        if "ai_usage_limit" in update_data:
            clinic.ai_limit = update_data["ai_usage_limit"]
        if "subscription_end_date" in update_data:
            clinic.subscription_end_date = update_data["subscription_end_date"]

        self.db.commit()
        self.db.refresh(clinic)
        return clinic

    def delete(self, clinic_id: int) -> None:
        """Supprime la clinique et toutes ses données (patients, finances)."""
        clinic = self.get_by_id(clinic_id)
        self.db.delete(clinic)
        self.db.commit()

        if self.session_store is not None:
            self.session_store.invalidate_clinic(clinic_id)

        logger.warning(f"Clinique {clinic_id} supprimée")
