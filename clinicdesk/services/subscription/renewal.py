"""
Prolongation et arrêt des abonnements (opérateur).

La prolongation part de la plus tardive des deux dates : échéance actuelle
ou maintenant. Un abonnement encore en cours ne perd donc aucun jour payé,
et un abonnement échu repart d'aujourd'hui.
"""

import logging
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy.orm import Session

from clinicdesk.core.session_store import SessionStore
from clinicdesk.core.utils.datetime_utils import ensure_utc, utcnow
from clinicdesk.models.clinic import Clinic
from clinicdesk.services.subscription.exceptions import (
    ClinicNotFoundError,
    InvalidExtensionError,
)

logger = logging.getLogger(__name__)


def compute_extended_end(current_end: Optional[datetime], days: int, now: datetime) -> datetime:
    """Nouvelle échéance = max(échéance actuelle, maintenant) + days."""
    now = ensure_utc(now)
    current_end = ensure_utc(current_end)
    base = max(current_end, now) if current_end is not None else now
    return base + timedelta(days=days)


class SubscriptionAdmin:
    """
    Opérations opérateur sur l'abonnement d'une clinique.

    Le store de sessions est optionnel : sans lui, l'arrêt d'un abonnement
    ne prend effet qu'à la prochaine connexion.
    """

    def __init__(self, db: Session, session_store: Optional[SessionStore] = None):
        self.db = db
        self.session_store = session_store

    def _get_clinic(self, clinic_id: int) -> Clinic:
        clinic = self.db.get(Clinic, clinic_id)
        if clinic is None:
            raise ClinicNotFoundError(f"Clinique {clinic_id} non trouvée")
        return clinic

    def extend_subscription(self, clinic_id: int, days: int, now: Optional[datetime] = None) -> Clinic:
        """Prolonge l'abonnement de `days` jours et le réactive."""
        if days <= 0:
            raise InvalidExtensionError("Le nombre de jours doit être strictement positif")

        clinic = self._get_clinic(clinic_id)
        clinic.subscription_end_date = compute_extended_end(
            clinic.subscription_end_date, days, now or utcnow()
        )
        clinic.subscription_active = True
        self.db.commit()
        self.db.refresh(clinic)

        logger.info(
            f"Abonnement de la clinique {clinic_id} prolongé de {days} jours "
            f"(échéance : {clinic.subscription_end_date})"
        )
        return clinic

    def stop_subscription(self, clinic_id: int) -> Clinic:
        """Désactive l'abonnement et révoque les sessions ouvertes."""
        clinic = self._get_clinic(clinic_id)
        clinic.subscription_active = False
        self.db.commit()
        self.db.refresh(clinic)

        if self.session_store is not None:
            self.session_store.invalidate_clinic(clinic_id)

        logger.warning(f"Abonnement de la clinique {clinic_id} arrêté par l'opérateur")
        return clinic
