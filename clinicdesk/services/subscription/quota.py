"""
Quota mensuel de l'assistant IA.

Le compteur est incrémenté par une unique requête conditionnelle :

    UPDATE clinics SET ai_usage_count = ai_usage_count + 1
    WHERE id = :id AND ai_usage_count < COALESCE(ai_limit, <défaut>)

Deux requêtes concurrentes ne peuvent donc ni perdre un incrément ni faire
dépasser le plafond. La remise à zéro mensuelle est appliquée paresseusement
au moment de la vérification du quota (mois calendaire UTC).

Les UPDATE contournent l'identity map : la session est expirée après
chaque écriture pour que les instances Clinic chargées soient relues.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from sqlalchemy import func, or_, select, update
from sqlalchemy.orm import Session

from clinicdesk.core.config import settings
from clinicdesk.core.utils.datetime_utils import ensure_utc, start_of_month, utcnow
from clinicdesk.models.clinic import Clinic
from clinicdesk.services.subscription.exceptions import ClinicNotFoundError

logger = logging.getLogger(__name__)


def _limit_expr():
    return func.coalesce(Clinic.ai_limit, settings.DEFAULT_AI_USAGE_LIMIT)


@dataclass(frozen=True)
class QuotaStatus:
    """Photographie du quota d'une clinique."""
    count: int
    limit: int
    last_reset: Optional[datetime]

    @property
    def remaining(self) -> int:
        return max(0, self.limit - self.count)

    @property
    def exhausted(self) -> bool:
        return self.count >= self.limit


class QuotaTracker:
    """Vérification, consommation et remise à zéro du quota IA."""

    def __init__(self, db: Session):
        self.db = db

    def usage(self, clinic_id: int) -> QuotaStatus:
        """Relit le compteur en base (pas de cache d'identité)."""
        row = self.db.execute(
            select(Clinic.ai_usage_count, _limit_expr(), Clinic.last_ai_usage_reset)
            .where(Clinic.id == clinic_id)
        ).one_or_none()

        if row is None:
            raise ClinicNotFoundError(f"Clinique {clinic_id} non trouvée")

        count, limit, last_reset = row
        return QuotaStatus(count=count, limit=limit, last_reset=ensure_utc(last_reset))

    def reset_if_new_month(self, clinic_id: int, now: Optional[datetime] = None) -> bool:
        """
        Remet le compteur à zéro si la dernière remise date d'un mois précédent.

        Returns:
            True si une remise à zéro a eu lieu
        """
        now = now or utcnow()
        month_start = start_of_month(now)

        result = self.db.execute(
            update(Clinic)
            .where(
                Clinic.id == clinic_id,
                or_(
                    Clinic.last_ai_usage_reset.is_(None),
                    Clinic.last_ai_usage_reset < month_start,
                ),
            )
            .values(ai_usage_count=0, last_ai_usage_reset=now)
            .execution_options(synchronize_session=False)
        )
        self.db.commit()
        self.db.expire_all()

        if result.rowcount:
            logger.info(f"Quota IA de la clinique {clinic_id} remis à zéro ({now:%Y-%m})")
            return True
        return False

    def check_quota(self, clinic_id: int, now: Optional[datetime] = None) -> bool:
        """True si la clinique peut encore interroger l'assistant ce mois-ci."""
        self.reset_if_new_month(clinic_id, now)
        return not self.usage(clinic_id).exhausted

    def increment_usage(self, clinic_id: int) -> bool:
        """
        Consomme une unité de quota de manière atomique.

        Returns:
            False si le plafond était déjà atteint (aucune écriture)
        """
        result = self.db.execute(
            update(Clinic)
            .where(Clinic.id == clinic_id, Clinic.ai_usage_count < _limit_expr())
            .values(ai_usage_count=Clinic.ai_usage_count + 1)
            .execution_options(synchronize_session=False)
        )
        self.db.commit()
        self.db.expire_all()
        return result.rowcount == 1

    def reset(self, clinic_id: int, now: Optional[datetime] = None) -> QuotaStatus:
        """Remise à zéro manuelle (maintenance opérateur)."""
        result = self.db.execute(
            update(Clinic)
            .where(Clinic.id == clinic_id)
            .values(ai_usage_count=0, last_ai_usage_reset=now or utcnow())
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            self.db.rollback()
            raise ClinicNotFoundError(f"Clinique {clinic_id} non trouvée")
        self.db.commit()
        self.db.expire_all()

        logger.info(f"Quota IA de la clinique {clinic_id} remis à zéro par l'opérateur")
        return self.usage(clinic_id)
