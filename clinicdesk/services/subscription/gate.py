"""
Contrôle d'accès par abonnement.

Règle : une connexion réussit si les identifiants sont valides ET
(le compte est l'opérateur OU (l'abonnement est actif ET sa date de fin
est absente ou future)).

Expiration paresseuse : aucun job ne désactive les abonnements échus.
C'est la tentative de connexion qui, en constatant un abonnement actif mais
échu, le passe à inactif avant de refuser l'accès.
"""

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from clinicdesk.core.security.hashing import verify_password
from clinicdesk.core.utils.datetime_utils import utcnow
from clinicdesk.models.clinic import Clinic
from clinicdesk.services.subscription.exceptions import (
    InvalidCredentialsError,
    SubscriptionExpiredError,
)

logger = logging.getLogger(__name__)


def can_authenticate(clinic: Clinic, now: datetime) -> bool:
    """Applique la règle d'accès (sans effet de bord)."""
    if clinic.is_operator:
        return True
    return clinic.subscription_active and not clinic.is_expired_at(now)


def normalize_email(email: str) -> str:
    return email.strip().lower()


class SubscriptionGate:
    """Authentifie une clinique en appliquant la règle d'abonnement."""

    def __init__(self, db: Session):
        self.db = db

    def authenticate(self, email: str, password: str, now: Optional[datetime] = None) -> Clinic:
        """
        Vérifie les identifiants puis l'abonnement.

        Returns:
            La clinique authentifiée

        Raises:
            InvalidCredentialsError: Email inconnu ou mauvais mot de passe
            SubscriptionExpiredError: Abonnement inactif ou échu
        """
        now = now or utcnow()

        clinic = self.db.execute(
            select(Clinic).where(Clinic.email == normalize_email(email))
        ).scalar_one_or_none()

        if clinic is None or not verify_password(password, clinic.password_hash):
            logger.info(f"Échec de connexion pour {email}")
            raise InvalidCredentialsError("Email ou mot de passe incorrect")

        if can_authenticate(clinic, now):
            logger.info(f"✅ Connexion de la clinique {clinic.id}")
            return clinic

        if clinic.subscription_active:
            # Actif mais échu : écriture différée de l'expiration
            clinic.subscription_active = False
            self.db.commit()
            logger.warning(
                f"Abonnement de la clinique {clinic.id} échu le "
                f"{clinic.subscription_end_date}, désactivé à la connexion"
            )

        raise SubscriptionExpiredError(
            "Votre abonnement a expiré. Contactez le support pour le renouveler."
        )
