"""
Question à l'assistant sur le dossier d'un patient.

Déroulé :
1. vérification du quota (remise à zéro mensuelle comprise) ; quota épuisé,
   aucun appel au modèle
2. appel au modèle ; en cas d'échec le compteur reste inchangé
3. consommation atomique d'une unité de quota
"""

import logging
from typing import Optional, Tuple

from sqlalchemy.orm import Session

from clinicdesk.api.v1.patients.services import PatientService, VisitService
from clinicdesk.core.config import settings
from clinicdesk.services.assistant import AssistantClient, build_messages
from clinicdesk.services.subscription import QuotaExceededError, QuotaStatus, QuotaTracker

logger = logging.getLogger(__name__)


class AssistantService:

    def __init__(self, db: Session, clinic_id: int, client: Optional[AssistantClient] = None):
        self.db = db
        self.clinic_id = clinic_id
        self.client = client
        self.quota = QuotaTracker(db)

    async def ask(self, patient_id: int, question: str) -> Tuple[str, QuotaStatus]:
        """
        Raises:
            PatientNotFoundError: patient absent ou d'une autre clinique
            QuotaExceededError: quota mensuel atteint
            AssistantUnavailableError: échec ou réponse vide du modèle
        """
        patient = PatientService(self.db, self.clinic_id).get_by_id(patient_id)

        if not self.quota.check_quota(self.clinic_id):
            logger.warning(f"Quota IA épuisé pour la clinique {self.clinic_id}")
            raise QuotaExceededError("Quota mensuel de l'assistant IA atteint")

        visits = VisitService(self.db, self.clinic_id).get_all_for_patient(patient_id)
        messages = build_messages(patient, visits, question, settings.ASSISTANT_LANGUAGE)
        answer = await self.client.complete(messages)

        if not self.quota.increment_usage(self.clinic_id):
            # Le plafond a été atteint par une requête concurrente
            logger.warning(
                f"Incrément de quota perdu pour la clinique {self.clinic_id} (plafond atteint)"
            )
        return answer, self.quota.usage(self.clinic_id)

    def usage(self) -> QuotaStatus:
        self.quota.reset_if_new_month(self.clinic_id)
        return self.quota.usage(self.clinic_id)
