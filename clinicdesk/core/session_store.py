"""
Sessions applicatives stockées dans Redis.

Une session est ouverte à la connexion d'une clinique et référencée par le
claim `sid` du JWT. Tant qu'elle existe dans Redis, le token est accepté ;
la supprimer (déconnexion, arrêt d'abonnement, suppression du compte) révoque
immédiatement l'accès, sans attendre l'expiration du token.

Clés Redis :
    session:{sid}               -> SessionContext sérialisé (TTL)
    clinic_sessions:{clinic_id} -> ensemble des sid ouverts pour la clinique
"""

import logging
import secrets
from datetime import datetime, timedelta
from typing import Optional

import redis
from pydantic import BaseModel, ConfigDict

from clinicdesk.core.config import settings
from clinicdesk.core.redis_client import get_redis
from clinicdesk.core.utils.datetime_utils import utcnow
from clinicdesk.models.clinic import Clinic
from clinicdesk.models.enums import ClinicRole

logger = logging.getLogger(__name__)


class SessionContext(BaseModel):
    """
    Identité authentifiée d'une requête.

    Instantané de la clinique au moment de la connexion ; les compteurs
    vivants (quota IA) sont relus en base lorsqu'ils sont nécessaires.
    """

    model_config = ConfigDict(frozen=True)

    session_id: str
    clinic_id: int
    name: str
    email: str
    role: ClinicRole
    subscription_active: bool
    subscription_end_date: Optional[datetime] = None
    ai_usage_limit: int
    created_at: datetime
    expires_at: datetime

    @property
    def is_operator(self) -> bool:
        return self.role == ClinicRole.OPERATOR


class SessionStore:
    """Ouverture, lecture et invalidation des sessions."""

    SESSION_PREFIX = "session:"
    CLINIC_INDEX_PREFIX = "clinic_sessions:"

    def __init__(self, client: redis.Redis, ttl_seconds: Optional[int] = None):
        self.redis = client
        self.ttl_seconds = ttl_seconds or settings.SESSION_TTL_MINUTES * 60

    def _session_key(self, session_id: str) -> str:
        return f"{self.SESSION_PREFIX}{session_id}"

    def _index_key(self, clinic_id: int) -> str:
        return f"{self.CLINIC_INDEX_PREFIX}{clinic_id}"

    def open(self, clinic: Clinic) -> SessionContext:
        """Crée une session pour une clinique authentifiée."""
        now = utcnow()
        context = SessionContext(
            session_id=secrets.token_urlsafe(32),
            clinic_id=clinic.id,
            name=clinic.name,
            email=clinic.email,
            role=clinic.role,
            subscription_active=clinic.subscription_active,
            subscription_end_date=clinic.subscription_end_date,
            ai_usage_limit=clinic.ai_usage_limit,
            created_at=now,
            expires_at=now + timedelta(seconds=self.ttl_seconds),
        )

        self.redis.setex(
            self._session_key(context.session_id),
            self.ttl_seconds,
            context.model_dump_json(),
        )
        index_key = self._index_key(clinic.id)
        self.redis.sadd(index_key, context.session_id)
        self.redis.expire(index_key, self.ttl_seconds)

        logger.debug(f"Session ouverte pour la clinique {clinic.id}")
        return context

    def get(self, session_id: str) -> Optional[SessionContext]:
        """Retourne la session si elle est toujours valide."""
        raw = self.redis.get(self._session_key(session_id))
        if raw is None:
            return None
        return SessionContext.model_validate_json(raw)

    def close(self, context: SessionContext) -> None:
        """Déconnexion : supprime la session courante."""
        self.redis.delete(self._session_key(context.session_id))
        self.redis.srem(self._index_key(context.clinic_id), context.session_id)

    def invalidate_clinic(self, clinic_id: int) -> int:
        """
        Révoque toutes les sessions ouvertes d'une clinique.

        Returns:
            Nombre de sessions supprimées
        """
        index_key = self._index_key(clinic_id)
        session_ids = self.redis.smembers(index_key)
        removed = 0
        for session_id in session_ids:
            removed += self.redis.delete(self._session_key(session_id))
        self.redis.delete(index_key)

        if removed:
            logger.info(f"🔒 {removed} session(s) révoquée(s) pour la clinique {clinic_id}")
        return removed


def get_session_store() -> SessionStore:
    """Dépendance FastAPI : store de sessions adossé au client Redis partagé."""
    return SessionStore(get_redis())
