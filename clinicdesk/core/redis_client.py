"""Client Redis partagé (stockage des sessions)."""

from typing import Optional

import redis

from clinicdesk.core.config import settings


class RedisClient:
    """Singleton paresseux autour d'un pool de connexions Redis."""

    _instance: Optional[redis.Redis] = None

    @classmethod
    def get_client(cls) -> redis.Redis:
        if cls._instance is None:
            cls._instance = redis.Redis.from_url(
                settings.redis_url,
                max_connections=settings.REDIS_MAX_CONNECTIONS,
                decode_responses=True,
                socket_keepalive=True,
                socket_connect_timeout=5,
                retry_on_timeout=True,
            )
        return cls._instance

    @classmethod
    def close(cls):
        """Ferme le pool (arrêt de l'application)."""
        if cls._instance is not None:
            cls._instance.close()
            cls._instance = None


def get_redis() -> redis.Redis:
    """Dépendance FastAPI / helper : client Redis courant."""
    return RedisClient.get_client()
