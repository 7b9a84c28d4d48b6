"""
Configuration de la session SQLAlchemy
Fournit l'engine, la factory de sessions, et la dependency FastAPI
"""
import logging
from typing import Generator, Optional

from sqlalchemy import create_engine, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker, Session

from clinicdesk.core.config import settings

logger = logging.getLogger(__name__)


# === 1. ENGINE ===

def _engine_options(url: str) -> dict:
    """Options du pool selon le dialecte (SQLite n'a pas de pool QueuePool)."""
    if url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}
    return {
        "pool_size": 5,              # Connexions permanentes
        "max_overflow": 10,          # Connexions temporaires si besoin
        "pool_timeout": 30,
        "pool_recycle": 1800,        # Recycler après 30 min
        "pool_pre_ping": True,       # Vérifier la connexion avant usage
        "connect_args": {
            "application_name": "clinicdesk",
            "options": "-c timezone=UTC",
        },
    }


engine = create_engine(
    settings.DATABASE_URL,
    echo=settings.DEBUG and settings.is_development,
    **_engine_options(settings.DATABASE_URL),
)


# === 2. SESSION LOCAL ===

SessionLocal = sessionmaker(
    bind=engine,
    autocommit=False,
    autoflush=False,
    expire_on_commit=False,   # Garder les objets accessibles après commit
)


# === 3. DEPENDENCY FASTAPI ===

def get_db() -> Generator[Session, None, None]:
    """
    Dependency FastAPI : une session par requête.

    Commit si la requête se termine sans erreur, rollback sinon.
    """
    db = SessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


class db_session:
    """
    Context manager pour utiliser une session hors FastAPI (scripts).

    Usage:
        with db_session() as db:
            db.add(clinic)
            # Commit automatique si pas d'erreur
    """

    def __init__(self, commit_on_exit: bool = True):
        self.db: Optional[Session] = None
        self.commit_on_exit = commit_on_exit

    def __enter__(self) -> Session:
        self.db = SessionLocal()
        return self.db

    def __exit__(self, exc_type, exc_val, exc_tb):
        try:
            if exc_type is None and self.commit_on_exit:
                self.db.commit()
            else:
                self.db.rollback()
        finally:
            self.db.close()

        # Ne pas supprimer l'exception (la propager)
        return False


# === 4. VÉRIFICATION DE CONNEXION ===

def check_database_connection() -> bool:
    """
    Vérifie que la connexion à la base de données fonctionne.

    Utile pour les health checks et le démarrage de l'application.
    """
    try:
        with engine.connect() as connection:
            connection.execute(text("SELECT 1"))
        return True
    except SQLAlchemyError as e:
        logger.error(f"❌ Erreur de connexion à la base de données : {e}")
        return False
