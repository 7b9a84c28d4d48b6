"""
Fixtures pytest partagées pour les tests ClinicDesk.

Ce module fournit :
- Une base SQLite en mémoire par test (rapide, isolée)
- Un double en mémoire de Redis pour le store de sessions
- Des comptes de test (opérateur, cliniques dans divers états d'abonnement)
- Des clients HTTP authentifiés (vraie session + vrai JWT)
- Des doubles pour le stockage objet (httpx.MockTransport) et le modèle IA

IMPORTANT : les variables d'environnement sont posées avant tout import de
clinicdesk (l'engine est créé à l'import de clinicdesk.database.session).
"""

import os

os.environ["ENVIRONMENT"] = "test"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["DEFAULT_AI_USAGE_LIMIT"] = "50"
os.environ.pop("AI_API_KEY", None)

from datetime import timedelta
from typing import Generator, List, Optional

import httpx
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool

from clinicdesk.api.v1.assistant.routes import require_assistant_client
from clinicdesk.core.security.hashing import hash_password
from clinicdesk.core.security.jwt import create_access_token
from clinicdesk.core.session_store import SessionStore, get_session_store
from clinicdesk.core.utils.datetime_utils import utcnow
from clinicdesk.database.base_class import Base
from clinicdesk.database.session import get_db
from clinicdesk.main import app
from clinicdesk.models import (
    Clinic,
    ClinicRole,
    Gender,
    Patient,
    Visit,
)
from clinicdesk.services.assistant import AssistantUnavailableError
from clinicdesk.services.storage import ImageUploader, get_image_uploader

TEST_PASSWORD = "secret-password"

# Un seul hash bcrypt pour toute la session de tests (coût 12)
TEST_PASSWORD_HASH = hash_password(TEST_PASSWORD)

STORAGE_BASE_URL = "https://storage.example.com"


# =============================================================================
# DOUBLES
# =============================================================================

class InMemoryRedis:
    """Sous-ensemble des commandes Redis utilisées par SessionStore."""

    def __init__(self):
        self.values = {}
        self.sets = {}

    def setex(self, key, ttl, value):
        self.values[key] = value
        return True

    def get(self, key):
        return self.values.get(key)

    def delete(self, *keys):
        removed = 0
        for key in keys:
            if self.values.pop(key, None) is not None:
                removed += 1
            elif self.sets.pop(key, None) is not None:
                removed += 1
        return removed

    def sadd(self, key, *members):
        members_set = self.sets.setdefault(key, set())
        before = len(members_set)
        members_set.update(members)
        return len(members_set) - before

    def srem(self, key, *members):
        members_set = self.sets.get(key, set())
        before = len(members_set)
        members_set.difference_update(members)
        return before - len(members_set)

    def smembers(self, key):
        return set(self.sets.get(key, set()))

    def expire(self, key, ttl):
        return key in self.values or key in self.sets


class StorageRecorder:
    """Stockage objet simulé : enregistre les envois, statut configurable."""

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self.status_code = 200

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status_code, json={"Key": request.url.path})


class FakeAssistantClient:
    """Remplace AssistantClient : réponse fixe ou erreur, appels enregistrés."""

    def __init__(self):
        self.answer = "The patient has a penicillin allergy."
        self.error: Optional[Exception] = None
        self.calls = []

    async def complete(self, messages):
        self.calls.append(messages)
        if self.error is not None:
            raise self.error
        return self.answer

    def fail(self, message: str = "L'assistant IA est indisponible"):
        self.error = AssistantUnavailableError(message)


# =============================================================================
# DATABASE FIXTURES
# =============================================================================

@pytest.fixture(scope="function")
def engine():
    """
    Engine SQLite en mémoire, une base neuve par test.

    StaticPool : une seule connexion partagée (la base vit avec elle).
    """
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False,
    )
    Base.metadata.create_all(bind=engine)

    yield engine

    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def db_session(engine) -> Generator[Session, None, None]:
    """Session de test ; le code testé peut commit librement (base jetable)."""
    session = Session(bind=engine, expire_on_commit=False)
    try:
        yield session
    finally:
        session.close()


# =============================================================================
# SESSIONS / REDIS
# =============================================================================

@pytest.fixture
def redis_double() -> InMemoryRedis:
    return InMemoryRedis()


@pytest.fixture
def session_store(redis_double: InMemoryRedis) -> SessionStore:
    return SessionStore(redis_double, ttl_seconds=3600)


def auth_headers(store: SessionStore, clinic: Clinic) -> dict:
    """Ouvre une vraie session et signe le JWT correspondant."""
    context = store.open(clinic)
    token = create_access_token({
        "sub": str(clinic.id),
        "sid": context.session_id,
        "role": clinic.role.value,
    })
    return {"Authorization": f"Bearer {token}"}


# =============================================================================
# MODEL FIXTURES - Comptes
# =============================================================================

def make_clinic(db_session: Session, email: str, **overrides) -> Clinic:
    now = utcnow()
    values = dict(
        name="Clinique Test",
        email=email,
        password_hash=TEST_PASSWORD_HASH,
        role=ClinicRole.DOCTOR,
        subscription_active=True,
        subscription_end_date=now + timedelta(days=30),
        ai_usage_count=0,
        ai_limit=50,
        last_ai_usage_reset=now,
    )
    values.update(overrides)
    clinic = Clinic(**values)
    db_session.add(clinic)
    db_session.commit()
    db_session.refresh(clinic)
    return clinic


@pytest.fixture
def clinic_factory(db_session: Session):
    """Crée des cliniques supplémentaires : clinic_factory(email, **colonnes)."""

    def factory(email: str, **overrides) -> Clinic:
        return make_clinic(db_session, email, **overrides)

    return factory


@pytest.fixture
def operator(db_session: Session) -> Clinic:
    """Opérateur de la plateforme (jamais soumis à l'abonnement)."""
    return make_clinic(
        db_session,
        "operator@example.com",
        name="Administration",
        role=ClinicRole.OPERATOR,
        subscription_active=False,
        subscription_end_date=None,
    )


@pytest.fixture
def clinic(db_session: Session) -> Clinic:
    """Clinique avec un abonnement actif (30 jours restants)."""
    return make_clinic(db_session, "doctor@example.com", name="Clinique du Centre")


@pytest.fixture
def other_clinic(db_session: Session) -> Clinic:
    """Seconde clinique active (isolation des données)."""
    return make_clinic(db_session, "other@example.com", name="Clinique du Nord")


@pytest.fixture
def expired_clinic(db_session: Session) -> Clinic:
    """Abonnement encore marqué actif mais échu depuis hier."""
    return make_clinic(
        db_session,
        "expired@example.com",
        name="Clinique Échue",
        subscription_end_date=utcnow() - timedelta(days=1),
    )


@pytest.fixture
def stopped_clinic(db_session: Session) -> Clinic:
    """Abonnement arrêté par l'opérateur (échéance future)."""
    return make_clinic(
        db_session,
        "stopped@example.com",
        name="Clinique Arrêtée",
        subscription_active=False,
    )


# =============================================================================
# MODEL FIXTURES - Dossier patient
# =============================================================================

@pytest.fixture
def patient(db_session: Session, clinic: Clinic) -> Patient:
    patient = Patient(
        clinic_id=clinic.id,
        name="Ahmed Benali",
        age=54,
        phone="0612345678",
        gender=Gender.MALE,
        blood_type="O+",
        weight=82.5,
        allergies="Penicillin",
        chronic_diseases=["Diabetes", "Hypertension"],
    )
    db_session.add(patient)
    db_session.commit()
    db_session.refresh(patient)
    return patient


@pytest.fixture
def other_patient(db_session: Session, other_clinic: Clinic) -> Patient:
    """Patient d'une autre clinique (doit rester invisible)."""
    patient = Patient(clinic_id=other_clinic.id, name="Sara Haddad", chronic_diseases=[])
    db_session.add(patient)
    db_session.commit()
    db_session.refresh(patient)
    return patient


@pytest.fixture
def visit(db_session: Session, patient: Patient) -> Visit:
    visit = Visit(
        clinic_id=patient.clinic_id,
        patient_id=patient.id,
        visit_date=utcnow() - timedelta(days=7),
        diagnosis="Type 2 diabetes follow-up",
        treatment="Metformin 500mg",
        notes="HbA1c stable",
        image_url=f"{STORAGE_BASE_URL}/storage/v1/object/public/visit-attachments/visits/old.jpg",
    )
    db_session.add(visit)
    db_session.commit()
    db_session.refresh(visit)
    return visit


# =============================================================================
# COLLABORATEURS EXTERNES
# =============================================================================

@pytest.fixture
def storage() -> StorageRecorder:
    return StorageRecorder()


@pytest.fixture
def uploader(storage: StorageRecorder) -> ImageUploader:
    return ImageUploader(
        base_url=STORAGE_BASE_URL,
        service_key="service-key",
        bucket="visit-attachments",
        transport=httpx.MockTransport(storage.handler),
    )


@pytest.fixture
def assistant() -> FakeAssistantClient:
    return FakeAssistantClient()


# =============================================================================
# API CLIENT FIXTURES
# =============================================================================

@pytest.fixture
def client(
    db_session: Session,
    session_store: SessionStore,
    uploader: ImageUploader,
    assistant: FakeAssistantClient,
) -> Generator[TestClient, None, None]:
    """
    Client de test (non authentifié).

    Cette fixture :
    1. Remplace get_db par la session SQLite de test
    2. Remplace le store de sessions par le double en mémoire
    3. Remplace le stockage objet et le modèle IA par leurs doubles
    """

    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_store] = lambda: session_store
    app.dependency_overrides[get_image_uploader] = lambda: uploader
    app.dependency_overrides[require_assistant_client] = lambda: assistant

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def clinic_headers(session_store: SessionStore, clinic: Clinic) -> dict:
    return auth_headers(session_store, clinic)


@pytest.fixture
def other_clinic_headers(session_store: SessionStore, other_clinic: Clinic) -> dict:
    return auth_headers(session_store, other_clinic)


@pytest.fixture
def operator_headers(session_store: SessionStore, operator: Clinic) -> dict:
    return auth_headers(session_store, operator)


@pytest.fixture
def headers_for(session_store: SessionStore):
    """En-têtes d'authentification pour un compte quelconque."""

    def factory(account: Clinic) -> dict:
        return auth_headers(session_store, account)

    return factory


@pytest.fixture
def password() -> str:
    """Mot de passe en clair de tous les comptes de test."""
    return TEST_PASSWORD
