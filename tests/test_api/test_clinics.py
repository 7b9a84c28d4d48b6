"""
Tests API pour la gestion des cliniques par l'opérateur.

- /api/v1/clinics : CRUD
- /api/v1/clinics/{id}/subscription/{extend,stop}
- /api/v1/clinics/{id}/ai-usage[/reset]
"""

from datetime import datetime, timedelta

from fastapi import status
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from clinicdesk.core.utils.datetime_utils import ensure_utc, start_of_month, utcnow
from clinicdesk.models import Clinic, Patient

BASE_URL = "/api/v1/clinics"


class TestClinicList:

    def test_list_excludes_operator(
        self, client: TestClient, operator_headers: dict, clinic: Clinic, other_clinic: Clinic
    ):
        response = client.get(BASE_URL, headers=operator_headers)

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["total"] == 2
        emails = [item["email"] for item in data["items"]]
        assert "operator@example.com" not in emails
        # Les plus récentes en premier
        assert emails == ["other@example.com", "doctor@example.com"]

    def test_list_requires_auth(self, client: TestClient):
        response = client.get(BASE_URL)
        assert response.status_code == status.HTTP_401_UNAUTHORIZED


class TestClinicCreate:

    def test_create_defaults(self, client: TestClient, operator_headers: dict, password: str):
        response = client.post(BASE_URL, headers=operator_headers, json={
            "name": "Clinique Sud",
            "email": "Sud@Example.com",
            "password": password,
        })

        assert response.status_code == status.HTTP_201_CREATED
        data = response.json()
        assert data["email"] == "sud@example.com"
        assert data["role"] == "doctor"
        assert data["subscription_active"] is True
        assert data["ai_usage_count"] == 0
        assert data["ai_usage_limit"] == 50

        end = ensure_utc(datetime.fromisoformat(data["subscription_end_date"].replace("Z", "+00:00")))
        assert utcnow() + timedelta(days=27) < end < utcnow() + timedelta(days=32)

    def test_created_clinic_can_login(self, client: TestClient, operator_headers: dict, password: str):
        client.post(BASE_URL, headers=operator_headers, json={
            "name": "Clinique Est",
            "email": "est@example.com",
            "password": password,
            "ai_usage_limit": 10,
        })

        response = client.post("/api/v1/auth/login", json={"email": "est@example.com", "password": password})
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["clinic"]["ai_usage_limit"] == 10

    def test_duplicate_email(self, client: TestClient, operator_headers: dict, clinic: Clinic):
        response = client.post(BASE_URL, headers=operator_headers, json={
            "name": "Doublon",
            "email": "DOCTOR@example.com",
            "password": "another-password",
        })
        assert response.status_code == status.HTTP_409_CONFLICT

    def test_short_password(self, client: TestClient, operator_headers: dict):
        response = client.post(BASE_URL, headers=operator_headers, json={
            "name": "X", "email": "x@example.com", "password": "123",
        })
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    def test_password_limit_counts_bytes(self, client: TestClient, operator_headers: dict):
        # 40 caractères accentués = 80 octets UTF-8
        response = client.post(BASE_URL, headers=operator_headers, json={
            "name": "Clinique Accents", "email": "accents@example.com", "password": "é" * 40,
        })
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    def test_password_at_byte_limit(self, client: TestClient, operator_headers: dict):
        response = client.post(BASE_URL, headers=operator_headers, json={
            "name": "Clinique Limite", "email": "limite@example.com", "password": "é" * 36,
        })
        assert response.status_code == status.HTTP_201_CREATED

        response = client.post("/api/v1/auth/login", json={
            "email": "limite@example.com", "password": "é" * 36,
        })
        assert response.status_code == status.HTTP_200_OK


class TestClinicReadUpdateDelete:

    def test_get(self, client: TestClient, operator_headers: dict, clinic: Clinic):
        response = client.get(f"{BASE_URL}/{clinic.id}", headers=operator_headers)
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["name"] == "Clinique du Centre"

    def test_operator_account_is_not_a_clinic(self, client: TestClient, operator_headers: dict, operator: Clinic):
        response = client.get(f"{BASE_URL}/{operator.id}", headers=operator_headers)
        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_update(self, client: TestClient, operator_headers: dict, clinic: Clinic):
        response = client.patch(f"{BASE_URL}/{clinic.id}", headers=operator_headers, json={
            "name": "Clinique Renommée",
            "ai_usage_limit": 120,
        })

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["name"] == "Clinique Renommée"
        assert data["ai_usage_limit"] == 120
        assert data["email"] == "doctor@example.com"

    def test_update_password_only_when_provided(
        self, client: TestClient, operator_headers: dict, clinic: Clinic, password: str
    ):
        client.patch(f"{BASE_URL}/{clinic.id}", headers=operator_headers, json={"name": "Sans mot de passe"})

        response = client.post("/api/v1/auth/login", json={"email": "doctor@example.com", "password": password})
        assert response.status_code == status.HTTP_200_OK

    def test_update_password_too_long_in_bytes(
        self, client: TestClient, operator_headers: dict, clinic: Clinic, password: str
    ):
        response = client.patch(f"{BASE_URL}/{clinic.id}", headers=operator_headers, json={"password": "é" * 40})
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

        response = client.post("/api/v1/auth/login", json={"email": clinic.email, "password": password})
        assert response.status_code == status.HTTP_200_OK

    def test_update_email_conflict(
        self, client: TestClient, operator_headers: dict, clinic: Clinic, other_clinic: Clinic
    ):
        response = client.patch(
            f"{BASE_URL}/{clinic.id}", headers=operator_headers, json={"email": "other@example.com"}
        )
        assert response.status_code == status.HTTP_409_CONFLICT

    def test_delete_removes_data_and_sessions(
        self,
        client: TestClient,
        db_session: Session,
        operator_headers: dict,
        clinic: Clinic,
        clinic_headers: dict,
        patient: Patient,
    ):
        response = client.delete(f"{BASE_URL}/{clinic.id}", headers=operator_headers)
        assert response.status_code == status.HTTP_204_NO_CONTENT

        assert db_session.query(Patient).count() == 0
        assert client.get("/api/v1/auth/me", headers=clinic_headers).status_code == status.HTTP_401_UNAUTHORIZED

    def test_delete_unknown(self, client: TestClient, operator_headers: dict):
        response = client.delete(f"{BASE_URL}/9999", headers=operator_headers)
        assert response.status_code == status.HTTP_404_NOT_FOUND


class TestSubscriptionActions:

    def test_extend(self, client: TestClient, operator_headers: dict, expired_clinic: Clinic, password: str):
        response = client.post(
            f"{BASE_URL}/{expired_clinic.id}/subscription/extend",
            headers=operator_headers,
            json={"days": 30},
        )
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["subscription_active"] is True

        response = client.post("/api/v1/auth/login", json={"email": "expired@example.com", "password": password})
        assert response.status_code == status.HTTP_200_OK

    def test_extend_rejects_non_positive_days(self, client: TestClient, operator_headers: dict, clinic: Clinic):
        response = client.post(
            f"{BASE_URL}/{clinic.id}/subscription/extend", headers=operator_headers, json={"days": 0}
        )
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    def test_stop_revokes_sessions(
        self, client: TestClient, operator_headers: dict, clinic: Clinic, clinic_headers: dict, password: str
    ):
        assert client.get("/api/v1/patients", headers=clinic_headers).status_code == status.HTTP_200_OK

        response = client.post(f"{BASE_URL}/{clinic.id}/subscription/stop", headers=operator_headers)
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["subscription_active"] is False

        assert client.get("/api/v1/patients", headers=clinic_headers).status_code == status.HTTP_401_UNAUTHORIZED
        response = client.post("/api/v1/auth/login", json={"email": "doctor@example.com", "password": password})
        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_stop_unknown(self, client: TestClient, operator_headers: dict):
        response = client.post(f"{BASE_URL}/9999/subscription/stop", headers=operator_headers)
        assert response.status_code == status.HTTP_404_NOT_FOUND


class TestAiUsage:

    def test_usage(self, client: TestClient, operator_headers: dict, clinic_factory):
        clinic = clinic_factory("usage@example.com", ai_limit=20, ai_usage_count=5)

        response = client.get(f"{BASE_URL}/{clinic.id}/ai-usage", headers=operator_headers)

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["count"] == 5
        assert data["limit"] == 20
        assert data["remaining"] == 15

    def test_usage_applies_monthly_reset(
        self, client: TestClient, operator_headers: dict, clinic_factory
    ):
        last_month = start_of_month(utcnow()) - timedelta(days=1)
        clinic = clinic_factory(
            "last-month@example.com", ai_limit=20, ai_usage_count=20, last_ai_usage_reset=last_month,
        )

        response = client.get(f"{BASE_URL}/{clinic.id}/ai-usage", headers=operator_headers)

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["count"] == 0
        assert data["remaining"] == 20
        last_reset = ensure_utc(datetime.fromisoformat(data["last_reset"].replace("Z", "+00:00")))
        assert last_reset >= start_of_month(utcnow())

    def test_reset(self, client: TestClient, operator_headers: dict, clinic_factory):
        clinic = clinic_factory("busy@example.com", ai_limit=20, ai_usage_count=20)

        response = client.post(f"{BASE_URL}/{clinic.id}/ai-usage/reset", headers=operator_headers)

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["count"] == 0
        assert response.json()["remaining"] == 20
