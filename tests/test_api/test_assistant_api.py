"""
Tests API pour l'assistant médical.

Le modèle est remplacé par FakeAssistantClient (fixture `assistant`).
"""

from fastapi import status
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from clinicdesk.models import Clinic, Patient


def ask_url(patient_id: int) -> str:
    return f"/api/v1/patients/{patient_id}/assistant"


QUOTA_URL = "/api/v1/assistant/quota"


class TestAskAssistant:

    def test_answer_consumes_quota(
        self, client: TestClient, clinic_headers: dict, patient: Patient, visit, assistant
    ):
        response = client.post(
            ask_url(patient.id), headers=clinic_headers, json={"question": "Any allergies?"}
        )

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["answer"] == assistant.answer
        assert data["usage"] == {
            "count": 1,
            "limit": 50,
            "remaining": 49,
            "last_reset": data["usage"]["last_reset"],
        }

        assert len(assistant.calls) == 1
        prompt = "\n".join(message["content"] for message in assistant.calls[0])
        assert "Ahmed Benali" in prompt
        assert "Penicillin" in prompt
        assert "Any allergies?" in prompt

    def test_quota_exhausted(
        self, client: TestClient, clinic_headers: dict, db_session: Session,
        clinic: Clinic, patient: Patient, assistant
    ):
        clinic.ai_usage_count = clinic.ai_limit
        db_session.commit()

        response = client.post(ask_url(patient.id), headers=clinic_headers, json={"question": "Hello?"})

        assert response.status_code == status.HTTP_429_TOO_MANY_REQUESTS
        assert response.json()["detail"]["code"] == "QUOTA_EXCEEDED"
        assert assistant.calls == []

    def test_model_failure_keeps_count(
        self, client: TestClient, clinic_headers: dict, db_session: Session,
        clinic: Clinic, patient: Patient, assistant
    ):
        assistant.fail()

        response = client.post(ask_url(patient.id), headers=clinic_headers, json={"question": "Hello?"})

        assert response.status_code == status.HTTP_502_BAD_GATEWAY
        assert response.json()["detail"]["code"] == "AI_UNAVAILABLE"
        db_session.expire_all()
        assert db_session.get(Clinic, clinic.id).ai_usage_count == 0

    def test_other_clinic_patient(
        self, client: TestClient, clinic_headers: dict, other_patient: Patient, assistant
    ):
        response = client.post(ask_url(other_patient.id), headers=clinic_headers, json={"question": "?"})

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert assistant.calls == []

    def test_empty_question(self, client: TestClient, clinic_headers: dict, patient: Patient):
        response = client.post(ask_url(patient.id), headers=clinic_headers, json={"question": ""})
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    def test_operator_forbidden(self, client: TestClient, operator_headers: dict, patient: Patient):
        response = client.post(ask_url(patient.id), headers=operator_headers, json={"question": "?"})
        assert response.status_code == status.HTTP_403_FORBIDDEN


class TestQuotaEndpoint:

    def test_current_usage(
        self, client: TestClient, clinic_headers: dict, db_session: Session, clinic: Clinic
    ):
        clinic.ai_usage_count = 7
        db_session.commit()

        data = client.get(QUOTA_URL, headers=clinic_headers).json()

        assert data["count"] == 7
        assert data["limit"] == 50
        assert data["remaining"] == 43

    def test_counts_after_questions(
        self, client: TestClient, clinic_headers: dict, patient: Patient
    ):
        for _ in range(3):
            client.post(ask_url(patient.id), headers=clinic_headers, json={"question": "Summary?"})

        assert client.get(QUOTA_URL, headers=clinic_headers).json()["count"] == 3
