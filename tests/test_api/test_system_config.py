"""Tests API pour la configuration globale (/api/v1/system-config)."""

import base64
import io

from fastapi import status
from fastapi.testclient import TestClient
from PIL import Image

from clinicdesk.models.system_config import DEFAULT_PAYMENT_INSTRUCTIONS

BASE_URL = "/api/v1/system-config"


def png_data_url() -> str:
    buffer = io.BytesIO()
    Image.new("RGBA", (32, 32), color=(255, 0, 0, 128)).save(buffer, format="PNG")
    return "data:image/png;base64," + base64.b64encode(buffer.getvalue()).decode()


class TestReadConfig:

    def test_defaults_without_row(self, client: TestClient):
        response = client.get(BASE_URL)

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["payment_instructions"] == DEFAULT_PAYMENT_INSTRUCTIONS
        assert data["payment_barcode_url"] == ""
        assert data["social_links"] == {"facebook": "", "instagram": "", "youtube": ""}

    def test_public(self, client: TestClient, clinic_headers: dict):
        assert client.get(BASE_URL).json() == client.get(BASE_URL, headers=clinic_headers).json()


class TestUpdateConfig:

    def test_operator_updates_text_fields(self, client: TestClient, operator_headers: dict):
        response = client.put(BASE_URL, headers=operator_headers, json={
            "support_whatsapp": "+212600000000",
            "social_links": {"instagram": "https://instagram.com/clinicdesk"},
        })

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["support_whatsapp"] == "+212600000000"
        assert data["social_links"] == {
            "facebook": "",
            "instagram": "https://instagram.com/clinicdesk",
            "youtube": "",
        }
        assert data["payment_instructions"] == DEFAULT_PAYMENT_INSTRUCTIONS

        assert client.get(BASE_URL).json()["support_whatsapp"] == "+212600000000"

    def test_inline_logo_uploaded_to_config_folder(
        self, client: TestClient, operator_headers: dict, storage
    ):
        response = client.put(BASE_URL, headers=operator_headers, json={"app_logo_url": png_data_url()})

        assert response.status_code == status.HTTP_200_OK
        url = response.json()["app_logo_url"]
        assert url.startswith(
            "https://storage.example.com/storage/v1/object/public/visit-attachments/config/"
        )
        assert url.endswith(".jpg")
        assert len(storage.requests) == 1
        assert "/config/" in storage.requests[0].url.path

    def test_clearing_image(self, client: TestClient, operator_headers: dict, storage):
        client.put(BASE_URL, headers=operator_headers, json={"custom_logo_url": "https://cdn.example.com/logo.png"})

        response = client.put(BASE_URL, headers=operator_headers, json={"custom_logo_url": None})

        assert response.json()["custom_logo_url"] == ""
        assert storage.requests == []

    def test_upload_failure_keeps_config(self, client: TestClient, operator_headers: dict, storage):
        client.put(BASE_URL, headers=operator_headers, json={"payment_instructions": "Virement"})
        storage.status_code = 500

        response = client.put(BASE_URL, headers=operator_headers, json={
            "payment_instructions": "Changed",
            "payment_barcode_url": png_data_url(),
        })

        assert response.status_code == status.HTTP_502_BAD_GATEWAY
        assert response.json()["detail"]["code"] == "UPLOAD_FAILED"
        assert client.get(BASE_URL).json()["payment_instructions"] == "Virement"

    def test_clinic_forbidden(self, client: TestClient, clinic_headers: dict):
        response = client.put(BASE_URL, headers=clinic_headers, json={"support_whatsapp": "x"})
        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_requires_auth(self, client: TestClient):
        assert client.put(BASE_URL, json={}).status_code == status.HTTP_401_UNAUTHORIZED
