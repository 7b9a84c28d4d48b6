"""
Envoi des images vers le stockage objet.

Politique "upload-if-new" : un champ image contient soit une image encodée
en ligne (data URL, saisie côté client), soit une URL déjà publiée. Seules
les data URLs sont compressées puis envoyées ; une URL existante est
conservée telle quelle, sans appel réseau.

upload_if_new() ne lève jamais d'exception : le résultat (UploadResult)
porte l'URL publique ou la raison de l'échec, et l'appelant décide.

API de stockage (compatible Supabase Storage) :
    POST {STORAGE_URL}/storage/v1/object/{bucket}/{path}
    GET  {STORAGE_URL}/storage/v1/object/public/{bucket}/{path}
"""

import base64
import binascii
import io
import logging
import secrets
import time
from dataclasses import dataclass
from typing import Optional

import httpx
from PIL import Image

from clinicdesk.core.config import settings

logger = logging.getLogger(__name__)


# Dossiers du bucket
VISITS_FOLDER = "visits"
CONFIG_FOLDER = "config"


class ImageUploadError(Exception):
    """Échec d'envoi d'une image ; l'écriture dépendante est abandonnée."""
    pass


@dataclass(frozen=True)
class UploadResult:
    """Succès (avec URL, éventuellement None si pas d'image) ou échec motivé."""
    ok: bool
    url: Optional[str] = None
    reason: Optional[str] = None

    @classmethod
    def success(cls, url: Optional[str]) -> "UploadResult":
        return cls(ok=True, url=url)

    @classmethod
    def failure(cls, reason: str) -> "UploadResult":
        return cls(ok=False, reason=reason)

    def unwrap(self) -> Optional[str]:
        """Retourne l'URL ou lève ImageUploadError."""
        if not self.ok:
            raise ImageUploadError(self.reason)
        return self.url


def is_inline_image(value: Optional[str]) -> bool:
    """True si la valeur est une image encodée en ligne (data URL)."""
    return bool(value) and value.startswith("data:")


def decode_data_url(value: str) -> bytes:
    """
    Extrait les octets d'une data URL base64.

    Raises:
        ValueError: data URL mal formée ou non base64
    """
    header, sep, payload = value.partition(",")
    if not sep or ";base64" not in header:
        raise ValueError("data URL non base64")
    try:
        return base64.b64decode(payload, validate=True)
    except binascii.Error as e:
        raise ValueError(f"base64 invalide : {e}")


def compress_to_jpeg(raw: bytes, max_dimension: int, quality: int) -> bytes:
    """Redimensionne (côté max) et ré-encode en JPEG."""
    with Image.open(io.BytesIO(raw)) as image:
        image = image.convert("RGB")
        image.thumbnail((max_dimension, max_dimension))
        output = io.BytesIO()
        image.save(output, format="JPEG", quality=quality, optimize=True)
    return output.getvalue()


def build_object_path(folder: str) -> str:
    """Nom unique : {folder}/{timestamp_ms}_{aléa}.jpg"""
    return f"{folder}/{int(time.time() * 1000)}_{secrets.token_hex(4)}.jpg"


class ImageUploader:
    """Compression et envoi des images vers le bucket configuré."""

    def __init__(
            self,
            base_url: Optional[str] = None,
            service_key: Optional[str] = None,
            bucket: Optional[str] = None,
            transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = (base_url or settings.STORAGE_URL).rstrip("/")
        self.service_key = service_key if service_key is not None else settings.STORAGE_SERVICE_KEY
        self.bucket = bucket or settings.STORAGE_BUCKET
        self._transport = transport

    def public_url(self, path: str) -> str:
        return f"{self.base_url}/storage/v1/object/public/{self.bucket}/{path}"

    def _headers(self) -> dict:
        headers = {"Content-Type": "image/jpeg", "x-upsert": "false"}
        if self.service_key:
            headers["Authorization"] = f"Bearer {self.service_key}"
            headers["apikey"] = self.service_key
        return headers

    async def upload_if_new(self, value: Optional[str], folder: str) -> UploadResult:
        """
        Applique la politique upload-if-new à une valeur de champ image.

        - vide        -> succès, url=None (pas d'image)
        - URL connue  -> succès, valeur inchangée
        - data URL    -> compression, envoi, succès avec l'URL publique
        """
        if not value:
            return UploadResult.success(None)
        if not is_inline_image(value):
            return UploadResult.success(value)

        try:
            content = compress_to_jpeg(
                decode_data_url(value),
                settings.IMAGE_MAX_DIMENSION,
                settings.IMAGE_JPEG_QUALITY,
            )
        except (ValueError, OSError) as e:
            logger.warning(f"Image illisible ({folder}) : {e}")
            return UploadResult.failure(f"Image illisible : {e}")

        path = build_object_path(folder)
        try:
            async with httpx.AsyncClient(
                timeout=settings.STORAGE_TIMEOUT_SECONDS,
                transport=self._transport,
            ) as client:
                response = await client.post(
                    f"{self.base_url}/storage/v1/object/{self.bucket}/{path}",
                    content=content,
                    headers=self._headers(),
                )
        except httpx.HTTPError as e:
            logger.error(f"❌ Stockage injoignable : {e}")
            return UploadResult.failure(f"Stockage injoignable : {e}")

        if response.status_code >= 400:
            logger.error(f"❌ Upload refusé ({response.status_code}) : {response.text}")
            return UploadResult.failure(f"Upload refusé ({response.status_code})")

        logger.info(f"Image envoyée : {path} ({len(content)} octets)")
        return UploadResult.success(self.public_url(path))


def get_image_uploader() -> ImageUploader:
    """Dépendance FastAPI."""
    return ImageUploader()
