"""Lecture et mise à jour de la configuration globale (ligne id=1)."""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from clinicdesk.api.v1.system_config.schemas import SystemConfigUpdate
from clinicdesk.models.system_config import SYSTEM_CONFIG_ID, SystemConfig
from clinicdesk.services.storage import CONFIG_FOLDER, ImageUploader

logger = logging.getLogger(__name__)

IMAGE_FIELDS = ("payment_barcode_url", "custom_logo_url", "app_logo_url")


class SystemConfigService:

    def __init__(self, db: Session, uploader: Optional[ImageUploader] = None):
        self.db = db
        self.uploader = uploader

    def get(self) -> SystemConfig:
        """Ligne de configuration, ou valeurs par défaut si elle n'existe pas encore."""
        return self.db.get(SystemConfig, SYSTEM_CONFIG_ID) or SystemConfig.defaults()

    async def update(self, data: SystemConfigUpdate) -> SystemConfig:
        """
        Upsert de la configuration.

        Les images sont envoyées avant toute écriture : un échec d'envoi
        (ImageUploadError) laisse la configuration intacte.
        """
        values = data.model_dump(exclude_unset=True)

        for field in IMAGE_FIELDS:
            if field in values and self.uploader is not None:
                result = await self.uploader.upload_if_new(values[field], CONFIG_FOLDER)
                values[field] = result.unwrap() or ""

        config = self.db.get(SystemConfig, SYSTEM_CONFIG_ID)
        if config is None:
            config = SystemConfig.defaults()
            self.db.add(config)

        for field, value in values.items():
            if field == "social_links":
                value = {**(config.social_links or {}), **(value or {})}
            setattr(config, field, value if value is not None else "")

        self.db.commit()
        self.db.refresh(config)
        logger.info(f"Configuration globale mise à jour ({', '.join(values) or 'aucun champ'})")
        return config
