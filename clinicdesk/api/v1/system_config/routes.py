"""
Routes de la configuration globale.

GET est public (lu sur l'écran de connexion), PUT est réservé à l'opérateur.
"""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from clinicdesk.api.v1.dependencies import UPLOAD_FAILED, error_detail
from clinicdesk.api.v1.system_config.schemas import SystemConfigResponse, SystemConfigUpdate
from clinicdesk.api.v1.system_config.services import SystemConfigService
from clinicdesk.core.auth.clinic_auth import require_operator
from clinicdesk.core.session_store import SessionContext
from clinicdesk.database.session import get_db
from clinicdesk.services.storage import ImageUploader, ImageUploadError, get_image_uploader

router = APIRouter(prefix="/system-config", tags=["System config"])


@router.get("", response_model=SystemConfigResponse)
def get_system_config(db: Session = Depends(get_db)):
    return SystemConfigService(db).get()


@router.put("", response_model=SystemConfigResponse)
async def update_system_config(
    data: SystemConfigUpdate,
    db: Session = Depends(get_db),
    uploader: ImageUploader = Depends(get_image_uploader),
    session: SessionContext = Depends(require_operator),
):
    try:
        return await SystemConfigService(db, uploader).update(data)
    except ImageUploadError as e:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=error_detail(UPLOAD_FAILED, f"Échec de l'envoi de l'image : {e}"),
        )
