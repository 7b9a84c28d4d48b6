"""
Routes FastAPI pour le dossier patient.

Endpoints pour :
- /patients : Gestion des patients
- /patients/{id}/visits : Consultations (avec photo d'ordonnance)
- /patients/{id}/vitals : Relevés de constantes

MULTI-TENANT: toutes les routes sont restreintes à la clinique de la session.
"""
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from clinicdesk.api.v1.dependencies import (
    UPLOAD_FAILED,
    PaginationParams,
    error_detail,
)
from clinicdesk.api.v1.patients.schemas import (
    # Patient
    PatientCreate, PatientUpdate, PatientResponse, PatientList,
    # Visit
    VisitCreate, VisitUpdate, VisitResponse, VisitList,
    # Vitals
    VitalCreate, VitalResponse, VitalList,
)
from clinicdesk.api.v1.patients.services import (
    PatientService, VisitService, VitalsService,
    # Exceptions
    PatientNotFoundError, VisitNotFoundError, EmptyVitalsError,
)
from clinicdesk.core.auth.clinic_auth import require_clinic_user
from clinicdesk.core.session_store import SessionContext
from clinicdesk.database.session import get_db
from clinicdesk.services.storage import ImageUploader, ImageUploadError, get_image_uploader

router = APIRouter(prefix="/patients", tags=["Patients"])


def _not_found(e: Exception) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


def _upload_failed(e: ImageUploadError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_502_BAD_GATEWAY,
        detail=error_detail(UPLOAD_FAILED, f"Échec de l'envoi de l'image : {e}"),
    )


# =============================================================================
# PATIENT ENDPOINTS
# =============================================================================

@router.get("", response_model=PatientList)
def list_patients(
    pagination: PaginationParams = Depends(),
    search: Optional[str] = Query(None, description="Recherche par nom ou téléphone"),
    db: Session = Depends(get_db),
    session: SessionContext = Depends(require_clinic_user),
):
    """Liste les patients de la clinique, les plus récents en premier."""
    service = PatientService(db, session.clinic_id)
    items, total = service.get_all(page=pagination.page, size=pagination.size, search=search)
    return PatientList(
        items=items,
        total=total,
        page=pagination.page,
        size=pagination.size,
        pages=pagination.pages(total),
    )


@router.get("/{patient_id}", response_model=PatientResponse)
def get_patient(
    patient_id: int,
    db: Session = Depends(get_db),
    session: SessionContext = Depends(require_clinic_user),
):
    try:
        return PatientService(db, session.clinic_id).get_by_id(patient_id)
    except PatientNotFoundError as e:
        raise _not_found(e)


@router.post("", response_model=PatientResponse, status_code=status.HTTP_201_CREATED)
def create_patient(
    data: PatientCreate,
    db: Session = Depends(get_db),
    session: SessionContext = Depends(require_clinic_user),
):
    return PatientService(db, session.clinic_id).create(data)


@router.patch("/{patient_id}", response_model=PatientResponse)
def update_patient(
    patient_id: int,
    data: PatientUpdate,
    db: Session = Depends(get_db),
    session: SessionContext = Depends(require_clinic_user),
):
    try:
        return PatientService(db, session.clinic_id).update(patient_id, data)
    except PatientNotFoundError as e:
        raise _not_found(e)


@router.delete("/{patient_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_patient(
    patient_id: int,
    db: Session = Depends(get_db),
    session: SessionContext = Depends(require_clinic_user),
):
    """Supprime le patient, ses consultations et ses constantes."""
    try:
        PatientService(db, session.clinic_id).delete(patient_id)
    except PatientNotFoundError as e:
        raise _not_found(e)


# =============================================================================
# VISIT ENDPOINTS
# =============================================================================

@router.get("/{patient_id}/visits", response_model=VisitList)
def list_visits(
    patient_id: int,
    db: Session = Depends(get_db),
    session: SessionContext = Depends(require_clinic_user),
):
    """Consultations du patient, les plus récentes en premier."""
    try:
        items = VisitService(db, session.clinic_id).get_all_for_patient(patient_id)
    except PatientNotFoundError as e:
        raise _not_found(e)
    return VisitList(items=items, total=len(items))


@router.post(
    "/{patient_id}/visits",
    response_model=VisitResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_visit(
    patient_id: int,
    data: VisitCreate,
    db: Session = Depends(get_db),
    session: SessionContext = Depends(require_clinic_user),
    uploader: ImageUploader = Depends(get_image_uploader),
):
    """
    Enregistre une consultation.

    Une photo d'ordonnance encodée (data URL) est envoyée au stockage ;
    en cas d'échec la consultation n'est pas enregistrée (502).
    """
    service = VisitService(db, session.clinic_id, uploader=uploader)
    try:
        return await service.create(patient_id, data)
    except PatientNotFoundError as e:
        raise _not_found(e)
    except ImageUploadError as e:
        raise _upload_failed(e)


@router.patch("/{patient_id}/visits/{visit_id}", response_model=VisitResponse)
async def update_visit(
    patient_id: int,
    visit_id: int,
    data: VisitUpdate,
    db: Session = Depends(get_db),
    session: SessionContext = Depends(require_clinic_user),
    uploader: ImageUploader = Depends(get_image_uploader),
):
    service = VisitService(db, session.clinic_id, uploader=uploader)
    try:
        return await service.update(visit_id, patient_id, data)
    except (PatientNotFoundError, VisitNotFoundError) as e:
        raise _not_found(e)
    except ImageUploadError as e:
        raise _upload_failed(e)


@router.delete("/{patient_id}/visits/{visit_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_visit(
    patient_id: int,
    visit_id: int,
    db: Session = Depends(get_db),
    session: SessionContext = Depends(require_clinic_user),
):
    try:
        VisitService(db, session.clinic_id).delete(visit_id, patient_id)
    except (PatientNotFoundError, VisitNotFoundError) as e:
        raise _not_found(e)


# =============================================================================
# VITALS ENDPOINTS
# =============================================================================

@router.get("/{patient_id}/vitals", response_model=VitalList)
def list_vitals(
    patient_id: int,
    db: Session = Depends(get_db),
    session: SessionContext = Depends(require_clinic_user),
):
    """Relevés du plus récent au plus ancien."""
    try:
        items = VitalsService(db, session.clinic_id).get_all_for_patient(patient_id)
    except PatientNotFoundError as e:
        raise _not_found(e)
    return VitalList(items=items, total=len(items))


@router.post(
    "/{patient_id}/vitals",
    response_model=VitalResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_vitals(
    patient_id: int,
    data: VitalCreate,
    db: Session = Depends(get_db),
    session: SessionContext = Depends(require_clinic_user),
):
    try:
        return VitalsService(db, session.clinic_id).create(patient_id, data)
    except PatientNotFoundError as e:
        raise _not_found(e)
    except EmptyVitalsError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))
