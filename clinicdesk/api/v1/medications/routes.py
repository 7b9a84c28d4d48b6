"""Routes de la liste des médicaments."""

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from clinicdesk.api.v1.medications.schemas import (
    MedicationCreate,
    MedicationList,
    MedicationResponse,
)
from clinicdesk.api.v1.medications.services import MedicationService
from clinicdesk.core.auth.clinic_auth import get_current_session
from clinicdesk.core.session_store import SessionContext
from clinicdesk.database.session import get_db

router = APIRouter(prefix="/medications", tags=["Medications"])


@router.get("", response_model=MedicationList)
def list_medications(
    db: Session = Depends(get_db),
    session: SessionContext = Depends(get_current_session),
):
    names = MedicationService(db).list_names()
    return MedicationList(items=names, total=len(names))


@router.post(
    "",
    response_model=MedicationResponse,
    status_code=status.HTTP_201_CREATED,
    responses={200: {"description": "Médicament déjà présent"}},
)
def add_medication(
    data: MedicationCreate,
    response: Response,
    db: Session = Depends(get_db),
    session: SessionContext = Depends(get_current_session),
):
    """Ajoute un médicament ; renvoie l'existant (200) si le nom est déjà connu."""
    medication, created = MedicationService(db).add(data.name)
    if not created:
        response.status_code = status.HTTP_200_OK
    return medication
