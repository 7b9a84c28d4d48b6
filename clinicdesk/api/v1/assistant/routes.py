"""
Routes de l'assistant médical.

- POST /patients/{id}/assistant : question sur le dossier du patient
- GET /assistant/quota : consommation du mois en cours
"""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from clinicdesk.api.v1.assistant.schemas import AssistantAnswer, AssistantQuestion
from clinicdesk.api.v1.assistant.services import AssistantService
from clinicdesk.api.v1.clinics.schemas import QuotaStatusResponse
from clinicdesk.api.v1.dependencies import AI_UNAVAILABLE, QUOTA_EXCEEDED, error_detail
from clinicdesk.api.v1.patients.services import PatientNotFoundError
from clinicdesk.core.auth.clinic_auth import require_clinic_user
from clinicdesk.core.session_store import SessionContext
from clinicdesk.database.session import get_db
from clinicdesk.services.assistant import (
    AssistantClient,
    AssistantUnavailableError,
    get_assistant_client,
)
from clinicdesk.services.subscription import QuotaExceededError

router = APIRouter(tags=["Assistant"])


def _unavailable(e: AssistantUnavailableError, code: int) -> HTTPException:
    return HTTPException(status_code=code, detail=error_detail(AI_UNAVAILABLE, str(e)))


def require_assistant_client() -> AssistantClient:
    """Client du modèle ; 503 si l'assistant n'est pas configuré."""
    try:
        return get_assistant_client()
    except AssistantUnavailableError as e:
        raise _unavailable(e, status.HTTP_503_SERVICE_UNAVAILABLE)


@router.post("/patients/{patient_id}/assistant", response_model=AssistantAnswer)
async def ask_assistant(
    patient_id: int,
    data: AssistantQuestion,
    db: Session = Depends(get_db),
    client: AssistantClient = Depends(require_assistant_client),
    session: SessionContext = Depends(require_clinic_user),
):
    service = AssistantService(db, session.clinic_id, client)
    try:
        answer, usage = await service.ask(patient_id, data.question)
    except PatientNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except QuotaExceededError as e:
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail=error_detail(QUOTA_EXCEEDED, str(e)),
        )
    except AssistantUnavailableError as e:
        raise _unavailable(e, status.HTTP_502_BAD_GATEWAY)

    return AssistantAnswer(answer=answer, usage=QuotaStatusResponse.model_validate(usage))


@router.get("/assistant/quota", response_model=QuotaStatusResponse)
def get_quota(
    db: Session = Depends(get_db),
    session: SessionContext = Depends(require_clinic_user),
):
    usage = AssistantService(db, session.clinic_id).usage()
    return QuotaStatusResponse.model_validate(usage)
