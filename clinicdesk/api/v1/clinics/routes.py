# clinicdesk/api/v1/clinics/routes.py
"""
Routes de gestion des cliniques.

Toutes les routes sont réservées à l'opérateur de la plateforme.
"""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from clinicdesk.core.auth.clinic_auth import require_operator
from clinicdesk.core.session_store import SessionContext, SessionStore, get_session_store
from clinicdesk.database.session import get_db
from clinicdesk.services.subscription import (
    ClinicNotFoundError,
    InvalidExtensionError,
    QuotaTracker,
    SubscriptionAdmin,
)

from .schemas import (
    ClinicCreate,
    ClinicUpdate,
    ClinicResponse,
    ClinicList,
    SubscriptionExtendRequest,
    QuotaStatusResponse,
)
from .services import ClinicService, DuplicateEmailError

router = APIRouter(prefix="/clinics", tags=["Clinics (opérateur)"])


def _not_found(e: Exception) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


# =============================================================================
# CRUD
# =============================================================================

@router.get("", response_model=ClinicList, summary="Liste des cliniques")
def list_clinics(
    operator: SessionContext = Depends(require_operator),
    db: Session = Depends(get_db),
):
    """Cliniques clientes, les plus récentes en premier."""
    items = ClinicService(db).list_clinics()
    return ClinicList(items=items, total=len(items))


@router.post(
    "",
    response_model=ClinicResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Créer une clinique",
)
def create_clinic(
    data: ClinicCreate,
    operator: SessionContext = Depends(require_operator),
    db: Session = Depends(get_db),
):
    """Crée un compte clinique actif pour un mois, quota IA par défaut."""
    try:
        return ClinicService(db).create(data)
    except DuplicateEmailError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))


@router.get("/{clinic_id}", response_model=ClinicResponse, summary="Détail d'une clinique")
def get_clinic(
    clinic_id: int,
    operator: SessionContext = Depends(require_operator),
    db: Session = Depends(get_db),
):
    try:
        return ClinicService(db).get_by_id(clinic_id)
    except ClinicNotFoundError as e:
        raise _not_found(e)


@router.patch("/{clinic_id}", response_model=ClinicResponse, summary="Modifier une clinique")
def update_clinic(
    clinic_id: int,
    data: ClinicUpdate,
    operator: SessionContext = Depends(require_operator),
    db: Session = Depends(get_db),
):
    try:
        return ClinicService(db).update(clinic_id, data)
    except ClinicNotFoundError as e:
        raise _not_found(e)
    except DuplicateEmailError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))


@router.delete(
    "/{clinic_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Supprimer une clinique",
)
def delete_clinic(
    clinic_id: int,
    operator: SessionContext = Depends(require_operator),
    db: Session = Depends(get_db),
    store: SessionStore = Depends(get_session_store),
):
    """Suppression définitive (patients, consultations, finances) et révocation des sessions."""
    try:
        ClinicService(db, session_store=store).delete(clinic_id)
    except ClinicNotFoundError as e:
        raise _not_found(e)


# =============================================================================
# ABONNEMENT
# =============================================================================

@router.post(
    "/{clinic_id}/subscription/extend",
    response_model=ClinicResponse,
    summary="Prolonger l'abonnement",
)
def extend_subscription(
    clinic_id: int,
    data: SubscriptionExtendRequest,
    operator: SessionContext = Depends(require_operator),
    db: Session = Depends(get_db),
):
    """
    Nouvelle échéance = max(échéance actuelle, maintenant) + jours.

    Réactive l'abonnement s'il était arrêté ou échu.
    """
    try:
        ClinicService(db).get_by_id(clinic_id)
        return SubscriptionAdmin(db).extend_subscription(clinic_id, data.days)
    except ClinicNotFoundError as e:
        raise _not_found(e)
    except InvalidExtensionError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))


@router.post(
    "/{clinic_id}/subscription/stop",
    response_model=ClinicResponse,
    summary="Arrêter l'abonnement",
)
def stop_subscription(
    clinic_id: int,
    operator: SessionContext = Depends(require_operator),
    db: Session = Depends(get_db),
    store: SessionStore = Depends(get_session_store),
):
    """Désactive l'abonnement ; les sessions ouvertes de la clinique sont révoquées."""
    try:
        ClinicService(db).get_by_id(clinic_id)
        return SubscriptionAdmin(db, session_store=store).stop_subscription(clinic_id)
    except ClinicNotFoundError as e:
        raise _not_found(e)


# =============================================================================
# QUOTA IA
# =============================================================================

@router.get(
    "/{clinic_id}/ai-usage",
    response_model=QuotaStatusResponse,
    summary="Consommation de l'assistant IA",
)
def get_ai_usage(
    clinic_id: int,
    operator: SessionContext = Depends(require_operator),
    db: Session = Depends(get_db),
):
    try:
        ClinicService(db).get_by_id(clinic_id)
        tracker = QuotaTracker(db)
        tracker.reset_if_new_month(clinic_id)
        return QuotaStatusResponse.model_validate(tracker.usage(clinic_id))
    except ClinicNotFoundError as e:
        raise _not_found(e)


@router.post(
    "/{clinic_id}/ai-usage/reset",
    response_model=QuotaStatusResponse,
    summary="Remettre le compteur IA à zéro",
)
def reset_ai_usage(
    clinic_id: int,
    operator: SessionContext = Depends(require_operator),
    db: Session = Depends(get_db),
):
    try:
        ClinicService(db).get_by_id(clinic_id)
        return QuotaStatusResponse.model_validate(QuotaTracker(db).reset(clinic_id))
    except ClinicNotFoundError as e:
        raise _not_found(e)
