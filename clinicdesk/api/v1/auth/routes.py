"""
Routes d'authentification.

Flux:
    1. POST /auth/login  → identifiants + contrôle d'abonnement, ouvre une session
    2. GET  /auth/me     → contexte de la session courante
    3. POST /auth/logout → révoque la session courante
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from clinicdesk.api.v1.auth.schemas import LoginRequest, LoginResponse, SessionResponse
from clinicdesk.api.v1.dependencies import (
    INVALID_CREDENTIALS,
    SUBSCRIPTION_EXPIRED,
    error_detail,
)
from clinicdesk.core.auth.clinic_auth import get_current_session
from clinicdesk.core.security.jwt import create_access_token
from clinicdesk.core.session_store import SessionContext, SessionStore, get_session_store
from clinicdesk.database.session import get_db
from clinicdesk.services.subscription import (
    InvalidCredentialsError,
    SubscriptionExpiredError,
    SubscriptionGate,
)

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/auth",
    tags=["Authentification"],
)


@router.post(
    "/login",
    response_model=LoginResponse,
    summary="Connexion",
    responses={
        401: {"description": "Email ou mot de passe incorrect"},
        403: {"description": "Abonnement expiré ou arrêté"},
    },
)
def login(
    data: LoginRequest,
    db: Session = Depends(get_db),
    store: SessionStore = Depends(get_session_store),
) -> LoginResponse:
    """
    Authentifie une clinique (ou l'opérateur) et ouvre une session.

    Un abonnement actif mais échu est désactivé au passage.
    """
    gate = SubscriptionGate(db)
    try:
        clinic = gate.authenticate(data.email, data.password)
    except InvalidCredentialsError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=error_detail(INVALID_CREDENTIALS, str(e)),
        )
    except SubscriptionExpiredError as e:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=error_detail(SUBSCRIPTION_EXPIRED, str(e)),
        )

    context = store.open(clinic)
    token = create_access_token({
        "sub": str(clinic.id),
        "sid": context.session_id,
        "role": clinic.role.value,
    })

    return LoginResponse(
        access_token=token,
        expires_in=store.ttl_seconds,
        clinic=SessionResponse.model_validate(context),
    )


@router.get("/me", response_model=SessionResponse, summary="Session courante")
async def me(session: SessionContext = Depends(get_current_session)):
    return SessionResponse.model_validate(session)


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT, summary="Déconnexion")
async def logout(
    session: SessionContext = Depends(get_current_session),
    store: SessionStore = Depends(get_session_store),
):
    """Révoque la session courante ; le token devient inutilisable."""
    store.close(session)
    logger.info(f"Déconnexion de la clinique {session.clinic_id}")
