"""
Dépendances d'authentification des cliniques et de l'opérateur.

Flow:
    1. get_current_session() vérifie le JWT (signature, expiration, type)
    2. Charge la session référencée par le claim `sid` depuis Redis
    3. Une session absente (déconnexion, abonnement arrêté) => 401

Usage:
    @router.get("/patients")
    def list_patients(session: SessionContext = Depends(require_clinic_user)):
        ...
"""

from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError

from clinicdesk.core.security.jwt import verify_token
from clinicdesk.core.session_store import SessionContext, SessionStore, get_session_store

# Security scheme pour le token Bearer
bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_session(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    store: SessionStore = Depends(get_session_store),
) -> SessionContext:
    """
    Dépendance pour obtenir la session courante depuis le JWT.

    Raises:
        HTTPException 401: Token manquant, invalide, ou session révoquée
    """
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token d'authentification requis",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        payload = verify_token(credentials.credentials, token_type="access")
    except JWTError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Token invalide: {str(e)}",
            headers={"WWW-Authenticate": "Bearer"},
        )

    session_id = payload.get("sid")
    if not session_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token invalide: session manquante",
        )

    session = store.get(session_id)
    if session is None or str(session.clinic_id) != str(payload.get("sub")):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Session expirée ou révoquée",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return session


async def require_clinic_user(
    session: SessionContext = Depends(get_current_session),
) -> SessionContext:
    """Réservé aux comptes clinique (les données patients leur appartiennent)."""
    if session.is_operator:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Réservé aux comptes clinique",
        )
    return session


async def require_operator(
    session: SessionContext = Depends(get_current_session),
) -> SessionContext:
    """Réservé à l'opérateur de la plateforme."""
    if not session.is_operator:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Réservé à l'opérateur de la plateforme",
        )
    return session
