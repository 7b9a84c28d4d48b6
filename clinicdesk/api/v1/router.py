"""
Router principal API v1.

Agrège les routers des modules métier sous /api/v1.
"""
from fastapi import APIRouter

from clinicdesk import __version__
from clinicdesk.database.session import check_database_connection

from .auth import router as auth_router
from .clinics import router as clinics_router
from .patients import router as patients_router
from .assistant import router as assistant_router
from .finance import router as finance_router
from .medications import router as medications_router
from .system_config import router as system_config_router


# =============================================================================
# ROUTER PRINCIPAL
# =============================================================================

api_router = APIRouter(prefix="/api/v1")


api_router.include_router(auth_router)
api_router.include_router(clinics_router)
api_router.include_router(patients_router)
api_router.include_router(assistant_router)
api_router.include_router(finance_router)
api_router.include_router(medications_router)
api_router.include_router(system_config_router)


# =============================================================================
# HEALTH CHECK
# =============================================================================

@api_router.get(
    "/health",
    tags=["System"],
    summary="Health check",
    description="Vérifie que l'API et la base de données répondent.",
)
def health_check():
    """
    Endpoint de santé pour les load balancers et le monitoring.

    Returns:
        Statut de l'API et de la base
    """
    database_ok = check_database_connection()
    return {
        "status": "healthy" if database_ok else "degraded",
        "service": "clinicdesk-api",
        "version": __version__,
        "api_version": "v1",
        "database": "ok" if database_ok else "unreachable",
    }
