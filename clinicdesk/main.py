"""
ClinicDesk - Application principale FastAPI
"""
import logging

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from redis import RedisError
from sqlalchemy.exc import SQLAlchemyError

from clinicdesk.api.v1 import api_router
from clinicdesk.api.v1.dependencies import STORE_FAILURE, error_detail
from clinicdesk.core.config import settings
from clinicdesk.core.redis_client import RedisClient

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

# Créer l'application FastAPI
app = FastAPI(
    title=settings.APP_NAME,
    description="Gestion de cabinet médical multi-clinique avec abonnement et assistant IA",
    version=settings.APP_VERSION,
    docs_url="/api/docs",
    redoc_url="/api/redoc",
)

# Configuration CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Inclure les routes API v1
app.include_router(api_router)


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    """Erreur de base non gérée : 503, sans détail interne."""
    logger.error(f"❌ Erreur base de données sur {request.method} {request.url.path} : {exc}")
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": error_detail(STORE_FAILURE, "Base de données indisponible")},
    )


@app.exception_handler(RedisError)
async def session_store_error_handler(request: Request, exc: RedisError):
    logger.error(f"❌ Stockage des sessions injoignable sur {request.url.path} : {exc}")
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": error_detail(STORE_FAILURE, "Stockage des sessions indisponible")},
    )


@app.on_event("shutdown")
def close_redis():
    RedisClient.close()


@app.get("/")
async def root():
    """Page d'accueil - Health check"""
    return {
        "app": settings.APP_NAME,
        "status": "running",
        "environment": settings.ENVIRONMENT,
    }


@app.get("/health")
async def health_check():
    """Endpoint de vérification de santé"""
    return {"status": "healthy"}
