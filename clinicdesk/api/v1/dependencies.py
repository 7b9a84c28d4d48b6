# clinicdesk/api/v1/dependencies.py
"""
Dépendances générales de l'API v1.

- PaginationParams : paramètres de pagination standardisés
- error_detail : corps d'erreur {code, message} des erreurs métier
"""

from typing import Annotated

from fastapi import Depends, Query


class PaginationParams:
    """
    Paramètres de pagination standardisés pour les routes de liste.

    Usage:
        @router.get("/patients")
        def list_patients(pagination: PaginationParams = Depends()):
            # pagination.page, pagination.size, pagination.offset
            ...
    """

    def __init__(
            self,
            page: Annotated[int, Query(ge=1, description="Numéro de page (commence à 1)")] = 1,
            size: Annotated[int, Query(ge=1, le=100, description="Nombre d'éléments par page")] = 20,
    ):
        self.page = page
        self.size = size

    @property
    def offset(self) -> int:
        """Calcule l'offset pour la requête SQL."""
        return (self.page - 1) * self.size

    def pages(self, total: int) -> int:
        return (total + self.size - 1) // self.size


Pagination = Annotated[PaginationParams, Depends()]


# =============================================================================
# ERREURS MÉTIER
# =============================================================================

INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
SUBSCRIPTION_EXPIRED = "SUBSCRIPTION_EXPIRED"
QUOTA_EXCEEDED = "QUOTA_EXCEEDED"
UPLOAD_FAILED = "UPLOAD_FAILED"
AI_UNAVAILABLE = "AI_UNAVAILABLE"
STORE_FAILURE = "STORE_FAILURE"


def error_detail(code: str, message: str) -> dict:
    """Détail d'HTTPException exploitable par le client (code stable + message)."""
    return {"code": code, "message": message}
