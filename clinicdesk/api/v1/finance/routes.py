"""
Routes comptables d'une clinique.

- /transactions : écritures (création, suppression, liste filtrée par période)
- /transactions/summary : bilan recettes / dépenses / résultat net
"""
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import ValidationError
from sqlalchemy.orm import Session

from clinicdesk.api.v1.finance.schemas import (
    FinanceSummary,
    TransactionCreate,
    TransactionFilters,
    TransactionList,
    TransactionResponse,
)
from clinicdesk.api.v1.finance.services import TransactionNotFoundError, TransactionService
from clinicdesk.core.auth.clinic_auth import require_clinic_user
from clinicdesk.core.session_store import SessionContext
from clinicdesk.database.session import get_db

router = APIRouter(prefix="/transactions", tags=["Finance"])


def get_period_filters(
    date_from: Optional[datetime] = Query(None, description="Début de période (inclus)"),
    date_to: Optional[datetime] = Query(None, description="Fin de période (incluse)"),
) -> TransactionFilters:
    try:
        return TransactionFilters(date_from=date_from, date_to=date_to)
    except ValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=e.errors(include_url=False, include_context=False, include_input=False),
        )


@router.get("", response_model=TransactionList)
def list_transactions(
    filters: TransactionFilters = Depends(get_period_filters),
    db: Session = Depends(get_db),
    session: SessionContext = Depends(require_clinic_user),
):
    items = TransactionService(db, session.clinic_id).get_all(filters)
    return TransactionList(items=items, total=len(items))


@router.get("/summary", response_model=FinanceSummary)
def get_summary(
    filters: TransactionFilters = Depends(get_period_filters),
    db: Session = Depends(get_db),
    session: SessionContext = Depends(require_clinic_user),
):
    """Recettes, dépenses et résultat net de la période."""
    return TransactionService(db, session.clinic_id).summary(filters)


@router.post("", response_model=TransactionResponse, status_code=status.HTTP_201_CREATED)
def create_transaction(
    data: TransactionCreate,
    db: Session = Depends(get_db),
    session: SessionContext = Depends(require_clinic_user),
):
    return TransactionService(db, session.clinic_id).create(data)


@router.delete("/{transaction_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_transaction(
    transaction_id: int,
    db: Session = Depends(get_db),
    session: SessionContext = Depends(require_clinic_user),
):
    try:
        TransactionService(db, session.clinic_id).delete(transaction_id)
    except TransactionNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
