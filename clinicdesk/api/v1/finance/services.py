"""
Service comptable : écritures et bilan par période.

Le bilan est calculé en une requête d'agrégation (SUM conditionnel par type).
"""

from decimal import Decimal
from typing import List, Optional

from sqlalchemy import case, func, select
from sqlalchemy.orm import Session

from clinicdesk.api.v1.finance.schemas import (
    FinanceSummary,
    TransactionCreate,
    TransactionFilters,
)
from clinicdesk.core.utils.datetime_utils import utcnow
from clinicdesk.models.enums import TransactionType
from clinicdesk.models.finance import FinancialTransaction


class TransactionNotFoundError(Exception):
    """Écriture non trouvée."""
    pass


def _money(value) -> float:
    return float(Decimal(value or 0).quantize(Decimal("0.01")))


class TransactionService:
    """Écritures comptables d'une clinique."""

    def __init__(self, db: Session, clinic_id: int):
        self.db = db
        self.clinic_id = clinic_id

    def _filtered(self, query, filters: Optional[TransactionFilters]):
        query = query.where(FinancialTransaction.clinic_id == self.clinic_id)
        if filters:
            if filters.date_from:
                query = query.where(FinancialTransaction.transaction_date >= filters.date_from)
            if filters.date_to:
                query = query.where(FinancialTransaction.transaction_date <= filters.date_to)
        return query

    def get_all(self, filters: Optional[TransactionFilters] = None) -> List[FinancialTransaction]:
        """Écritures de la période, les plus récentes en premier."""
        query = self._filtered(select(FinancialTransaction), filters).order_by(
            FinancialTransaction.transaction_date.desc(),
            FinancialTransaction.id.desc(),
        )
        return list(self.db.execute(query).scalars().all())

    def create(self, data: TransactionCreate) -> FinancialTransaction:
        transaction = FinancialTransaction(
            clinic_id=self.clinic_id,
            type=data.type,
            category=data.category.strip(),
            amount=Decimal(str(data.amount)),
            transaction_date=data.date or utcnow(),
            description=data.description,
        )
        self.db.add(transaction)
        self.db.commit()
        self.db.refresh(transaction)
        return transaction

    def delete(self, transaction_id: int) -> None:
        transaction = self.db.get(FinancialTransaction, transaction_id)
        if not transaction or transaction.clinic_id != self.clinic_id:
            raise TransactionNotFoundError(f"Écriture {transaction_id} non trouvée")
        self.db.delete(transaction)
        self.db.commit()

    def summary(self, filters: Optional[TransactionFilters] = None) -> FinanceSummary:
        """Totaux par type sur la période et résultat net."""
        income = func.sum(
            case((FinancialTransaction.type == TransactionType.INCOME, FinancialTransaction.amount), else_=0)
        )
        expense = func.sum(
            case((FinancialTransaction.type == TransactionType.EXPENSE, FinancialTransaction.amount), else_=0)
        )
        query = self._filtered(
            select(income, expense, func.count(FinancialTransaction.id)),
            filters,
        )
        total_income, total_expense, count = self.db.execute(query).one()

        total_income = _money(total_income)
        total_expense = _money(total_expense)
        return FinanceSummary(
            total_income=total_income,
            total_expense=total_expense,
            net_profit=round(total_income - total_expense, 2),
            transaction_count=count or 0,
            date_from=filters.date_from if filters else None,
            date_to=filters.date_to if filters else None,
        )
