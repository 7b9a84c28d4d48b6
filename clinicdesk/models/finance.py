# clinicdesk/models/finance.py
"""Écritures comptables d'une clinique (recettes / dépenses)."""

from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Optional

from sqlalchemy import DateTime, Enum, ForeignKey, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from clinicdesk.core.utils.datetime_utils import utcnow
from clinicdesk.database.base_class import Base
from clinicdesk.models.enums import TransactionType, enum_values
from clinicdesk.models.mixins import TimestampMixin

if TYPE_CHECKING:
    from clinicdesk.models.clinic import Clinic


class FinancialTransaction(Base, TimestampMixin):
    """
    Écriture comptable.

    Créée ou supprimée, jamais modifiée : une correction se fait par
    suppression puis nouvelle saisie.
    """

    __tablename__ = "financial_transactions"

    id: Mapped[int] = mapped_column(primary_key=True)
    clinic_id: Mapped[int] = mapped_column(
        ForeignKey("clinics.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )

    type: Mapped[TransactionType] = mapped_column(
        Enum(
            TransactionType,
            name="transaction_type_enum",
            create_constraint=True,
            values_callable=enum_values,
        ),
        nullable=False,
    )
    category: Mapped[str] = mapped_column(String(100), nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    transaction_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        index=True,
        nullable=False,
    )
    description: Mapped[Optional[str]] = mapped_column(Text)

    clinic: Mapped["Clinic"] = relationship("Clinic", back_populates="transactions")

    def __repr__(self) -> str:
        return f"<FinancialTransaction(id={self.id}, type='{self.type}', amount={self.amount})>"
