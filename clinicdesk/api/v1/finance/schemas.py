"""Schémas Pydantic pour la comptabilité d'une clinique."""

from datetime import datetime
from typing import List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_validator

from clinicdesk.models.enums import TransactionType


class TransactionCreate(BaseModel):
    """Nouvelle écriture (les écritures ne sont jamais modifiées)."""
    type: TransactionType
    category: str = Field(..., min_length=1, max_length=100)
    amount: float = Field(..., gt=0, description="Montant positif ; le sens est donné par type")
    date: Optional[datetime] = Field(None, description="Date de l'opération (défaut: maintenant)")
    description: Optional[str] = None


class TransactionResponse(BaseModel):
    id: int
    clinic_id: int
    type: TransactionType
    category: str
    amount: float
    date: datetime = Field(validation_alias=AliasChoices("transaction_date", "date"))
    description: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class TransactionList(BaseModel):
    items: List[TransactionResponse]
    total: int


class TransactionFilters(BaseModel):
    """Période d'analyse (bornes incluses)."""
    date_from: Optional[datetime] = None
    date_to: Optional[datetime] = None

    @model_validator(mode="after")
    def check_range(self) -> "TransactionFilters":
        if self.date_from and self.date_to and self.date_from > self.date_to:
            raise ValueError("date_from doit précéder date_to")
        return self


class FinanceSummary(BaseModel):
    """Bilan de la période."""
    total_income: float
    total_expense: float
    net_profit: float
    transaction_count: int
    date_from: Optional[datetime] = None
    date_to: Optional[datetime] = None
