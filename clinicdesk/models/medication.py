"""Liste globale des médicaments (autocomplétion des traitements)."""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from clinicdesk.database.base_class import Base
from clinicdesk.models.mixins import TimestampMixin


class Medication(Base, TimestampMixin):
    __tablename__ = "medications"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)

    def __repr__(self) -> str:
        return f"<Medication(name='{self.name}')>"
