"""Liste partagée des médicaments (autocomplétion des traitements)."""

from typing import List, Tuple

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from clinicdesk.models.medication import Medication


class MedicationService:

    def __init__(self, db: Session):
        self.db = db

    def list_names(self) -> List[str]:
        """Noms triés alphabétiquement (insensible à la casse)."""
        query = select(Medication.name).order_by(func.lower(Medication.name), Medication.name)
        return list(self.db.execute(query).scalars().all())

    def _find(self, name: str):
        return self.db.execute(
            select(Medication).where(func.lower(Medication.name) == name.lower())
        ).scalar_one_or_none()

    def add(self, name: str) -> Tuple[Medication, bool]:
        """
        Ajoute le nom s'il est absent.

        Returns:
            (médicament, créé) ; créé vaut False si le nom existait déjà
        """
        existing = self._find(name)
        if existing:
            return existing, False

        medication = Medication(name=name)
        self.db.add(medication)
        try:
            self.db.commit()
        except IntegrityError:
            # Ajout concurrent du même nom
            self.db.rollback()
            existing = self._find(name)
            if existing is None:
                raise
            return existing, False

        self.db.refresh(medication)
        return medication, True
