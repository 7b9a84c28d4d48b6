"""
Énumérations partagées entre modèles et schémas.

Les valeurs sont celles stockées en base (minuscules).
"""
from enum import Enum as PyEnum


class ClinicRole(str, PyEnum):
    """Rôle d'un compte : opérateur SaaS ou clinique cliente."""
    OPERATOR = "operator"
    DOCTOR = "doctor"


class Gender(str, PyEnum):
    MALE = "male"
    FEMALE = "female"


class TransactionType(str, PyEnum):
    """Sens d'une écriture comptable."""
    INCOME = "income"
    EXPENSE = "expense"


def enum_values(enum_cls) -> list[str]:
    """Stocke la valeur de l'enum (et non son nom) en base."""
    return [member.value for member in enum_cls]
