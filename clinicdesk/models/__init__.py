"""
Modèles SQLAlchemy ClinicDesk.

Importer ce module charge toutes les tables dans Base.metadata
(nécessaire pour create_all et l'autogenerate Alembic).
"""

from clinicdesk.database.base_class import Base
from clinicdesk.models.enums import ClinicRole, Gender, TransactionType
from clinicdesk.models.clinic import Clinic
from clinicdesk.models.patient import Patient, Visit, VitalLog
from clinicdesk.models.finance import FinancialTransaction
from clinicdesk.models.medication import Medication
from clinicdesk.models.system_config import SystemConfig, SYSTEM_CONFIG_ID

__all__ = [
    "Base",
    # Enums
    "ClinicRole",
    "Gender",
    "TransactionType",
    # Tenant
    "Clinic",
    # Dossier patient
    "Patient",
    "Visit",
    "VitalLog",
    # Finance
    "FinancialTransaction",
    # Référentiels
    "Medication",
    "SystemConfig",
    "SYSTEM_CONFIG_ID",
]
