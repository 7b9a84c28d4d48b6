"""Moteur d'abonnement : contrôle d'accès, quota IA, prolongation."""

from .exceptions import (
    SubscriptionError,
    ClinicNotFoundError,
    InvalidCredentialsError,
    SubscriptionExpiredError,
    InvalidExtensionError,
    QuotaExceededError,
)
from .gate import SubscriptionGate, can_authenticate, normalize_email
from .quota import QuotaStatus, QuotaTracker
from .renewal import SubscriptionAdmin, compute_extended_end

__all__ = [
    "SubscriptionError",
    "ClinicNotFoundError",
    "InvalidCredentialsError",
    "SubscriptionExpiredError",
    "InvalidExtensionError",
    "QuotaExceededError",
    "SubscriptionGate",
    "can_authenticate",
    "normalize_email",
    "QuotaStatus",
    "QuotaTracker",
    "SubscriptionAdmin",
    "compute_extended_end",
]
