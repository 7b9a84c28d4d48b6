"""Exceptions métier des abonnements et du quota IA."""


class SubscriptionError(Exception):
    """Erreur générique liée aux abonnements."""
    pass


class ClinicNotFoundError(SubscriptionError):
    """Clinique introuvable."""
    pass


class InvalidCredentialsError(SubscriptionError):
    """Email ou mot de passe incorrect."""
    pass


class SubscriptionExpiredError(SubscriptionError):
    """Abonnement arrêté ou échu : connexion refusée."""
    pass


class InvalidExtensionError(SubscriptionError):
    """Durée de prolongation invalide (nombre de jours <= 0)."""
    pass


class QuotaExceededError(SubscriptionError):
    """Plafond mensuel de l'assistant IA atteint."""
    pass
