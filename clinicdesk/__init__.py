"""ClinicDesk - API de gestion de cliniques multi-tenant."""

__version__ = "0.1.0"
