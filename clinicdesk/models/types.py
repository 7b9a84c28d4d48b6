"""
Types SQLAlchemy personnalisés pour ClinicDesk.

Ce module définit des types compatibles SQLite (tests) et PostgreSQL (production).
"""

from sqlalchemy import JSON, Text
from sqlalchemy.dialects.postgresql import JSONB


# ============================================================================
# JSONBCompatible - Type JSON compatible multi-dialecte
# ============================================================================
#
# - Sur PostgreSQL : JSONB
# - Sur SQLite/autres : JSON standard
#
# with_variant() garde des migrations Alembic générées automatiquement.
#
# ============================================================================

JSONBCompatible = JSON().with_variant(JSONB(astext_type=Text()), 'postgresql')


# Liste de chaînes (maladies chroniques)
JSONStringList = JSONBCompatible

# Objet clé/valeur (liens réseaux sociaux)
JSONLinks = JSONBCompatible
