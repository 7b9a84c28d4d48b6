"""
Initialisation de la base de données ClinicDesk.
Crée les tables, la configuration globale et le compte opérateur.
"""

import logging
import sys
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from clinicdesk.core.config import settings
from clinicdesk.core.security import hash_password
from clinicdesk.database.base_class import Base
from clinicdesk.database.session import check_database_connection, db_session, engine
from clinicdesk.models import Clinic, ClinicRole, SystemConfig
from clinicdesk.models.system_config import SYSTEM_CONFIG_ID

logger = logging.getLogger(__name__)


# =============================================================================
# 1. CRÉATION DES TABLES
# =============================================================================

def create_all_tables() -> bool:
    """
    Crée toutes les tables déclarées sur Base.metadata.

    Returns:
        True si succès, False sinon
    """
    try:
        logger.info("📦 Création des tables...")
        Base.metadata.create_all(bind=engine)
        table_names = sorted(Base.metadata.tables.keys())
        logger.info(f"✅ {len(table_names)} tables : {', '.join(table_names)}")
        return True
    except SQLAlchemyError as e:
        logger.error(f"❌ Erreur lors de la création des tables : {e}")
        return False


def drop_all_tables() -> bool:
    """
    Supprime toutes les tables.

    ⚠️ ATTENTION : action irréversible.
    """
    try:
        logger.warning("❗️ Suppression de toutes les tables...")
        Base.metadata.drop_all(bind=engine)
        logger.info("✅ Toutes les tables ont été supprimées")
        return True
    except SQLAlchemyError as e:
        logger.error(f"❌ Erreur lors de la suppression des tables : {e}")
        return False


# =============================================================================
# 2. CONFIGURATION GLOBALE
# =============================================================================

def init_system_config(db: Session) -> SystemConfig:
    config = db.get(SystemConfig, SYSTEM_CONFIG_ID)
    if config:
        logger.info("   ℹ️ Configuration globale existe déjà")
        return config

    config = SystemConfig.defaults()
    db.add(config)
    db.flush()
    logger.info("   ✅ Configuration globale créée")
    return config


# =============================================================================
# 3. COMPTE OPÉRATEUR
# =============================================================================

def init_operator(
    db: Session,
    email: str,
    password: Optional[str],
    name: str = settings.OPERATOR_NAME,
) -> Optional[Clinic]:
    """
    Crée le compte opérateur s'il n'existe pas.

    L'opérateur est une ligne de la table clinics avec le rôle OPERATOR ;
    il n'est jamais soumis à l'abonnement.

    Returns:
        Le compte opérateur, ou None si aucun mot de passe n'est fourni
    """
    email = email.strip().lower()
    existing = db.execute(
        select(Clinic).where(func.lower(Clinic.email) == email)
    ).scalar_one_or_none()

    if existing:
        if existing.role != ClinicRole.OPERATOR:
            logger.error(f"   ❌ {email} existe déjà comme clinique, opérateur non créé")
            return None
        logger.info(f"   ℹ️ Opérateur {email} existe déjà")
        return existing

    if not password:
        logger.error("   ❌ OPERATOR_PASSWORD non défini, opérateur non créé")
        return None

    operator = Clinic(
        name=name,
        email=email,
        password_hash=hash_password(password),
        role=ClinicRole.OPERATOR,
        subscription_active=True,
    )
    db.add(operator)
    db.flush()
    logger.info(f"   ✅ Opérateur créé : {email}")
    return operator


# =============================================================================
# 4. INITIALISATION COMPLÈTE
# =============================================================================

def init_database(
    drop_existing: bool = False,
    operator_email: str = settings.OPERATOR_EMAIL,
    operator_password: Optional[str] = settings.OPERATOR_PASSWORD,
) -> bool:
    """
    Étapes :
    1. Vérifie la connexion
    2. (Optionnel) Supprime les tables existantes
    3. Crée toutes les tables
    4. Crée la configuration globale et le compte opérateur
    """
    logger.info("🚀 INITIALISATION DE LA BASE DE DONNÉES CLINICDESK")

    if not check_database_connection():
        logger.error("❌ Impossible de se connecter à la base (vérifiez DATABASE_URL)")
        return False

    if drop_existing and not drop_all_tables():
        return False

    if not create_all_tables():
        return False

    try:
        with db_session() as db:
            init_system_config(db)
            operator = init_operator(db, operator_email, operator_password)
            db.commit()
    except (SQLAlchemyError, ValueError) as e:
        logger.error(f"❌ Erreur lors de l'initialisation des données : {e}")
        return False

    if operator is None:
        return False

    logger.info("✅ INITIALISATION TERMINÉE")
    logger.info("🚀 Prochaine étape : uvicorn clinicdesk.main:app --reload")
    return True


def main():
    """
    Usage:
        python -m clinicdesk.database.init_db
        python -m clinicdesk.database.init_db --drop
    """
    import argparse

    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s - %(levelname)s - %(message)s",
    )

    parser = argparse.ArgumentParser(description="Initialise la base de données ClinicDesk")
    parser.add_argument(
        "--drop",
        action="store_true",
        help="Supprime les tables existantes avant création (ATTENTION !)",
    )
    parser.add_argument(
        "--operator-email",
        default=settings.OPERATOR_EMAIL,
        help=f"Email du compte opérateur (défaut: {settings.OPERATOR_EMAIL})",
    )
    args = parser.parse_args()

    if args.drop:
        print("\n⚠️  ATTENTION : Vous allez SUPPRIMER toutes les tables existantes !")
        response = input("Êtes-vous sûr ? (oui/non) : ")
        if response.lower() != "oui":
            print("Annulé.")
            sys.exit(0)

    success = init_database(drop_existing=args.drop, operator_email=args.operator_email)
    sys.exit(0 if success else 1)


if __name__ == "__main__":
    main()
