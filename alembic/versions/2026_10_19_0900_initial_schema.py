"""initial_schema

Revision ID: 3f9c1a7d52be
Revises:
Create Date: 2026-10-19 09:00:00.000000+00:00

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '3f9c1a7d52be'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


JSON_TYPE = sa.JSON().with_variant(postgresql.JSONB(astext_type=sa.Text()), 'postgresql')


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
    ]


def upgrade() -> None:
    # =========================================================================
    # TENANTS
    # =========================================================================
    op.create_table(
        'clinics',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False, comment='Nom de la clinique'),
        sa.Column('email', sa.String(length=255), nullable=False, comment='Identifiant de connexion'),
        sa.Column('password_hash', sa.String(length=255), nullable=False, comment='Hash bcrypt du mot de passe'),
        sa.Column(
            'role',
            sa.Enum('operator', 'doctor', name='clinic_role_enum', create_constraint=True),
            nullable=False,
        ),
        sa.Column('subscription_active', sa.Boolean(), nullable=False),
        sa.Column('subscription_end_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('ai_usage_count', sa.Integer(), nullable=False),
        sa.Column('ai_limit', sa.Integer(), nullable=True),
        sa.Column('last_ai_usage_reset', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_clinics')),
    )
    op.create_index(op.f('ix_clinics_email'), 'clinics', ['email'], unique=True)

    # =========================================================================
    # DOSSIER PATIENT
    # =========================================================================
    op.create_table(
        'patients',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('clinic_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('age', sa.Integer(), nullable=True),
        sa.Column('phone', sa.String(length=50), nullable=True),
        sa.Column(
            'gender',
            sa.Enum('male', 'female', name='gender_enum', create_constraint=True),
            nullable=True,
        ),
        sa.Column('blood_type', sa.String(length=5), nullable=True),
        sa.Column('weight', sa.Float(), nullable=True, comment='Poids en kg'),
        sa.Column('allergies', sa.Text(), nullable=True),
        sa.Column('chronic_diseases', JSON_TYPE, nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(
            ['clinic_id'], ['clinics.id'],
            name=op.f('fk_patients_clinic_id_clinics'), ondelete='CASCADE',
        ),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_patients')),
    )
    op.create_index(op.f('ix_patients_clinic_id'), 'patients', ['clinic_id'], unique=False)

    op.create_table(
        'visits',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('clinic_id', sa.Integer(), nullable=False),
        sa.Column('patient_id', sa.Integer(), nullable=False),
        sa.Column('visit_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('diagnosis', sa.Text(), nullable=True),
        sa.Column('treatment', sa.Text(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('image_url', sa.String(length=1024), nullable=True),
        sa.Column('allergies', sa.Text(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(
            ['clinic_id'], ['clinics.id'],
            name=op.f('fk_visits_clinic_id_clinics'), ondelete='CASCADE',
        ),
        sa.ForeignKeyConstraint(
            ['patient_id'], ['patients.id'],
            name=op.f('fk_visits_patient_id_patients'), ondelete='CASCADE',
        ),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_visits')),
    )
    op.create_index(op.f('ix_visits_clinic_id'), 'visits', ['clinic_id'], unique=False)
    op.create_index(op.f('ix_visits_patient_id'), 'visits', ['patient_id'], unique=False)

    op.create_table(
        'vitals_logs',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('patient_id', sa.Integer(), nullable=False),
        sa.Column('recorded_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('blood_pressure', sa.String(length=20), nullable=True),
        sa.Column('heart_rate', sa.Integer(), nullable=True),
        sa.Column('oxygen_level', sa.Integer(), nullable=True),
        sa.Column('temperature', sa.Float(), nullable=True),
        sa.Column('blood_sugar', sa.Float(), nullable=True),
        sa.ForeignKeyConstraint(
            ['patient_id'], ['patients.id'],
            name=op.f('fk_vitals_logs_patient_id_patients'), ondelete='CASCADE',
        ),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_vitals_logs')),
    )
    op.create_index(op.f('ix_vitals_logs_patient_id'), 'vitals_logs', ['patient_id'], unique=False)

    # =========================================================================
    # FINANCE
    # =========================================================================
    op.create_table(
        'financial_transactions',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('clinic_id', sa.Integer(), nullable=False),
        sa.Column(
            'type',
            sa.Enum('income', 'expense', name='transaction_type_enum', create_constraint=True),
            nullable=False,
        ),
        sa.Column('category', sa.String(length=100), nullable=False),
        sa.Column('amount', sa.Numeric(precision=14, scale=2), nullable=False),
        sa.Column('transaction_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(
            ['clinic_id'], ['clinics.id'],
            name=op.f('fk_financial_transactions_clinic_id_clinics'), ondelete='CASCADE',
        ),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_financial_transactions')),
    )
    op.create_index(
        op.f('ix_financial_transactions_clinic_id'), 'financial_transactions', ['clinic_id'], unique=False,
    )
    op.create_index(
        op.f('ix_financial_transactions_transaction_date'),
        'financial_transactions', ['transaction_date'], unique=False,
    )

    # =========================================================================
    # RÉFÉRENTIELS
    # =========================================================================
    op.create_table(
        'medications',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_medications')),
        sa.UniqueConstraint('name', name=op.f('uq_medications_name')),
    )

    op.create_table(
        'system_config',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('payment_barcode_url', sa.String(length=1024), nullable=True),
        sa.Column('payment_instructions', sa.Text(), nullable=True),
        sa.Column('support_whatsapp', sa.String(length=50), nullable=True),
        sa.Column('custom_logo_url', sa.String(length=1024), nullable=True),
        sa.Column('app_logo_url', sa.String(length=1024), nullable=True),
        sa.Column('social_links', JSON_TYPE, nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_system_config')),
    )


def downgrade() -> None:
    op.drop_table('system_config')
    op.drop_table('medications')
    op.drop_index(op.f('ix_financial_transactions_transaction_date'), table_name='financial_transactions')
    op.drop_index(op.f('ix_financial_transactions_clinic_id'), table_name='financial_transactions')
    op.drop_table('financial_transactions')
    op.drop_index(op.f('ix_vitals_logs_patient_id'), table_name='vitals_logs')
    op.drop_table('vitals_logs')
    op.drop_index(op.f('ix_visits_patient_id'), table_name='visits')
    op.drop_index(op.f('ix_visits_clinic_id'), table_name='visits')
    op.drop_table('visits')
    op.drop_index(op.f('ix_patients_clinic_id'), table_name='patients')
    op.drop_table('patients')
    op.drop_index(op.f('ix_clinics_email'), table_name='clinics')
    op.drop_table('clinics')

    sa.Enum(name='transaction_type_enum').drop(op.get_bind(), checkfirst=True)
    sa.Enum(name='gender_enum').drop(op.get_bind(), checkfirst=True)
    sa.Enum(name='clinic_role_enum').drop(op.get_bind(), checkfirst=True)
