"""
Tests de la prolongation et de l'arrêt des abonnements.
"""

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy.orm import Session

from clinicdesk.core.session_store import SessionStore
from clinicdesk.core.utils.datetime_utils import ensure_utc, utcnow
from clinicdesk.models import Clinic
from clinicdesk.services.subscription import (
    ClinicNotFoundError,
    InvalidExtensionError,
    SubscriptionAdmin,
    compute_extended_end,
)

NOW = datetime(2026, 3, 10, 12, 0, tzinfo=timezone.utc)


class TestComputeExtendedEnd:
    """Nouvelle échéance = max(échéance actuelle, maintenant) + jours."""

    def test_running_subscription_keeps_remaining_days(self):
        current = NOW + timedelta(days=10)
        assert compute_extended_end(current, 30, NOW) == NOW + timedelta(days=40)

    def test_expired_subscription_restarts_from_now(self):
        current = NOW - timedelta(days=10)
        assert compute_extended_end(current, 30, NOW) == NOW + timedelta(days=30)

    def test_no_end_date_starts_from_now(self):
        assert compute_extended_end(None, 7, NOW) == NOW + timedelta(days=7)

    def test_naive_end_date_treated_as_utc(self):
        current = datetime(2026, 3, 20, 12, 0)
        assert compute_extended_end(current, 1, NOW) == datetime(2026, 3, 21, 12, 0, tzinfo=timezone.utc)


class TestExtendSubscription:

    def test_extend_reactivates(self, db_session: Session, stopped_clinic: Clinic):
        clinic = SubscriptionAdmin(db_session).extend_subscription(stopped_clinic.id, 30)

        assert clinic.subscription_active is True
        assert ensure_utc(clinic.subscription_end_date) > utcnow() + timedelta(days=59)

    def test_extend_expired_clinic(self, db_session: Session, expired_clinic: Clinic):
        before = utcnow()
        clinic = SubscriptionAdmin(db_session).extend_subscription(expired_clinic.id, 30)

        end = ensure_utc(clinic.subscription_end_date)
        assert before + timedelta(days=30) <= end <= utcnow() + timedelta(days=30)

    @pytest.mark.parametrize("days", [0, -5])
    def test_non_positive_days_rejected(self, db_session: Session, clinic: Clinic, days: int):
        with pytest.raises(InvalidExtensionError):
            SubscriptionAdmin(db_session).extend_subscription(clinic.id, days)

    def test_unknown_clinic(self, db_session: Session):
        with pytest.raises(ClinicNotFoundError):
            SubscriptionAdmin(db_session).extend_subscription(9999, 30)


class TestStopSubscription:

    def test_stop_deactivates(self, db_session: Session, clinic: Clinic):
        clinic = SubscriptionAdmin(db_session).stop_subscription(clinic.id)
        assert clinic.subscription_active is False

    def test_stop_revokes_open_sessions(
        self, db_session: Session, clinic: Clinic, session_store: SessionStore
    ):
        first = session_store.open(clinic)
        second = session_store.open(clinic)

        SubscriptionAdmin(db_session, session_store=session_store).stop_subscription(clinic.id)

        assert session_store.get(first.session_id) is None
        assert session_store.get(second.session_id) is None

    def test_stop_keeps_other_clinics_sessions(
        self,
        db_session: Session,
        clinic: Clinic,
        other_clinic: Clinic,
        session_store: SessionStore,
    ):
        other = session_store.open(other_clinic)
        SubscriptionAdmin(db_session, session_store=session_store).stop_subscription(clinic.id)
        assert session_store.get(other.session_id) is not None
