# =====================================================
# test/services/test_calendar_service.py
# =====================================================
"""
Test del layer di associazione calendario <-> strumenti:
apply-to-many, reconcile, delete, rollback su errore.
"""

import logging
import uuid

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from metrocal.database.exceptions import (
    BulkAssociationError,
    EntityNotFoundError,
    ValidationError,
    handle_database_errors,
)
from metrocal.engine import (
    CalibrationPolicy,
    DailyRecurrence,
    FixedInterval,
    FrequencyUnit,
    Tolerance,
    ToleranceUnit,
)
from metrocal.models import CalibrationCalendar, Instrument
from metrocal.repositories import CalendarRepository, InstrumentRepository
from metrocal.services import CalendarService

POLICY = CalibrationPolicy(FixedInterval(6, FrequencyUnit.MONTHS), Tolerance(15, ToleranceUnit.DAYS))

# =====================================================
# FIXTURES
# =====================================================

@pytest.fixture
def calendar_service(test_db):
    return CalendarService(test_db)


@pytest.fixture
def member_ids(test_db):
    def members(calendar_id):
        return InstrumentRepository(test_db).get_ids_by_calendar(calendar_id)
    return members

# =====================================================
# APPLY / CREATE
# =====================================================

class TestApplyPolicy:

    def test_creates_calendar_and_assigns_all(self, calendar_service, instruments, member_ids, caplog):
        ids = [instruments["A"].id, instruments["B"].id, instruments["C"].id]

        with caplog.at_level(logging.INFO, logger="metrocal.services.calendar_service"):
            result = calendar_service.apply_policy(POLICY, ids, name="Six months")

        assert result.affected_count == 3
        assert result.calendar.name == "Six months"
        assert result.calendar.policy == POLICY
        assert member_ids(result.calendar.id) == set(ids)
        assert "applied to 3 instrument(s)" in caplog.text

    def test_last_writer_wins(self, calendar_service, instruments, member_ids):
        first = calendar_service.apply_policy(POLICY, [instruments["A"].id], name="First")
        second = calendar_service.apply_policy(
            CalibrationPolicy(DailyRecurrence()), [instruments["A"].id], name="Second"
        )

        assert member_ids(first.calendar.id) == set()
        assert member_ids(second.calendar.id) == {instruments["A"].id}

    def test_empty_instrument_list_rejected(self, calendar_service):
        with pytest.raises(ValidationError):
            calendar_service.apply_policy(POLICY, [], name="Nothing")

    def test_unknown_instrument_rolls_back_everything(self, test_db, calendar_service, instruments):
        with pytest.raises(EntityNotFoundError):
            calendar_service.apply_policy(POLICY, [instruments["A"].id, uuid.uuid4()], name="Broken")

        assert test_db.query(CalibrationCalendar).count() == 0
        assert instruments["A"].calibration_calendar_id is None

    def test_database_failure_is_one_bulk_error(self, test_db, calendar_service, instruments, monkeypatch, caplog):
        # Arrange: l'update bulk fallisce dopo la creazione del calendario
        def failing_assign(self, ids, calendar_id):
            raise OperationalError("UPDATE instruments", {}, Exception("disk I/O error"))

        monkeypatch.setattr(InstrumentRepository, "assign_calendar", failing_assign)
        ids = [instruments["A"].id, instruments["B"].id]

        # Act
        with caplog.at_level(logging.ERROR, logger="metrocal.services.calendar_service"):
            with pytest.raises(BulkAssociationError) as exc_info:
                calendar_service.apply_policy(POLICY, ids, name="Doomed")

        # Assert: un solo errore per tutto il batch, nessun calendario rimasto
        assert exc_info.value.attempted_count == 2
        assert exc_info.value.operation == "apply calendar"
        assert test_db.query(CalibrationCalendar).count() == 0
        assert "rolled back" in caplog.text

    def test_constraint_failure_is_one_bulk_error(self, test_db, calendar_service, instruments, monkeypatch):
        # Arrange: FK violata durante l'update bulk, tradotta dal decorator reale
        @handle_database_errors("Instrument")
        def failing_set_calendar(self, ids, calendar_id):
            raise IntegrityError("UPDATE instruments", {}, Exception("FOREIGN KEY constraint failed"))

        monkeypatch.setattr(InstrumentRepository, "_set_calendar", failing_set_calendar)
        ids = [instruments["A"].id, instruments["B"].id]

        # Act
        with pytest.raises(BulkAssociationError) as exc_info:
            calendar_service.apply_policy(POLICY, ids, name="Constrained")

        # Assert: BulkAssociationError con il conteggio, causa originale conservata
        assert exc_info.value.attempted_count == 2
        assert isinstance(exc_info.value.__cause__, ValidationError)
        assert test_db.query(CalibrationCalendar).count() == 0
        print("✅ Constraint failure reported as one bulk error")

    def test_injected_logger_is_used(self, test_db, instruments, caplog):
        logger = logging.getLogger("custom.audit")
        service = CalendarService(test_db, logger=logger)

        with caplog.at_level(logging.INFO, logger="custom.audit"):
            service.apply_policy(POLICY, [instruments["A"].id], name="Audited")

        assert any(record.name == "custom.audit" for record in caplog.records)

# =====================================================
# RECONCILE
# =====================================================

class TestReconcile:

    def test_reconcile_ab_to_bd(self, calendar_service, instruments, member_ids):
        # Arrange
        a, b, d = instruments["A"].id, instruments["B"].id, instruments["D"].id
        calendar = calendar_service.create_calendar(POLICY, {"name": "Members"}, instrument_ids=[a, b])

        # Act
        result = calendar_service.reconcile_instruments(calendar.id, [b, d])

        # Assert
        assert result.detached == {a}
        assert result.attached == {d}
        assert result.kept == {b}
        assert member_ids(calendar.id) == {b, d}
        assert instruments["A"].calibration_calendar_id is None

    def test_second_run_is_noop(self, calendar_service, instruments, member_ids):
        a, b = instruments["A"].id, instruments["B"].id
        calendar = calendar_service.create_calendar(POLICY, {"name": "Members"}, instrument_ids=[a])

        calendar_service.reconcile_instruments(calendar.id, [a, b])
        again = calendar_service.reconcile_instruments(calendar.id, [a, b])

        assert again.is_noop
        assert again.kept == {a, b}
        assert member_ids(calendar.id) == {a, b}

    def test_attach_steals_from_other_calendar(self, calendar_service, instruments, member_ids):
        c = instruments["C"].id
        other = calendar_service.create_calendar(POLICY, {"name": "Other"}, instrument_ids=[c])
        target = calendar_service.create_calendar(POLICY, {"name": "Target"})

        calendar_service.reconcile_instruments(target.id, [c])

        assert member_ids(other.id) == set()
        assert member_ids(target.id) == {c}

    def test_update_calendar_reconciles_in_same_transaction(self, calendar_service, instruments, member_ids):
        a, b = instruments["A"].id, instruments["B"].id
        calendar = calendar_service.create_calendar(POLICY, {"name": "Old"}, instrument_ids=[a])

        updated, result = calendar_service.update_calendar(
            calendar.id,
            {"name": "New"},
            policy=CalibrationPolicy(DailyRecurrence()),
            instrument_ids=[b],
        )

        assert updated.name == "New"
        assert updated.recurrence_type == "CALENDAR_DAILY"
        assert result.detached == {a} and result.attached == {b}
        assert member_ids(calendar.id) == {b}

    def test_update_without_members_keeps_them(self, calendar_service, instruments):
        a = instruments["A"].id
        calendar = calendar_service.create_calendar(POLICY, {"name": "Keep"}, instrument_ids=[a])

        _, result = calendar_service.update_calendar(calendar.id, {"description": "notes"})

        assert result.is_noop
        assert result.kept == {a}

    def test_unknown_calendar(self, calendar_service):
        with pytest.raises(EntityNotFoundError):
            calendar_service.reconcile_instruments(uuid.uuid4(), [])

# =====================================================
# DELETE / TOGGLE
# =====================================================

class TestDeleteCalendar:

    def test_delete_detaches_then_removes(self, test_db, calendar_service, instruments):
        ids = [instruments["A"].id, instruments["B"].id]
        calendar = calendar_service.create_calendar(POLICY, {"name": "Doomed"}, instrument_ids=ids)

        detached = calendar_service.delete_calendar(calendar.id)

        assert detached == 2
        assert test_db.get(CalibrationCalendar, calendar.id) is None
        assert all(test_db.get(Instrument, i).calibration_calendar_id is None for i in ids)

    def test_failed_delete_reports_member_count(self, test_db, calendar_service, instruments, monkeypatch):
        ids = [instruments["A"].id, instruments["B"].id, instruments["C"].id]
        calendar = calendar_service.create_calendar(POLICY, {"name": "Locked"}, instrument_ids=ids)

        def failing_delete(self, id):
            raise OperationalError("DELETE FROM calibration_calendars", {}, Exception("disk I/O error"))

        monkeypatch.setattr(CalendarRepository, "delete", failing_delete)

        with pytest.raises(BulkAssociationError) as exc_info:
            calendar_service.delete_calendar(calendar.id)

        assert exc_info.value.attempted_count == 3
        assert "3 instrument(s)" in str(exc_info.value)
        # Rollback: membri ancora associati
        assert InstrumentRepository(test_db).get_ids_by_calendar(calendar.id) == set(ids)

    def test_delete_unknown(self, calendar_service):
        with pytest.raises(EntityNotFoundError):
            calendar_service.delete_calendar(uuid.uuid4())

    def test_inactive_calendar_falls_back_to_instrument_policy(self, calendar_service, instruments, test_db):
        a = instruments["A"].id
        calendar = calendar_service.create_calendar(
            CalibrationPolicy(DailyRecurrence()), {"name": "Daily"}, instrument_ids=[a]
        )
        instrument = test_db.get(Instrument, a)
        assert instrument.effective_policy == CalibrationPolicy(DailyRecurrence())

        calendar_service.set_active(calendar.id, False)
        test_db.refresh(instrument)

        assert instrument.effective_policy == instrument.fallback_policy
        assert instrument.effective_policy.recurrence == FixedInterval(12, FrequencyUnit.MONTHS)
