# =====================================================
# test/services/test_unit_of_work.py
# =====================================================
"""
UnitOfWork: commit/rollback solo al livello più esterno.
"""

import pytest

from metrocal.models import CalibrationCalendar
from metrocal.services import UnitOfWork


class RollbackRequested(Exception):
    pass


class TestUnitOfWork:

    def test_commit_on_success(self, test_db):
        uow = UnitOfWork(test_db)

        with uow.transaction():
            uow.repositories.calendars.create({"name": "Committed", "days_of_week": []})

        test_db.expire_all()
        assert test_db.query(CalibrationCalendar).filter_by(name="Committed").count() == 1
        assert not uow.active
        print("✅ Transaction committed")

    def test_rollback_on_error(self, test_db):
        uow = UnitOfWork(test_db)

        with pytest.raises(RollbackRequested):
            with uow.transaction():
                uow.repositories.calendars.create({"name": "Discarded", "days_of_week": []})
                raise RollbackRequested()

        assert test_db.query(CalibrationCalendar).filter_by(name="Discarded").count() == 0
        assert not uow.active

    def test_nested_error_rolls_back_outer_work(self, test_db):
        uow = UnitOfWork(test_db)

        # Arrange + Act: l'errore nel blocco interno annulla anche il lavoro esterno
        with pytest.raises(RollbackRequested):
            with uow.transaction():
                uow.repositories.calendars.create({"name": "Outer", "days_of_week": []})
                with uow.transaction():
                    assert uow.active
                    uow.repositories.calendars.create({"name": "Inner", "days_of_week": []})
                    raise RollbackRequested()

        # Assert
        assert test_db.query(CalibrationCalendar).count() == 0
        print("✅ Nested failure rolled back the whole unit of work")

    def test_nested_success_commits_once(self, test_db):
        uow = UnitOfWork(test_db)

        with uow.transaction():
            with uow.transaction():
                uow.repositories.calendars.create({"name": "Inner", "days_of_week": []})
            # Ancora dentro la transazione esterna: rollback possibile
            assert uow.active
            test_db.rollback()

        assert test_db.query(CalibrationCalendar).count() == 0
