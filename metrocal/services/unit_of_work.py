# =====================================================
# metrocal/services/unit_of_work.py - Transaction Management
# =====================================================
from contextlib import contextmanager
import logging

from sqlalchemy.orm import Session

from .repository_factory import RepositoryFactory

logger = logging.getLogger(__name__)


class UnitOfWork:
    """
    Confine transazionale delle operazioni di servizio.

    I repository fanno solo flush(): qui si decide commit o rollback.
    transaction() è rientrante, un blocco annidato partecipa alla
    transazione esterna e solo il livello più esterno fa commit/rollback.
    Così un service può comporre operazioni di un altro service
    (es. MethodService -> CalendarService.apply_policy) in un'unica
    transazione.
    """

    def __init__(self, db: Session):
        self.db = db
        self.repositories = RepositoryFactory(db)
        self._depth = 0

    @property
    def active(self) -> bool:
        """True dentro un blocco transaction()"""
        return self._depth > 0

    @contextmanager
    def transaction(self):
        outermost = self._depth == 0
        self._depth += 1
        try:
            yield self
            if outermost:
                self.db.commit()
        except Exception:
            if outermost:
                self.db.rollback()
                logger.debug("Transaction rolled back")
            raise
        finally:
            self._depth -= 1
