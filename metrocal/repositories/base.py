# =====================================================
# metrocal/repositories/base.py - Generic CRUD Repository
# =====================================================
from typing import Generic, TypeVar, Type, List, Optional, Dict, Any, Iterable, Set
from sqlalchemy import select
from sqlalchemy.orm import Session
import uuid

from metrocal.database.exceptions import EntityNotFoundError, handle_database_errors
from metrocal.models.base import BaseModel

ModelType = TypeVar("ModelType", bound=BaseModel)

class BaseRepository(Generic[ModelType]):
    """
    CRUD generico su un model.

    I repository fanno solo flush(): commit e rollback
    appartengono a UnitOfWork.transaction().
    """

    # Usato nei messaggi di errore ("Calibration calendar <id> not found")
    entity_name = "Record"

    def __init__(self, model: Type[ModelType], db: Session):
        self.model = model
        self.db = db

    # ==========================================
    # READ
    # ==========================================

    def get_by_id(self, id: uuid.UUID) -> Optional[ModelType]:
        return self.db.get(self.model, id)

    def require(self, id: uuid.UUID) -> ModelType:
        """Come get_by_id, ma EntityNotFoundError se assente"""
        obj = self.get_by_id(id)
        if obj is None:
            raise EntityNotFoundError(f"{self.entity_name} {id} not found")
        return obj

    def get_by_ids(self, ids: Iterable[uuid.UUID]) -> List[ModelType]:
        ids = list(ids)
        if not ids:
            return []
        return self.db.query(self.model).filter(self.model.id.in_(ids)).all()

    def existing_ids(self, ids: Iterable[uuid.UUID]) -> Set[uuid.UUID]:
        """Sottoinsieme di ids presente nel database"""
        ids = set(ids)
        if not ids:
            return set()
        return set(self.db.scalars(select(self.model.id).where(self.model.id.in_(ids))))

    def count(self) -> int:
        return self.db.query(self.model).count()

    # ==========================================
    # WRITE (flush only)
    # ==========================================

    @handle_database_errors()
    def create(self, obj_data: Dict[str, Any]) -> ModelType:
        db_obj = self.model(**obj_data)
        self.db.add(db_obj)
        self.db.flush()
        self.db.refresh(db_obj)
        return db_obj

    @handle_database_errors()
    def update(self, id: uuid.UUID, update_data: Dict[str, Any]) -> Optional[ModelType]:
        """Aggiorna solo gli attributi che il model possiede"""
        db_obj = self.get_by_id(id)
        if db_obj is None:
            return None

        for field, value in update_data.items():
            if hasattr(db_obj, field):
                setattr(db_obj, field, value)

        self.db.flush()
        self.db.refresh(db_obj)
        return db_obj

    @handle_database_errors()
    def delete(self, id: uuid.UUID) -> bool:
        db_obj = self.get_by_id(id)
        if db_obj is None:
            return False

        self.db.delete(db_obj)
        self.db.flush()
        return True
