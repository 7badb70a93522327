# =====================================================
# metrocal/models/base.py
# =====================================================
from sqlalchemy import MetaData, Uuid, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from datetime import datetime
import uuid

# Nomi deterministici: Alembic in batch mode (SQLite) ricrea le tabelle
# e deve poter ritrovare ogni constraint per nome.
# I CheckConstraint hanno già nomi espliciti (chk_*).
NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s",
    "pk": "pk_%(table_name)s",
}


class Base(DeclarativeBase):
    """Declarative base con naming convention condivisa"""
    metadata = MetaData(naming_convention=NAMING_CONVENTION)


class BaseModel(Base):
    """
    Base astratta: id UUID + timestamps.

    Uuid è portabile (nativo su PostgreSQL, CHAR(32) su SQLite),
    così lo stesso schema gira in produzione e nei test.
    """

    __abstract__ = True

    id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)

    created_at: Mapped[datetime] = mapped_column(server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(server_default=func.now(), onupdate=func.now())

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.id}>"
