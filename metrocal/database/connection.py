# =====================================================
# metrocal/database/connection.py
# =====================================================
from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from functools import lru_cache
from typing import Generator
import logging
import os

logger = logging.getLogger(__name__)


# Database URL construction
def get_database_url() -> str:
    """Costruisce URL database da environment variables"""
    url = os.getenv("DATABASE_URL")
    if url:
        return url

    DB_USER = os.getenv("DB_USER", "postgres")
    DB_PASSWORD = os.getenv("DB_PASSWORD", "password")
    DB_HOST = os.getenv("DB_HOST", "localhost")
    DB_PORT = os.getenv("DB_PORT", "5432")
    DB_NAME = os.getenv("DB_NAME", "metrocal")

    return f"postgresql+psycopg2://{DB_USER}:{DB_PASSWORD}@{DB_HOST}:{DB_PORT}/{DB_NAME}"


@lru_cache(maxsize=1)
def get_engine() -> Engine:
    """
    Engine creato al primo utilizzo.

    Importare il package non apre connessioni: test e tool
    possono sostituire la sessione senza un database reale.
    """
    url = get_database_url()
    options = {
        "pool_pre_ping": True,
        "echo": os.getenv("DB_ECHO", "false").lower() == "true",  # SQL logging for debug
    }
    if not url.startswith("sqlite"):
        options.update(
            pool_size=10,
            max_overflow=20,
            pool_recycle=3600,  # Recycle connections after 1 hour
        )
    return create_engine(url, **options)


@lru_cache(maxsize=1)
def get_session_factory() -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=get_engine())


# Dependency for FastAPI
def get_db() -> Generator[Session, None, None]:
    """Database dependency for FastAPI"""
    db = get_session_factory()()
    try:
        yield db
    finally:
        db.close()


def check_database_connection() -> bool:
    """SELECT 1 sul database configurato (usato da /api/v1/status)"""
    try:
        with get_engine().connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except SQLAlchemyError as e:
        logger.error("Database connection failed: %s", e)
        return False
