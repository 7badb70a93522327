# metrocal/database/exceptions.py
"""
Custom exceptions per database operations.

Il service layer e l'API lavorano solo con questa gerarchia:
gli errori SQLAlchemy vengono tradotti ai confini dei repository
(vedi handle_database_errors) e mappati su status HTTP in api/errors.py.
"""
from functools import wraps
from typing import Optional

from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError


class DatabaseError(Exception):
    """Base di tutti gli errori di persistenza"""
    pass


class EntityNotFoundError(DatabaseError):
    """
    Entity inesistente.

    Examples:
        - calendario o metodo inesistente
        - strumenti mancanti in un'operazione bulk
    """
    pass


class DuplicateEntityError(DatabaseError):
    """Violazione di unique constraint (es. serial number)"""
    pass


class ValidationError(DatabaseError):
    """
    Dati o operazione non validi.

    Examples:
        - Check constraints violati
        - Eliminazione di un metodo ancora usato da calendari
        - Prossima scadenza esplicita non successiva al completamento
    """
    pass


class ConcurrencyError(DatabaseError):
    """Conflitto di lock / deadlock"""
    pass


class BulkAssociationError(DatabaseError):
    """
    Fallimento di un'operazione bulk calendario <-> strumenti.

    Riportato come UN solo errore per tutto il batch, mai come
    risultati parziali per strumento. Nessun retry automatico:
    decide il chiamante.
    """

    def __init__(self, operation: str, attempted_count: int, reason: Optional[str] = None):
        self.operation = operation
        self.attempted_count = attempted_count
        self.reason = reason
        message = f"{operation} failed for {attempted_count} instrument(s)"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


# ==========================================
# TRANSLATION
# ==========================================

_UNIQUE_KEYWORDS = ("unique", "duplicate", "already exists")
_FOREIGN_KEY_KEYWORDS = ("foreign key", "referenced", "is still referenced")
_CHECK_KEYWORDS = ("check", "constraint", "violates")


def _integrity_error(error: IntegrityError, operation: str, entity_name: str) -> DatabaseError:
    message = str(getattr(error, "orig", error)).lower()
    entity = entity_name.lower()

    if any(keyword in message for keyword in _UNIQUE_KEYWORDS):
        if "serial_number" in message:
            return DuplicateEntityError(f"{entity_name} with this serial number already exists")
        return DuplicateEntityError(f"Duplicate {entity} found")

    # Prima dei check: SQLite riporta "FOREIGN KEY constraint failed"
    if any(keyword in message for keyword in _FOREIGN_KEY_KEYWORDS):
        if operation == "delete":
            return ValidationError(f"{entity_name} is still referenced and cannot be deleted")
        return ValidationError(f"Referenced record for {entity} does not exist")

    if any(keyword in message for keyword in _CHECK_KEYWORDS):
        return ValidationError(f"Data validation failed for {entity}: {message}")

    return DatabaseError(f"Database integrity error for {entity}: {message}")


def translate_error(error: Exception, operation: str = "operation", entity_name: str = "Entity") -> DatabaseError:
    """
    Eccezione della gerarchia corrispondente a un errore SQLAlchemy.

    Restituisce l'eccezione invece di sollevarla: il chiamante fa
    `raise translate_error(e, ...) from e` e conserva la causa originale.
    """
    if isinstance(error, DatabaseError):
        return error
    if isinstance(error, IntegrityError):
        return _integrity_error(error, operation, entity_name)
    if isinstance(error, OperationalError) and "lock" in str(error).lower():
        return ConcurrencyError(f"Lock conflict during {operation} {entity_name.lower()}: {error}")
    if isinstance(error, SQLAlchemyError):
        return DatabaseError(f"Database error during {operation} {entity_name.lower()}: {error}")
    return DatabaseError(f"Unexpected error during {operation} {entity_name.lower()}: {error}")


# ==========================================
# DECORATORS
# ==========================================

def handle_database_errors(entity_name: Optional[str] = None):
    """
    Traduce gli errori SQLAlchemy sollevati da un metodo di repository.

    Senza entity_name viene usato `entity_name` del repository (self).

    Usage:
        @handle_database_errors()
        def create(self, data):
            ...
    """
    def decorator(func):
        operation = func.__name__.strip("_").replace("_", " ")

        @wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except SQLAlchemyError as e:
                owner = args[0] if args else None
                entity = entity_name or getattr(owner, "entity_name", "Entity")
                raise translate_error(e, operation, entity) from e

        return wrapper
    return decorator
