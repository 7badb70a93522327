# =====================================================
# metrocal/config.py - Environment configuration
# =====================================================
import logging
import os

# =====================================================
# ENVIRONMENT CONFIGURATION
# =====================================================

ENVIRONMENT = os.getenv("ENVIRONMENT", "development")
VERSION = os.getenv("VERSION", "0.3.0")
PORT = int(os.getenv("PORT", "8000"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG" if ENVIRONMENT == "development" else "INFO")

# Finestra "in scadenza" per dashboard e pianificazione (giorni)
DUE_SOON_DAYS = int(os.getenv("DUE_SOON_DAYS", "30"))

# Orizzonte di default della timeline (giorni)
TIMELINE_DAYS = int(os.getenv("TIMELINE_DAYS", "30"))

LOG_FORMAT = "%(asctime)s %(levelname)-5.5s [%(name)s] %(message)s"


def configure_logging(level: str = LOG_LEVEL) -> None:
    """Logging applicativo (stesso formato di alembic.ini)"""
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
    if os.getenv("DB_ECHO", "false").lower() != "true":
        logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
