# main.py - Metrocal API
from datetime import datetime, timezone

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from metrocal.api import api_router, register_exception_handlers
from metrocal.config import ENVIRONMENT, PORT, VERSION, configure_logging
from metrocal.database.connection import check_database_connection

FEATURES = [
    "recurrence-engine",
    "tolerance-status",
    "calendar-association",
    "planning",
]


def service_info() -> dict:
    """Campi comuni a /health e /api/v1/status"""
    return {
        "version": VERSION,
        "environment": ENVIRONMENT,
        "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
    }


def create_app() -> FastAPI:
    configure_logging()

    application = FastAPI(
        title="Metrocal API",
        description="Calibration recurrence and tolerance-status engine for metrology instruments",
        version=VERSION,
    )

    # In produzione restringere allow_origins
    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(application)
    application.include_router(api_router)

    # Liveness per il Docker health check: non tocca il database
    @application.get("/health")
    async def health_check():
        return {"status": "healthy", **service_info()}

    @application.get("/api/v1/status")
    def api_status():
        database_ok = check_database_connection()
        return {
            "api": "metrocal",
            "status": "operational" if database_ok else "degraded",
            "database": "connected" if database_ok else "unreachable",
            **service_info(),
            "features": FEATURES,
        }

    return application


app = create_app()


if __name__ == "__main__":
    uvicorn.run(
        "metrocal.main:app",
        host="0.0.0.0",
        port=PORT,
        reload=ENVIRONMENT == "development",
    )
