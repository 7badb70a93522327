from fastapi import APIRouter

from .calendars import calendars_router
from .dashboard import dashboard_router
from .errors import register_exception_handlers
from .interventions import interventions_router
from .methods import methods_router

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(calendars_router)
api_router.include_router(methods_router)
api_router.include_router(interventions_router)
api_router.include_router(dashboard_router)

__all__ = ["api_router", "register_exception_handlers"]
