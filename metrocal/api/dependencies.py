# =====================================================
# metrocal/api/dependencies.py - Service dependencies
# =====================================================
from fastapi import Depends
from sqlalchemy.orm import Session
import logging

from metrocal.database.connection import get_db
from metrocal.services import CalendarService, DashboardService, MethodService, ScheduleService

logger = logging.getLogger("metrocal.api")


def get_calendar_service(db: Session = Depends(get_db)) -> CalendarService:
    return CalendarService(db, logger=logger)


def get_method_service(db: Session = Depends(get_db)) -> MethodService:
    return MethodService(db, logger=logger)


def get_schedule_service(db: Session = Depends(get_db)) -> ScheduleService:
    return ScheduleService(db, logger=logger)


def get_dashboard_service(db: Session = Depends(get_db)) -> DashboardService:
    return DashboardService(db, logger=logger)
