from .unit_of_work import UnitOfWork
from .repository_factory import RepositoryFactory
from .calendar_service import ApplyResult, CalendarService, ReconcileResult
from .method_service import MethodService, MethodUsage
from .schedule_service import ResolvedSchedule, ScheduleService, resolve_schedule
from .dashboard_service import DashboardService, ToleranceStats
