from .policy import CalibrationPolicyIn, CalibrationPolicyOut
from .instrument import InstrumentSchedule
from .calendar import (
    CalendarCreate,
    CalendarDeleteResponse,
    CalendarDetail,
    CalendarList,
    CalendarResponse,
    CalendarSummary,
    CalendarToggle,
    CalendarUpdate,
    ReconcileResponse,
)
from .method import (
    ApplyResponse,
    MethodApplyRequest,
    MethodCreate,
    MethodRemoveRequest,
    MethodResponse,
    MethodUpdate,
    MethodUsageItem,
    RemoveResponse,
)
from .intervention import InterventionCompletion, InterventionPlan, InterventionRecord, InterventionResponse
from .dashboard import PlanningResponse, ScheduleEntryOut, TimelineResponse, ToleranceStatsResponse
