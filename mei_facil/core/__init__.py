from .errors import AccessDeniedError, FetchError, MeiFacilError, PersistError, ValidationError
from .models import DateRange, ReportFilters, SavedReportConfig, Transaction
from .reports import ReportStore
from .session import ReportSession, SessionState

__all__ = [
    "AccessDeniedError",
    "FetchError",
    "MeiFacilError",
    "PersistError",
    "ValidationError",
    "DateRange",
    "ReportFilters",
    "SavedReportConfig",
    "Transaction",
    "ReportStore",
    "ReportSession",
    "SessionState",
]
