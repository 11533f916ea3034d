from .errorlog.models import ErrorLog
from .jobs.models import JobInfo

__all__ = [
    "ErrorLog",
    "JobInfo",
]
