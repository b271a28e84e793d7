# agenda/core/exceptions.py
"""
Error taxonomy shared by the scheduling core.

Every public service operation either returns a value or raises one of these.
The HTTP layer maps them to status codes; nothing below it catches them.
"""
from typing import Any, Dict, List, Optional


class AgendaError(Exception):
    """Base class for all scheduling errors"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        return {"error": type(self).__name__, "message": self.message, "details": self.details}


class ValidationError(AgendaError):
    """Malformed input: bad interval, non-positive duration, unknown reference"""


class NotFoundError(AgendaError):
    """Referenced document does not exist"""


class ConflictError(AgendaError):
    """Requested slot is no longer available"""


class StoreUnavailable(AgendaError):
    """Document store I/O failure"""


class PartialFailure(AgendaError):
    """Some dates of a bulk write failed"""

    def __init__(
            self,
            message: str,
            failed_dates: List[str],
            succeeded_dates: Optional[List[str]] = None
    ):
        super().__init__(message, {
            "failed_dates": failed_dates,
            "succeeded_dates": succeeded_dates or [],
        })
        self.failed_dates = failed_dates
        self.succeeded_dates = succeeded_dates or []
