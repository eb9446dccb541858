"""
Reservation Errors

Every failure the scheduling engine reports derives from ReservationError.
All of them are raised before (or instead of) any write, except where
noted, and reach the caller unchanged.
"""

from datetime import date


class ReservationError(Exception):
    """Base class for scheduling engine errors"""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(ReservationError):
    """Missing or malformed request data (e.g. start after end)"""


class ConfigurationError(ReservationError):
    """Recurrence rule cannot be expanded (bad interval, end before start)"""


class AuthorizationMismatch(ReservationError):
    """
    Actor or borrower may not touch this resource

    Raised when organizations differ, the resource is not loanable or not
    available, past its usable-until date, or the actor lacks the role
    required for a lifecycle transition.
    """


class SchedulingConflict(ReservationError):
    """Candidate interval overlaps an active reservation of the resource"""

    def __init__(self, message: str, conflict_date: date | None = None):
        super().__init__(message)
        self.conflict_date = conflict_date


class MissingEvidence(ReservationError):
    """Vehicle return is missing photos the organization requires"""


class LifecycleError(ReservationError):
    """Requested status transition is not allowed from the current status"""


class ReservationNotFound(ReservationError):
    """No reservation with the given id"""
