"""Error taxonomy shared by the stores, the scheduling engine and the routers.

Every caller-visible failure is a ``SchedulingError`` with a stable
``reason`` code; routers translate them into HTTP responses.
"""


class SchedulingError(ValueError):
    """Base class for user-visible scheduling errors."""

    reason = "scheduling_error"


class SchedulingValidationError(SchedulingError):
    reason = "validation_error"


class NotFoundError(SchedulingError):
    reason = "not_found"


class PermissionDeniedError(SchedulingError):
    reason = "permission_denied"


class ServiceUnavailableError(SchedulingError):
    reason = "service_unavailable"


class ClosedOnDateError(SchedulingError):
    reason = "closed_on_date"


class InThePastError(SchedulingError):
    reason = "in_the_past"


class ConflictError(SchedulingError):
    reason = "conflict"


class SlotConflictError(ConflictError):
    reason = "slot_conflict"


class SlotConstraintViolation(Exception):
    """Raised by a store when an insert would overlap a non-cancelled appointment."""
