"""Domain errors raised by the service layer.

Endpoints let these propagate; ``app.main`` maps each class to an HTTP status.
"""


class DomainError(Exception):
    """Base class for errors that carry a client-facing message."""

    status_code = 400

    def __init__(self, detail: str):
        self.detail = detail
        super().__init__(detail)


class NotFound(DomainError):
    """Entity is absent or not owned by the requester."""

    status_code = 404


class PackageNotFound(NotFound):
    def __init__(self, package_id=None):
        detail = "Service package not found"
        if package_id is not None:
            detail = f"Service package {package_id} not found"
        super().__init__(detail)


class InvalidTransition(DomainError):
    """An appointment (or payment/quote) lifecycle guard was violated."""

    status_code = 400

    def __init__(self, detail: str, current_status=None, target_status=None):
        self.current_status = current_status
        self.target_status = target_status
        super().__init__(detail)


class AlreadyCompleted(InvalidTransition):
    def __init__(self, action: str = "complete"):
        if action == "complete":
            detail = "Appointment is already completed"
        else:
            detail = f"Cannot {action} completed appointment"
        super().__init__(detail, current_status="completed")


class AlreadyCancelled(InvalidTransition):
    def __init__(self, action: str = "cancel"):
        if action == "cancel":
            detail = "Booking is already cancelled"
        else:
            detail = f"Cannot {action} cancelled appointment"
        super().__init__(detail, current_status="cancelled")


class CannotCancelCompleted(InvalidTransition):
    def __init__(self):
        super().__init__("Cannot cancel completed booking", current_status="completed")


class Conflict(DomainError):
    """Duplicate payment, duplicate review, or a delete blocked by references."""

    status_code = 409


class ValidationError(DomainError):
    """Input shape or range rejected by business rules."""

    status_code = 400


class InvalidLotSize(ValidationError):
    def __init__(self, lot_size):
        self.lot_size = lot_size
        super().__init__(f"Lot size must be a positive number of square feet (got {lot_size})")


class PermissionDenied(DomainError):
    status_code = 403


class UpstreamFailure(DomainError):
    """A third-party API failed or timed out. Callers may retry."""

    status_code = 503

    def __init__(self, service: str, detail: str):
        self.service = service
        super().__init__(f"{service} is unavailable: {detail}")
