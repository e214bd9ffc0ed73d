class LeaveError(Exception):
    """Base class for every error the leave workflow raises on purpose."""

    status_code = 400
    error = "Leave error"

    def __init__(self, detail: str = ""):
        super().__init__(detail or self.error)
        self.detail = detail or self.error

    def to_dict(self) -> dict:
        return {"error": self.error, "detail": self.detail}


class ValidationError(LeaveError):
    status_code = 400
    error = "Invalid input"


class Forbidden(LeaveError):
    status_code = 403
    error = "Forbidden"


class NotFound(LeaveError):
    status_code = 404
    error = "Not found"


class InvalidTransition(LeaveError):
    status_code = 409
    error = "Invalid transition"


class StaleTransition(LeaveError):
    # the request changed between read and write, caller may re-fetch and retry
    status_code = 409
    error = "Stale transition"


class InsufficientBalance(LeaveError):
    status_code = 422
    error = "Insufficient balance"

    def __init__(self, requested: int, available: int):
        super().__init__(f"requested {requested} day(s), only {available} available")
        self.requested = requested
        self.available = available

    def to_dict(self) -> dict:
        data = super().to_dict()
        data.update(requested=self.requested, available=self.available)
        return data
