from __future__ import annotations


class CareerCoachError(RuntimeError):
    status_code = 500

    def __init__(self, message: str, *, status_code: int | None = None):
        super().__init__(message)
        if status_code is not None:
            self.status_code = status_code


class ValidationError(CareerCoachError):
    status_code = 400


class NotFoundError(CareerCoachError):
    status_code = 404


class DependencyUnavailable(CareerCoachError):
    """The store or another upstream could not be reached in time."""

    status_code = 503


class MalformedUpstreamResponse(CareerCoachError):
    """AI output that did not match the expected analysis shape."""

    status_code = 502

    def __init__(self, message: str, *, raw: str = ""):
        super().__init__(message)
        self.raw = raw
