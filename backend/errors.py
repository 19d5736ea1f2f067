"""Error types raised by the fluency services.

Each carries the HTTP status it maps to; ``main`` renders them as
``{"error": message}``.
"""


class FluencyError(Exception):
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.default_message)

    @property
    def message(self) -> str:
        return str(self)


class Unauthorized(FluencyError):
    status_code = 401
    default_message = "Unauthorized"


class Forbidden(FluencyError):
    status_code = 403
    default_message = "Admin access required"


class NotFound(FluencyError, LookupError):
    status_code = 404
    default_message = "Not found"


class InvalidLevel(FluencyError, ValueError):
    status_code = 400
    default_message = "Invalid fluency level"


class InvalidTransition(FluencyError, ValueError):
    status_code = 400
    default_message = "Invalid level transition. Can only move one level at a time"


class ServiceUnavailable(FluencyError):
    status_code = 503
    default_message = "Service is not configured"


class BadRequest(FluencyError, ValueError):
    status_code = 400
    default_message = "Bad request"


class DataIntegrityError(FluencyError):
    status_code = 500
    default_message = "Stored data is corrupt"
