"""
src/Core/errors.py
=================================
Core Error Kinds
=================================

Every failure raised by the service layer is a CoreError carrying a stable
``kind`` string. main.py maps each kind to an HTTP status and a JSON body:

    {"success": false, "error": "<kind>", "message": "<text>"}

Kinds:
    - NotFound           → 404  unknown device identifier
    - Conflict           → 409  duplicate registration
    - InvalidArgument    → 400  bad enum value or missing required field
    - PersistenceFailure → 503  store unavailable or write failed (no retry)
"""


class CoreError(Exception):
    """Base class for all service-layer failures."""

    kind = "CoreError"
    http_status = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"success": False, "error": self.kind, "message": self.message}


class NotFound(CoreError):
    kind = "NotFound"
    http_status = 404


class Conflict(CoreError):
    kind = "Conflict"
    http_status = 409


class InvalidArgument(CoreError):
    kind = "InvalidArgument"
    http_status = 400


class PersistenceFailure(CoreError):
    kind = "PersistenceFailure"
    http_status = 503
