"""Operation errors raised by the service layer.

Each error carries the HTTP status it maps to; ``app.main`` turns them into
``{"detail": ...}`` responses. Messages are user-facing and never include
internal identifiers.
"""

from typing import Optional


class OperationError(Exception):
    status_code: int = 500
    default_detail: str = "Internal error"

    def __init__(self, detail: Optional[str] = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class Unauthenticated(OperationError):
    status_code = 401
    default_detail = "Not authenticated"


class InvalidInput(OperationError):
    status_code = 400
    default_detail = "Invalid input"


class Forbidden(OperationError):
    status_code = 403
    default_detail = "Insufficient permissions"


class NotFound(OperationError):
    status_code = 404
    default_detail = "Not found"


class Conflict(OperationError):
    status_code = 409
    default_detail = "Resource is not in a valid state for this action"
