"""Error types raised by the expenses API and rendered by the app's exception handler."""
from typing import Dict, Optional

from starlette.responses import JSONResponse


class ExpenseAPIError(Exception):
    """Base class for errors that map directly onto an HTTP response."""
    status_code = 400
    body_key = "error"

    def __init__(self, message: str, headers: Optional[Dict[str, str]] = None):
        super().__init__(message)
        self.message = message
        self.headers = headers

    def to_response(self) -> JSONResponse:
        return JSONResponse(
            status_code=self.status_code,
            content={self.body_key: self.message},
            headers=self.headers,
        )


class InvalidBody(ExpenseAPIError):
    """Request body could not be read or is not valid JSON."""

    def __init__(self):
        super().__init__("Invalid JSON request body")


class MissingField(ExpenseAPIError):
    """A required field is absent or falsy."""

    def __init__(self, field: str):
        super().__init__(f"Missing required field: {field}")
        self.field = field


class InvalidAmount(ExpenseAPIError):
    """Amount is not a number or not greater than zero."""

    def __init__(self):
        super().__init__("Amount must be a positive number")


class MethodNotAllowed(ExpenseAPIError):
    status_code = 405
    body_key = "message"

    def __init__(self, method: str, allowed: str = "GET, POST"):
        super().__init__(f"Method {method} Not Allowed", headers={"Allow": allowed})
        self.method = method


class PayloadTooLarge(ExpenseAPIError):
    status_code = 413

    def __init__(self, limit: int):
        super().__init__(f"Request body exceeds {limit} bytes")
        self.limit = limit
