from enum import Enum

from pydantic import BaseModel
from typing import Literal


class ApiErrorType(str, Enum):
    """Error kinds reported by the Anthropic API"""

    INVALID_REQUEST = "invalid_request_error"
    AUTHENTICATION = "authentication_error"
    PERMISSION = "permission_error"
    NOT_FOUND = "not_found_error"
    REQUEST_TOO_LARGE = "request_too_large"
    RATE_LIMIT = "rate_limit_error"
    UNEXPECTED = "api_error"
    OVERLOADED = "overloaded_error"

    def __str__(self) -> str:
        return self.value


class ApiErrorDetail(BaseModel):
    type: ApiErrorType
    message: str


class ApiErrorResponse(BaseModel):
    """Error envelope: {"type": "error", "error": {"type": ..., "message": ...}}"""

    type: Literal["error"] = "error"
    error: ApiErrorDetail
