"""Error envelope models returned by the API."""

from enum import Enum

from pydantic import BaseModel, Field


class ErrorCode(str, Enum):
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_INPUT = "INVALID_INPUT"
    NOT_FOUND = "NOT_FOUND"
    MISSING_COORDINATES = "MISSING_COORDINATES"
    API_ERROR = "API_ERROR"


class AppError(BaseModel):
    """Structured error with a developer message and a user-facing one."""

    code: ErrorCode
    message: str = Field(..., description="Technical error message")
    user_message: str = Field(..., description="Message safe to show to end users")


class ErrorResponse(BaseModel):
    success: bool = False
    error: AppError
