"""Error response schemas for consistent error handling."""

from datetime import datetime
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


class ErrorType(str, Enum):
    """Types of errors that can occur."""

    VALIDATION_ERROR = "validation_error"
    ACCESS_POLICY_ERROR = "access_policy_error"
    NOT_FOUND = "not_found"
    STORE_ERROR = "store_error"
    NETWORK_ERROR = "network_error"
    INTERNAL_ERROR = "internal_error"
    AUTHENTICATION_ERROR = "authentication_error"


class ErrorResponse(BaseModel):
    """Standardized error response model.

    ``success`` is always ``False`` so storefront clients can branch on one
    field regardless of which failure occurred.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "success": False,
                "error": "Product handle not found in favorites",
                "error_type": "not_found",
                "detail": None,
                "status_code": 404,
                "timestamp": "2025-11-03T10:30:00Z",
                "request_id": "req_abc123xyz",
                "path": "/api/remove-metafields",
                "context": {"currentFavorites": ["shoe-1", "shoe-2"]},
            }
        }
    )

    success: Literal[False] = Field(False, description="Always false for errors")
    error: str = Field(..., description="Human-readable error message")
    error_type: ErrorType = Field(..., description="Category of error")
    detail: str | None = Field(None, description="Additional error details or context")
    status_code: int = Field(..., description="HTTP status code")
    timestamp: datetime = Field(..., description="When error occurred")
    request_id: str | None = Field(None, description="Unique request identifier for tracking")
    path: str | None = Field(None, description="Request path that caused the error")
    errors: list[Any] | None = Field(
        None, description="Store-reported errors passed through verbatim"
    )
    context: dict[str, Any] = Field(
        default_factory=dict,
        description="Condition-specific diagnostics (current list, store error, ...)",
    )


class ValidationErrorDetail(BaseModel):
    """Details for validation errors."""

    field: str = Field(..., description="Field that failed validation")
    message: str = Field(..., description="Validation error message")
    value: Any = Field(None, description="Value that failed validation")


class ValidationErrorResponse(ErrorResponse):
    """Extended error response for request validation errors."""

    error_type: ErrorType = Field(default=ErrorType.VALIDATION_ERROR)
    errors: list[ValidationErrorDetail] = Field(
        default_factory=list, description="List of validation errors"
    )
