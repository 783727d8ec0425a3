"""Validation failures collected by endpoints."""

from pydantic import BaseModel, ConfigDict, Field

from src.api.constants import GENERAL_ERRORS_PROPERTY


class ValidationFailure(BaseModel):
    """A single validation failure recorded against a request property.

    Endpoints collect these with ``add_error()``; they are passed to response
    interceptors and returned in the 400 error document.
    """

    model_config = ConfigDict(frozen=True)

    property_name: str = Field(
        default=GENERAL_ERRORS_PROPERTY,
        description="Request property the failure applies to",
        examples=["email", GENERAL_ERRORS_PROPERTY],
    )
    error_message: str = Field(
        ...,
        description="Human-readable failure message",
        examples=["Email is required"],
    )
    error_code: str | None = Field(
        default=None,
        description="Optional machine-readable failure code",
    )
