"""Common schemas and utilities."""

from pydantic import BaseModel, ConfigDict


class BaseSchema(BaseModel):
    """Base schema with common configuration."""

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
    )


class ErrorDetail(BaseModel):
    """Error detail for upstream or validation errors."""

    field: str
    message: str


class ErrorResponse(BaseModel):
    """Standard error response."""

    code: str
    message: str
    details: list[ErrorDetail] | None = None
