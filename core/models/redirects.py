# =============================================================================
# core/models/redirects.py - URL Redirect Schemas
# =============================================================================
# Admin-managed redirects stored in the redirections table.
# =============================================================================

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

ALLOWED_STATUS_CODES = (301, 302, 307, 308)


def _check_source(value: str) -> str:
    value = value.strip()
    if not value.startswith("/"):
        raise ValueError("Source URL must start with /")
    return value


def _check_target(value: str) -> str:
    value = value.strip()
    if not value.startswith(("/", "http://", "https://")):
        raise ValueError("Target URL must start with /, http:// or https://")
    return value


def _check_status(value: int) -> int:
    if value not in ALLOWED_STATUS_CODES:
        raise ValueError(f"Status code must be one of {', '.join(map(str, ALLOWED_STATUS_CODES))}")
    return value


class RedirectionCreate(BaseModel):
    """
    Schema for a new redirect.

    Example:
        {
            "source_url": "/old-course",
            "target_url": "/course/new-course",
            "status_code": 301,
            "is_active": true
        }
    """

    source_url: str = Field(..., min_length=1, max_length=500)
    target_url: str = Field(..., min_length=1, max_length=500)
    status_code: int = Field(default=301)
    is_active: bool = Field(default=True)

    @field_validator("source_url")
    @classmethod
    def validate_source(cls, value: str) -> str:
        return _check_source(value)

    @field_validator("target_url")
    @classmethod
    def validate_target(cls, value: str) -> str:
        return _check_target(value)

    @field_validator("status_code")
    @classmethod
    def validate_status(cls, value: int) -> int:
        return _check_status(value)


class RedirectionUpdate(BaseModel):
    """Partial update; omitted fields are left alone."""

    source_url: str | None = Field(default=None, min_length=1, max_length=500)
    target_url: str | None = Field(default=None, min_length=1, max_length=500)
    status_code: int | None = None
    is_active: bool | None = None

    @field_validator("source_url")
    @classmethod
    def validate_source(cls, value: str | None) -> str | None:
        return None if value is None else _check_source(value)

    @field_validator("target_url")
    @classmethod
    def validate_target(cls, value: str | None) -> str | None:
        return None if value is None else _check_target(value)

    @field_validator("status_code")
    @classmethod
    def validate_status(cls, value: int | None) -> int | None:
        return None if value is None else _check_status(value)


class Redirection(BaseModel):
    id: UUID
    source_url: str
    target_url: str
    status_code: int
    is_active: bool
    created_at: datetime | None = None
    updated_at: datetime | None = None

    class Config:
        """Pydantic configuration for this model."""
        from_attributes = True
