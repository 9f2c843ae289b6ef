# =============================================================================
# core/models/crm.py - Tags, Usernames, Email and Exchange Rate Schemas
# =============================================================================
# Smaller request/response models for the CRM and account endpoints:
# - TagAssignment: Tag a user or an email address
# - UsernameCheck: Availability answer for the profile editor
# - DirectEmail: One-off email from the admin dashboard
# - ExchangeRateSync: Monthly currency rates
# =============================================================================

from pydantic import BaseModel, ConfigDict, Field, model_validator


# =============================================================================
# Tags
# =============================================================================

class TagAssignment(BaseModel):
    """
    Assign a tag by ID or name to a user ID or an email address.

    Example:
        {"email": "fan@example.com", "tagName": "Newsletter", "source": "form"}
    """

    model_config = ConfigDict(populate_by_name=True)

    user_id: str | None = Field(default=None, alias="userId")
    email: str | None = None
    tag_id: str | None = Field(default=None, alias="tagId")
    tag_name: str | None = Field(default=None, alias="tagName")
    source: str = Field(default="manual", max_length=50)
    source_id: str | None = Field(default=None, alias="sourceId")

    @model_validator(mode="after")
    def require_tag_and_target(self) -> "TagAssignment":
        if not self.tag_id and not self.tag_name:
            raise ValueError("Either tagId or tagName is required")
        if not self.user_id and not self.email:
            raise ValueError("Either userId or email is required")
        return self


class TagAssignmentResult(BaseModel):
    success: bool = True
    tag_id: str
    sequences_enrolled: int = Field(default=0, ge=0)


class TagCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: str | None = None
    color: str = Field(default="#6366F1", pattern=r"^#[0-9A-Fa-f]{6}$")


# =============================================================================
# Usernames
# =============================================================================

class UsernameCheckRequest(BaseModel):
    username: str = Field(..., min_length=1)


class UsernameCheck(BaseModel):
    """
    Example:
        {"available": false, "error": "This username is reserved"}
    """

    available: bool
    error: str | None = None
    message: str | None = None


# =============================================================================
# Email
# =============================================================================

class DirectEmail(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    to: str = Field(..., min_length=3)
    subject: str = Field(..., min_length=1, max_length=998)
    html_body: str = Field(..., min_length=1, alias="htmlBody")
    sender: str | None = Field(default=None, alias="from")


class DirectEmailResult(BaseModel):
    success: bool = True
    message_id: str = Field(serialization_alias="messageId")


# =============================================================================
# Exchange Rates
# =============================================================================

class ExchangeRateSyncRequest(BaseModel):
    month: str | None = Field(
        default=None,
        pattern=r"^\d{4}-\d{2}(-\d{2})?$",
        description="Month to store rates for (YYYY-MM or YYYY-MM-DD); defaults to now"
    )


class ExchangeRate(BaseModel):
    from_currency: str = Field(serialization_alias="from")
    to_currency: str = Field(serialization_alias="to")
    rate: float = Field(gt=0)


class ExchangeRateSyncResult(BaseModel):
    success: bool = True
    month: str
    rates: list[ExchangeRate] = Field(default_factory=list)
