# =============================================================================
# core/models/imports.py - Member Import Schemas
# =============================================================================
# Results of importing WordPress members and repairing profile tags from a
# student contact export. Both run as background tasks; these are the
# payloads stored as the task result.
# =============================================================================

from enum import Enum

from pydantic import BaseModel, Field


class ImportMode(str, Enum):
    """
    - preview: Report what would happen, write nothing
    - import: Create the accounts
    """
    PREVIEW = "preview"
    IMPORT = "import"


class ImportRowStatus(str, Enum):
    WILL_CREATE = "will_create"
    EXISTS = "exists"
    EXISTS_IN_AUTH = "exists_in_auth"
    CREATED = "created"


class ImportRow(BaseModel):
    email: str
    name: str | None = None
    status: ImportRowStatus


class ImportRowError(BaseModel):
    email: str
    error: str


class WordPressImportResult(BaseModel):
    """
    Example:
        {
            "total": 120,
            "created": 100,
            "skipped": 18,
            "errors": [{"email": "x@y.z", "error": "..."}],
            "preview": [...],
            "message": "Created 100 users, skipped 18 existing users, 2 errors"
        }
    """

    total: int = Field(ge=0)
    created: int = Field(default=0, ge=0)
    skipped: int = Field(default=0, ge=0)
    errors: list[ImportRowError] = Field(default_factory=list)
    preview: list[ImportRow] = Field(default_factory=list)
    message: str


class TagRepairSummary(BaseModel):
    """Totals across every batch sent to the tag repair procedure."""

    total_students_processed: int = Field(default=0, ge=0)
    matched_profiles: int = Field(default=0, ge=0)
    updated_profiles: int = Field(default=0, ge=0)
    user_tags_created: int = Field(default=0, ge=0)
    unmatched_count: int = Field(default=0, ge=0)
    sample_unmatched_emails: list[str] = Field(default_factory=list)


class TagRepairResult(BaseModel):
    success: bool = True
    summary: TagRepairSummary
    message: str


class ImportTaskSubmitted(BaseModel):
    task_id: str
    status: str = "PENDING"
    rows: int = Field(ge=0)
