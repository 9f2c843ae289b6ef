# =============================================================================
# app/routers/imports.py - CSV Import Endpoints
# =============================================================================
# Files are parsed here so a bad upload fails fast with a 400; the rows
# themselves are processed by a Celery worker. Poll /api/v1/tasks/{task_id}
# for progress and the final summary.
# =============================================================================

import logging
from typing import Annotated

from fastapi import APIRouter, File, HTTPException, Query, UploadFile, status

from app.config import settings
from app.dependencies import AdminUser
from app.exceptions import FileTooLargeError, ImportFileError
from core.models.imports import ImportMode, ImportTaskSubmitted
from lib.csv_import import CSVImportError, parse_contacts_csv, parse_wordpress_users_csv

logger = logging.getLogger(__name__)

router = APIRouter()

ALLOWED_EXTENSIONS = (".csv",)


async def _read_upload(file: UploadFile) -> bytes:
    """Read an uploaded CSV, enforcing extension and size limits."""
    filename = file.filename or "upload.csv"
    if not filename.lower().endswith(ALLOWED_EXTENSIONS):
        raise ImportFileError(filename, "Only .csv files are accepted")

    content = await file.read()
    if len(content) > settings.max_upload_size_bytes:
        raise FileTooLargeError(len(content) / (1024 * 1024), settings.MAX_UPLOAD_SIZE_MB)
    if not content.strip():
        raise ImportFileError(filename, "File is empty")
    return content


def _submit(task, *args) -> str:
    try:
        return task.delay(*args).id
    except Exception as e:
        logger.error(f"Error submitting {task.name}: {e}")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"Failed to submit task. Is Redis running? Error: {e}",
        )


@router.post("/wordpress-users", response_model=ImportTaskSubmitted, status_code=status.HTTP_202_ACCEPTED)
async def import_wordpress_users(
    file: Annotated[UploadFile, File(description="WordPress users export (CSV)")],
    admin: AdminUser,
    mode: Annotated[ImportMode, Query(description="preview reports only; import creates accounts")] = ImportMode.PREVIEW,
):
    """
    Import members from a WordPress users export.

    The file needs an email column (`user_email` or `email`). Display name
    and password hash columns are optional.
    """
    from workers.tasks import import_wordpress_users as import_task

    content = await _read_upload(file)
    try:
        users = parse_wordpress_users_csv(content)
    except CSVImportError as e:
        raise ImportFileError(file.filename or "upload.csv", str(e))

    logger.info(f"Admin {admin.id} submitted WordPress import: {len(users)} rows, mode={mode.value}")
    task_id = _submit(import_task, users, mode.value)
    return ImportTaskSubmitted(task_id=task_id, rows=len(users))


@router.post("/tag-repair", response_model=ImportTaskSubmitted, status_code=status.HTTP_202_ACCEPTED)
async def repair_tags(
    file: Annotated[UploadFile, File(description="Student contacts export (CSV)")],
    admin: AdminUser,
):
    """
    Re-derive profile tags from a contacts export.

    Columns are positional: email in the third column, tags in the fifth.
    """
    from workers.tasks import repair_tags_from_csv

    content = await _read_upload(file)
    try:
        contacts = parse_contacts_csv(content)
    except CSVImportError as e:
        raise ImportFileError(file.filename or "upload.csv", str(e))

    logger.info(f"Admin {admin.id} submitted tag repair: {len(contacts)} contacts")
    task_id = _submit(repair_tags_from_csv, [contact.to_dict() for contact in contacts])
    return ImportTaskSubmitted(task_id=task_id, rows=len(contacts))
