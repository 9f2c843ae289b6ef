# =============================================================================
# app/routers/tasks.py - Task Status Endpoints
# =============================================================================
# Status, result and cancellation for imports and syncs queued by other
# routers. Admin only: results can contain member emails.
# =============================================================================

import logging
from typing import Annotated

from fastapi import APIRouter, Path, HTTPException
from pydantic import BaseModel

from app.dependencies import AdminUser

logger = logging.getLogger(__name__)

router = APIRouter()

TaskId = Annotated[str, Path(description="Celery task ID")]

FINISHED_STATES = ("SUCCESS", "FAILURE", "REVOKED")


class TaskStatusResponse(BaseModel):
    task_id: str
    status: str
    progress: int | None = None
    message: str | None = None
    result: dict | None = None
    error: str | None = None


def _async_result(task_id: str):
    from workers.celery_app import celery_app

    return celery_app.AsyncResult(task_id)


@router.get("/{task_id}", response_model=TaskStatusResponse)
async def get_task_status(task_id: TaskId, admin: AdminUser):
    """
    Current state of a background task.

    - PENDING: waiting in queue (also reported for unknown IDs)
    - STARTED: picked up by a worker
    - PROGRESS: running; `progress` is a percentage
    - SUCCESS: finished; `result` holds the summary
    - FAILURE: `error` holds the message
    """
    try:
        result = _async_result(task_id)
        response = TaskStatusResponse(task_id=task_id, status=result.status)

        if result.status == "PROGRESS":
            info = result.info or {}
            response.progress = info.get("percent", 0)
            response.message = info.get("message", "Processing...")

        elif result.status == "SUCCESS":
            response.result = result.result
            response.progress = 100
            response.message = "Complete"

        elif result.status == "FAILURE":
            response.error = str(result.result) if result.result else "Unknown error"
            response.message = "Failed"

        elif result.status == "PENDING":
            response.progress = 0
            response.message = "Waiting in queue..."

        elif result.status == "STARTED":
            response.progress = 0
            response.message = "Starting..."

        return response

    except Exception as e:
        logger.error(f"Error getting task status: {e}")
        raise HTTPException(status_code=500, detail=f"Failed to get task status: {e}")


@router.delete("/{task_id}")
async def cancel_task(task_id: TaskId, admin: AdminUser):
    """
    Cancel a queued or running task.

    Rows already written by an import stay written.
    """
    try:
        result = _async_result(task_id)

        if result.status in FINISHED_STATES:
            return {
                "task_id": task_id,
                "message": f"Task already {result.status.lower()}, cannot cancel",
                "cancelled": False,
            }

        result.revoke(terminate=True)
        logger.info(f"Admin {admin.id} cancelled task {task_id}")
        return {"task_id": task_id, "message": "Task cancelled", "cancelled": True}

    except Exception as e:
        logger.error(f"Error cancelling task: {e}")
        raise HTTPException(status_code=500, detail=f"Failed to cancel task: {e}")
