# =============================================================================
# workers/tasks.py - Celery Task Definitions
# =============================================================================
# Background tasks:
# - import_wordpress_users: Preview or create accounts from a WordPress export
# - repair_tags_from_csv: Batched profile tag repair from a contacts export
# - sync_podcast_rss: Import new episodes for one podcast
# - sync_exchange_rates: Store this month's currency rates
#
# Task arguments are JSON: CSVs are parsed by the API before submission.
# =============================================================================

import logging
from typing import Any
from celery import shared_task, current_task

logger = logging.getLogger(__name__)


# =============================================================================
# Task State Updates
# =============================================================================

def update_progress(current: int, total: int, message: str = "Processing..."):
    """
    Publish progress for GET /api/v1/tasks/{task_id}.

    Args:
        current: Current step number
        total: Total steps
        message: Status message
    """
    if current_task and total > 0:
        current_task.update_state(
            state="PROGRESS",
            meta={
                "current": current,
                "total": total,
                "percent": int((current / total) * 100),
                "message": message,
            }
        )


# =============================================================================
# Imports
# =============================================================================

@shared_task(bind=True, name="workers.tasks.import_wordpress_users")
def import_wordpress_users(self, users: list[dict[str, Any]], mode: str = "preview") -> dict[str, Any]:
    """
    Preview or run a WordPress member import.

    Args:
        users: Rows from parse_wordpress_users_csv
        mode: "preview" or "import"

    Returns:
        The import summary (see ImportService.import_wordpress_users)
    """
    from core.models.imports import ImportMode
    from core.services.import_service import ImportService

    logger.info(f"WordPress import task: {len(users)} rows, mode={mode}")
    return ImportService.import_wordpress_users(users, ImportMode(mode), progress=update_progress)


@shared_task(bind=True, name="workers.tasks.repair_tags_from_csv")
def repair_tags_from_csv(self, contacts: list[dict[str, str]], batch_size: int | None = None) -> dict[str, Any]:
    """
    Repair profile tags in batches.

    A failed batch fails the task; batches before it stay applied and the
    error names how many completed.
    """
    from core.services.import_service import ImportService
    from lib.csv_import import ContactTags

    rows = [ContactTags(email=row["email"], tags=row.get("tags", "")) for row in contacts]
    return ImportService.repair_tags(rows, batch_size=batch_size, progress=update_progress)


# =============================================================================
# Syncs
# =============================================================================

@shared_task(bind=True, name="workers.tasks.sync_podcast_rss")
def sync_podcast_rss(self, podcast_id: str) -> dict[str, Any]:
    from core.services.podcast_service import PodcastService

    update_progress(0, 1, "Fetching feed...")
    return PodcastService.sync_podcast(podcast_id)


@shared_task(bind=True, name="workers.tasks.sync_exchange_rates")
def sync_exchange_rates(self, month: str | None = None) -> dict[str, Any]:
    from core.services.exchange_rate_service import ExchangeRateService

    return ExchangeRateService.sync_exchange_rates(month)
