# =============================================================================
# workers/ - Celery Background Task Workers
# =============================================================================
# Background processing for CSV imports and scheduled syncs.
#
# Components:
# - celery_app.py: Celery application and lifecycle logging
# - tasks.py: Task definitions (imports, podcast and exchange-rate syncs)
# - config.py: Queues, routing and the beat schedule
#
# Usage:
#   celery -A workers.celery_app worker -Q default,imports --loglevel=info
#
#   # Submit task (from API)
#   from workers.tasks import sync_podcast_rss
#   result = sync_podcast_rss.delay(podcast_id)
# =============================================================================

from .celery_app import celery_app
from . import tasks

__all__ = [
    "celery_app",
    "tasks",
]
