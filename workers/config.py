# =============================================================================
# workers/config.py - Celery Worker Configuration
# =============================================================================
# Applied to the Celery app via app.config_from_object().
# =============================================================================

from celery.schedules import crontab

from app.config import settings


class CeleryConfig:
    """Celery configuration settings."""

    # -------------------------------------------------------------------------
    # Broker Settings (Redis)
    # -------------------------------------------------------------------------

    broker_url = settings.REDIS_URL
    result_backend = settings.REDIS_URL

    # -------------------------------------------------------------------------
    # Task Settings
    # -------------------------------------------------------------------------

    # Acknowledge after completion so a crashed worker's task is redelivered
    task_acks_late = True
    worker_prefetch_multiplier = 1

    # Import summaries are polled by the admin UI; keep them for a day
    result_expires = 86400

    # Large member imports make one auth call per row
    task_time_limit = 3600
    task_soft_time_limit = 3300

    # -------------------------------------------------------------------------
    # Serialization
    # -------------------------------------------------------------------------

    task_serializer = "json"
    result_serializer = "json"
    accept_content = ["json"]

    # -------------------------------------------------------------------------
    # Task Routing
    # -------------------------------------------------------------------------

    task_queues = {
        "default": {
            "exchange": "default",
            "routing_key": "default",
        },
        "imports": {
            "exchange": "imports",
            "routing_key": "imports",
        },
    }

    # CSV imports are long-running; keep them off the default queue
    task_routes = {
        "workers.tasks.import_wordpress_users": {"queue": "imports"},
        "workers.tasks.repair_tags_from_csv": {"queue": "imports"},
    }

    task_default_queue = "default"

    # -------------------------------------------------------------------------
    # Schedule (celery beat)
    # -------------------------------------------------------------------------

    beat_schedule = {
        "sync-exchange-rates-monthly": {
            "task": "workers.tasks.sync_exchange_rates",
            "schedule": crontab(minute=0, hour=6, day_of_month=1),
        },
    }

    # -------------------------------------------------------------------------
    # Monitoring
    # -------------------------------------------------------------------------

    worker_send_task_events = True
    task_send_sent_event = True

    timezone = "UTC"
    enable_utc = True
