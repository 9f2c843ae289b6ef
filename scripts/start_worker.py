#!/usr/bin/env python3
# =============================================================================
# scripts/start_worker.py - Celery Worker Entry Point
# =============================================================================
# Starts a Celery worker for imports, podcast syncs and exchange-rate syncs.
#
# Usage:
#   python scripts/start_worker.py            # worker only
#   python scripts/start_worker.py --beat     # worker with the beat scheduler
#
#   # Or use the Celery CLI directly
#   celery -A workers.celery_app worker --loglevel=info
#   celery -A workers.celery_app beat --loglevel=info
#
# Prerequisites:
#   - Redis must be running
#   - Environment variables must be set (.env file)
# =============================================================================

import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from workers.celery_app import celery_app


def main():
    """Start the Celery worker, optionally embedding beat."""
    argv = [
        "worker",
        "--loglevel=info",
        "--concurrency=2",
    ]
    if "--beat" in sys.argv[1:]:
        # Embedded beat is for single-worker deployments only
        argv.append("--beat")

    print("MusicMethod Celery worker starting (Ctrl+C to stop)")
    celery_app.worker_main(argv)


if __name__ == "__main__":
    main()
