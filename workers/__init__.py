# =============================================================================
# workers/ - Celery Background Task Workers
# =============================================================================
# This package contains the Celery configuration and task definitions for
# scheduled and background jobs.
#
# Components:
# - celery_app.py: Celery application configuration
# - tasks.py: Task definitions (weekly post, voicemail sync, transcription)
# - config.py: Worker settings and beat schedule
#
# Usage:
#   # Start worker and scheduler
#   celery -A workers.celery_app worker -Q default,ai_tasks --loglevel=info
#   celery -A workers.celery_app beat --loglevel=info
#
#   # Submit task (from API)
#   from workers.tasks import transcribe_voicemail
#   transcribe_voicemail.delay(communication_id)
# =============================================================================

from .celery_app import celery_app
from . import tasks

__all__ = [
    "celery_app",
    "tasks",
]
