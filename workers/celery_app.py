# =============================================================================
# workers/celery_app.py - Celery Application
# =============================================================================
# The Novique worker app. Broker, queues and the beat schedule come from
# workers/config.py, which reads REDIS_URL from app.config.settings.
#
# Queues:
#   default   - voicemail sync, healthcheck
#   ai_tasks  - weekly post generation, voicemail transcription (OpenAI)
#
# Usage:
#   celery -A workers.celery_app worker -Q default,ai_tasks --loglevel=info
#   celery -A workers.celery_app beat --loglevel=info
# =============================================================================

import logging
from typing import Any

from celery import Celery
from celery.signals import task_failure, task_postrun, task_prerun, task_retry, worker_ready

from app.config import settings

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def _broker_host(url: str) -> str:
    """Broker URL without credentials, for logs."""
    return url.split("@")[-1]


def task_label(name: str, args: Any = None) -> str:
    """
    Short task description for logs.

    Transcription tasks carry the communication id as their only argument,
    so it is shown alongside the task name.
    """
    short_name = name.rsplit(".", 1)[-1]
    if args:
        return f"{short_name}({', '.join(str(arg) for arg in args)})"
    return short_name


celery_app = Celery("novique_worker", include=["workers.tasks"])
celery_app.config_from_object("workers.config:CeleryConfig")

logger.info(f"Celery app configured with broker {_broker_host(settings.REDIS_URL)}")


# =============================================================================
# Task Lifecycle Logging
# =============================================================================

@worker_ready.connect
def on_worker_ready(sender=None, **extra):
    schedule = ", ".join(sorted(celery_app.conf.beat_schedule))
    logger.info(f"Novique worker ready; beat entries: {schedule}")


@task_prerun.connect
def on_task_prerun(sender=None, task_id=None, task=None, args=None, **extra):
    logger.info(f"Task started: {task_label(task.name, args)} [{task_id}]")


@task_postrun.connect
def on_task_postrun(sender=None, task_id=None, task=None, args=None, retval=None, state=None, **extra):
    # Tasks report handled failures as {"success": False, "error": ...}
    if isinstance(retval, dict) and retval.get("success") is False:
        logger.warning(f"Task {task_label(task.name, args)} [{task_id}] finished with error: {retval.get('error')}")
    else:
        logger.info(f"Task completed: {task_label(task.name, args)} [{task_id}] - State: {state}")


@task_retry.connect
def on_task_retry(sender=None, request=None, reason=None, **extra):
    logger.warning(f"Task retrying: {task_label(sender.name, request.args)} - {reason}")


@task_failure.connect
def on_task_failure(sender=None, task_id=None, exception=None, args=None, **extra):
    logger.error(f"Task failed: {task_label(sender.name, args)} [{task_id}] - Error: {exception}")
