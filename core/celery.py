"""
Celery application configuration
Runs comprehensive analyses in the background with Redis as broker
"""

import logging

from celery import Celery
from celery.signals import (
    task_prerun,
    task_postrun,
    task_failure,
    worker_ready,
    worker_shutdown,
)
from kombu import Queue

from config import settings

logger = logging.getLogger(__name__)

celery_app = Celery(
    "website_analyzer",
    broker=settings.celery_broker,
    backend=settings.CELERY_RESULT_BACKEND,
    include=["tasks.analysis"],
)

celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    task_acks_late=True,
    task_reject_on_worker_lost=True,
    task_track_started=True,
    task_time_limit=settings.TASK_TIME_LIMIT,
    task_soft_time_limit=settings.TASK_SOFT_TIME_LIMIT,
    result_expires=settings.CELERY_RESULT_EXPIRES,
    result_extended=True,
    worker_prefetch_multiplier=settings.WORKER_PREFETCH_MULTIPLIER,
    worker_max_tasks_per_child=settings.WORKER_MAX_TASKS_PER_CHILD,
    task_default_queue="default",
    task_queues=(
        Queue("default", routing_key="task.default"),
    ),
    broker_connection_retry_on_startup=True,
    result_compression="gzip",
)

celery_app.conf.task_routes = {
    "tasks.run_comprehensive_analysis": {"queue": "default"},
}


@worker_ready.connect
def worker_ready_handler(sender=None, **kwargs):
    logger.info("🚀 Celery worker is ready and waiting for tasks")


@worker_shutdown.connect
def worker_shutdown_handler(sender=None, **kwargs):
    logger.info("🛑 Celery worker is shutting down")


@task_prerun.connect
def task_prerun_handler(sender=None, task_id=None, task=None, args=None, **kwargs):
    logger.info(f"⏳ Starting task: {task.name} [ID: {task_id}]")


@task_postrun.connect
def task_postrun_handler(sender=None, task_id=None, task=None, retval=None, state=None, **kwargs):
    logger.info(f"✅ Completed task: {task.name} [ID: {task_id}] [State: {state}]")


@task_failure.connect
def task_failure_handler(sender=None, task_id=None, exception=None, traceback=None, **kwargs):
    logger.error(f"❌ Task failed: {sender.name} [ID: {task_id}] [Error: {str(exception)}]")
