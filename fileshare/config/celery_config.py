"""
Celery Configuration

The only periodic work is the expiration sweep. Beat enqueues it every
SWEEP_INTERVAL_SECONDS onto its own queue, so a worker can be dedicated to it.
"""

import os

from celery import Celery
from kombu import Queue

SWEEP_TASK_NAME = "fileshare.tasks.sweep_expired_objects"
SWEEP_QUEUE = "sweep"
SWEEP_INTERVAL_SECONDS = float(os.getenv("SWEEP_INTERVAL_SECONDS", 3600))


class CeleryConfig:
    """Settings loaded with ``config_from_object``."""

    broker_url = os.getenv("CELERY_BROKER_URL", "redis://localhost:6379/0")
    result_backend = os.getenv("CELERY_RESULT_BACKEND", "redis://localhost:6379/0")

    task_serializer = "json"
    result_serializer = "json"
    accept_content = ["json"]
    timezone = "UTC"
    enable_utc = True

    task_default_queue = "default"
    task_queues = (
        Queue("default", routing_key="default"),
        Queue(SWEEP_QUEUE, routing_key=SWEEP_QUEUE),
    )
    task_routes = {SWEEP_TASK_NAME: {"queue": SWEEP_QUEUE}}

    beat_schedule = {
        "sweep-expired-objects": {
            "task": SWEEP_TASK_NAME,
            "schedule": SWEEP_INTERVAL_SECONDS,
            # An unclaimed sweep is dropped once the next one is due
            "options": {"expires": SWEEP_INTERVAL_SECONDS},
        },
    }

    task_acks_late = True
    worker_prefetch_multiplier = 1
    worker_concurrency = int(os.getenv("CELERY_WORKER_CONCURRENCY", 1))
    task_soft_time_limit = int(os.getenv("CELERY_TASK_SOFT_TIME_LIMIT", 300))
    task_time_limit = int(os.getenv("CELERY_TASK_TIME_LIMIT", 360))

    # Sweep reports are only useful for a short while
    result_expires = 3600


def make_celery(app):
    """
    Build the Celery app for a Flask app.

    Every task body runs inside ``app.app_context()``, which is how the
    sweep task reaches ``current_app.container``.
    """
    celery = Celery(
        app.import_name,
        broker=CeleryConfig.broker_url,
        backend=CeleryConfig.result_backend,
    )
    celery.config_from_object(CeleryConfig)

    class ContextTask(celery.Task):
        def __call__(self, *args, **kwargs):
            with app.app_context():
                return self.run(*args, **kwargs)

    celery.Task = ContextTask
    return celery
