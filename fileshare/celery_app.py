"""
Celery Application Instance

Creates the Celery app instance for use by workers and the beat scheduler.
Uses the app factory to ensure all services are properly initialized.

    celery -A fileshare.celery_app worker -Q default,sweep
    celery -A fileshare.celery_app beat
"""

from fileshare.app_factory import create_app
from fileshare.config.storage_config import StorageConfig

# Beat owns the schedule in worker processes
storage_config = StorageConfig()
storage_config.sweep_in_process = False

flask_app = create_app(storage_config=storage_config)

celery_app = flask_app.celery

# Task modules are imported by the worker at startup, after celery_app exists
celery_app.conf.imports = ("fileshare.tasks.sweep_task",)
