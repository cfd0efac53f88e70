"""
Sweep Task

Celery beat task running the expiration sweep in worker deployments.
"""

import logging

from celery import shared_task
from flask import current_app

from fileshare.config.celery_config import SWEEP_TASK_NAME
from fileshare.domain.file_sharing import LifecycleManager

logger = logging.getLogger(__name__)


def _get_lifecycle_manager() -> LifecycleManager:
    """Resolve the LifecycleManager from the app's dependency container."""
    container = getattr(current_app, "container", None)
    if container is None:
        raise RuntimeError("Dependency container not initialized")
    return container.resolve(LifecycleManager)


@shared_task(bind=True, name=SWEEP_TASK_NAME)
def sweep_expired_objects(self):
    """
    Delete expired and malformed objects plus stale staged uploads.

    Scheduled by Celery beat every SWEEP_INTERVAL_SECONDS.

    Returns:
        dict: Sweep statistics with counts and errors
    """
    logger.info("Starting sweep task")

    try:
        report = _get_lifecycle_manager().sweep()
    except Exception as e:
        error_msg = f"Sweep task failed: {e}"
        logger.error(error_msg, exc_info=True)
        return {
            "scanned": 0,
            "expired_removed": 0,
            "malformed_removed": 0,
            "stale_uploads_removed": 0,
            "markers_removed": 0,
            "errors": [error_msg],
        }

    if report.errors:
        logger.warning(f"Sweep errors: {report.errors}")

    return report.to_dict()
