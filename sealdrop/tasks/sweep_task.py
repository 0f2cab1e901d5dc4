"""
Sweep Task

Celery beat task that reclaims the ciphertext of expired shares.
"""

import logging

from flask import current_app

from celery_app import celery_app
from sealdrop.application.share_service import ShareService
from sealdrop.config.celery_config import SWEEP_TASK_NAME

logger = logging.getLogger(__name__)


@celery_app.task(bind=True, name=SWEEP_TASK_NAME)
def sweep_expired_files(self):
    """
    Periodic sweep of expired files (hourly by default).

    Runs one ExpirationSweeper pass through ShareService. If another worker
    is already sweeping this run is skipped, not queued.

    Returns:
        dict: The sweep report, plus an 'errors' list
    """
    logger.info("Starting expiration sweep task")

    try:
        share_service = current_app.container.resolve(ShareService)
        report = share_service.run_sweep()
    except Exception as e:
        error_msg = f"Sweep task failed: {e}"
        logger.error(error_msg, exc_info=True)
        return {
            "skipped": False,
            "examined": 0,
            "reclaimed": 0,
            "reclaimed_ids": [],
            "failures": {},
            "errors": [error_msg],
        }

    result = report.to_dict()
    result["errors"] = []

    if report.skipped:
        logger.info("Expiration sweep skipped: already running")
    elif report.failures:
        logger.warning(
            f"Expiration sweep finished with {len(report.failures)} failure(s), "
            "they will be retried next run"
        )
    return result
