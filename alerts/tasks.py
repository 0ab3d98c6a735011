# alerts/tasks.py
import logging
from dataclasses import asdict

from celery import shared_task

from .services import run_alert_sweep

logger = logging.getLogger(__name__)


@shared_task
def check_weather_alerts(policy=None):
    """
    Scheduled sweep over all active thresholds. A missing provider
    configuration raises and fails the run.
    """
    logger.info("Starting scheduled weather alert sweep.")
    result = run_alert_sweep(policy=policy)
    return asdict(result)
