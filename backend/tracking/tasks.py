import logging

from celery import shared_task

from .jobs import cleanup_cron_logs, run_view_tracking_job

logger = logging.getLogger(__name__)


@shared_task(bind=True)
def run_view_tracking(self):
    """
    Scheduled view tracking pass followed by budget-driven campaign completion
    """
    try:
        summary = run_view_tracking_job()
        logger.info(f"run_view_tracking completed: {summary.get('status')}")
        return summary
    except Exception as e:
        logger.error(f"Error in run_view_tracking: {e}")
        raise self.retry(countdown=60, max_retries=3)


@shared_task(bind=True)
def cleanup_cron_logs_task(self, days=None):
    """
    Drop finished cron job logs past the retention window
    """
    try:
        deleted = cleanup_cron_logs(days)
        return {"deleted": deleted}
    except Exception as e:
        logger.error(f"Error in cleanup_cron_logs_task: {e}")
        raise self.retry(countdown=300, max_retries=3)
