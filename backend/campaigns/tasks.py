import logging

from celery import shared_task

from .services import activate_scheduled_campaigns, auto_complete_campaigns, sync_all_campaigns

logger = logging.getLogger(__name__)


@shared_task(bind=True)
def activate_scheduled_campaigns_task(self):
    """
    Promote SCHEDULED campaigns whose start date has passed
    """
    try:
        stats = activate_scheduled_campaigns()
        logger.info(f"activate_scheduled_campaigns_task completed: {stats}")
        return stats
    except Exception as e:
        logger.error(f"Error in activate_scheduled_campaigns_task: {e}")
        raise self.retry(countdown=60, max_retries=3)


@shared_task(bind=True)
def auto_complete_campaigns_task(self):
    """
    Complete campaigns whose budget has been spent
    """
    try:
        completed = auto_complete_campaigns()
        logger.info(f"auto_complete_campaigns_task completed {len(completed)} campaign(s)")
        return {"completed": [check.campaign_id for check in completed]}
    except Exception as e:
        logger.error(f"Error in auto_complete_campaigns_task: {e}")
        raise self.retry(countdown=60, max_retries=3)


@shared_task(bind=True)
def sync_campaign_spend_task(self):
    """
    Daily reconciliation of campaign spend against clip earnings
    """
    try:
        stats = sync_all_campaigns()
        logger.info(f"sync_campaign_spend_task completed: {stats}")
        return stats
    except Exception as e:
        logger.error(f"Error in sync_campaign_spend_task: {e}")
        raise self.retry(countdown=300, max_retries=3)
