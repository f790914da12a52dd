import os
from celery import Celery
from celery.schedules import crontab as _celery_crontab

# Set the default Django settings module for the 'celery' program.
os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'backend.settings')

app = Celery('backend')

app.config_from_object('django.conf:settings', namespace='CELERY')

# Load task modules from all registered Django apps.
app.autodiscover_tasks()

# Task routing: scraping, campaign bookkeeping and maintenance each get a queue
app.conf.task_routes = {
    'tracking.tasks.run_view_tracking': {'queue': 'tracking'},
    'tracking.tasks.cleanup_cron_logs_task': {'queue': 'maintenance'},

    'campaigns.tasks.activate_scheduled_campaigns_task': {'queue': 'campaigns'},
    'campaigns.tasks.auto_complete_campaigns_task': {'queue': 'campaigns'},
    'campaigns.tasks.sync_campaign_spend_task': {'queue': 'maintenance'},

    '*': {'queue': 'default'},
}

app.conf.task_default_queue = 'default'

app.conf.update(
    # Serialization settings
    task_serializer='json',
    accept_content=['json'],
    result_serializer='json',

    # Timezone settings
    timezone='UTC',
    enable_utc=True,

    # Task execution settings
    task_track_started=True,
    task_time_limit=30 * 60,
    task_soft_time_limit=25 * 60,

    # Worker settings
    worker_prefetch_multiplier=1,
    worker_max_tasks_per_child=1000,
    worker_disable_rate_limits=False,

    # Retry settings
    task_acks_late=True,
    task_reject_on_worker_lost=True,

    # Monitoring settings
    worker_send_task_events=True,
    task_send_sent_event=True,

    task_queues={
        'default': {
            'exchange': 'default',
            'routing_key': 'default',
        },
        'tracking': {
            'exchange': 'tracking',
            'routing_key': 'tracking',
        },
        'campaigns': {
            'exchange': 'campaigns',
            'routing_key': 'campaigns',
        },
        'maintenance': {
            'exchange': 'maintenance',
            'routing_key': 'maintenance',
        },
    },

    task_inherit_parent_priority=True,
    task_default_priority=5,

    task_ignore_result=False,
    task_store_errors_even_if_ignored=True,
)

app.conf.task_annotations = {
    'tracking.tasks.run_view_tracking': {
        'rate_limit': '4/h',
        'time_limit': 600,  # the run itself stops after VIEW_TRACKING_MAX_DURATION_SECONDS
        'soft_time_limit': 540,
    },
    'campaigns.tasks.sync_campaign_spend_task': {
        'rate_limit': '1/h',
        'time_limit': 1800,
        'soft_time_limit': 1500,
    },
}


class VerboseCrontab(_celery_crontab):
    """Extend Celery's crontab schedule with a repr that always shows the minute expression."""

    def __repr__(self) -> str:  # pragma: no cover - formatting helper only
        base = super().__repr__()
        minute_expr = getattr(self, "_orig_minute", None)
        if minute_expr and f"minute='{minute_expr}'" not in base:
            base = f"{base} minute='{minute_expr}'"
        return base


def crontab(*args, **kwargs):
    return VerboseCrontab(*args, **kwargs)


app.conf.beat_schedule = {
    "view_tracking_15min": {
        "task": "tracking.tasks.run_view_tracking",
        "schedule": crontab(minute="*/15"),
        "options": {"queue": "tracking"},
    },
    "campaign_activation_5min": {
        "task": "campaigns.tasks.activate_scheduled_campaigns_task",
        "schedule": crontab(minute="*/5"),
        "options": {"queue": "campaigns", "priority": 8},
    },
    "campaign_spend_sync_daily": {
        "task": "campaigns.tasks.sync_campaign_spend_task",
        "schedule": crontab(hour=3, minute=0),
        "options": {"queue": "maintenance"},
    },
    "cron_log_cleanup_daily": {
        "task": "tracking.tasks.cleanup_cron_logs_task",
        "schedule": crontab(hour=4, minute=0),
        "options": {"queue": "maintenance"},
    },
}


@app.task(bind=True)
def health_check(self):
    """Worker health check: confirms the database is reachable from the worker."""
    from django.db import DatabaseError, connection

    try:
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")
        return {
            'status': 'healthy',
            'timestamp': app.now().isoformat(),
            'worker_id': self.request.id,
        }
    except DatabaseError as e:
        return {
            'status': 'unhealthy',
            'error': str(e),
            'timestamp': app.now().isoformat(),
        }
