import logging

from celery import shared_task

from .dispatcher import notify_users
from .push import send_push

logger = logging.getLogger(__name__)


@shared_task
def dispatch_notification(user_ids, notification_type, title, message, data=None):
    try:
        notify_users(user_ids, notification_type, title, message, data)
    except Exception:
        logger.exception("Notification %s to %s failed", notification_type, user_ids)


@shared_task
def send_push_task(user_ids, title, message, data=None, url=None):
    """Push only, no in-app rows. ``user_ids`` None reaches every subscriber."""
    return send_push(user_ids, title, message, data, url)
