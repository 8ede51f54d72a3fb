"""
Notification fan-out: in-app rows, the user's websocket group and push.

State-changing services call ``notify_on_commit``; the work happens in a Celery
task after the surrounding transaction commits, so a failing provider can never
roll back a registration.
"""
import logging
from functools import partial
from typing import Any, Dict, Iterable, List, Optional

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from django.contrib.auth import get_user_model
from django.db import transaction

from .models import Notification
from .push import send_push
from .serializers import NotificationSerializer

logger = logging.getLogger(__name__)

User = get_user_model()


def _send_websocket(notification: Notification) -> None:
    channel_layer = get_channel_layer()
    if channel_layer is None:
        return
    try:
        async_to_sync(channel_layer.group_send)(
            f"user_{notification.user_id}",
            {"type": "notification", "notification": NotificationSerializer(notification).data},
        )
    except Exception as exc:
        # The row is saved; the client picks it up on its next poll.
        logger.warning("Websocket notification to user %s failed: %s", notification.user_id, exc)


def notify_users(
    user_ids: Iterable[int],
    notification_type: str,
    title: str,
    message: str,
    data: Optional[Dict[str, Any]] = None,
    url: Optional[str] = None,
) -> List[Notification]:
    users = list(User.objects.filter(id__in=list(user_ids)))
    notifications = []
    for user in users:
        notification = Notification.objects.create(
            user=user,
            notification_type=notification_type,
            title=title,
            message=message,
            data=data or {},
        )
        _send_websocket(notification)
        notifications.append(notification)

    if users:
        send_push([user.id for user in users], title, message, data, url)
    logger.info("Dispatched %s notification to %s users", notification_type, len(users))
    return notifications


def _enqueue(user_ids, notification_type, title, message, data):
    from .tasks import dispatch_notification

    dispatch_notification.delay(user_ids, notification_type, title, message, data)


def _enqueue_broadcast(title, message, data):
    from .tasks import send_push_task

    send_push_task.delay(None, title, message, data)


def notify_on_commit(
    user_ids: Iterable[int],
    notification_type: str,
    title: str,
    message: str,
    data: Optional[Dict[str, Any]] = None,
) -> None:
    user_ids = list(user_ids)
    if not user_ids:
        return
    transaction.on_commit(
        partial(_enqueue, user_ids, notification_type, title, message, data or {}),
        robust=True,
    )


def broadcast_on_commit(title: str, message: str, data: Optional[Dict[str, Any]] = None) -> None:
    transaction.on_commit(partial(_enqueue_broadcast, title, message, data or {}), robust=True)
