import logging

from django.db.models import Q
from django.utils import timezone
from rest_framework import permissions, status
from rest_framework.response import Response
from rest_framework.views import APIView

from .models import Notification
from .serializers import BroadcastSerializer, NotificationSerializer
from .tasks import dispatch_notification, send_push_task

logger = logging.getLogger(__name__)


def _visible(user):
    return Notification.objects.filter(user=user).filter(
        Q(expires_at__isnull=True) | Q(expires_at__gte=timezone.now())
    )


class NotificationListView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):
        """Latest 50 unexpired notifications plus the unread count."""
        visible = _visible(request.user)
        serializer = NotificationSerializer(visible.order_by("-created_at")[:50], many=True)
        return Response({
            "notifications": serializer.data,
            "unread_count": visible.filter(read=False).count(),
        })


class NotificationUnreadCountView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):
        return Response({"unread_count": _visible(request.user).filter(read=False).count()})


class NotificationMarkReadView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def post(self, request, notification_id=None):
        """Mark one notification as read, or all of them without an id."""
        if notification_id is None:
            updated = Notification.objects.filter(user=request.user, read=False).update(read=True)
            return Response({"status": "all marked as read", "updated": updated})
        try:
            notification = Notification.objects.get(id=notification_id, user=request.user)
        except Notification.DoesNotExist:
            return Response({"error": "Notification not found"}, status=status.HTTP_404_NOT_FOUND)
        notification.mark_as_read()
        return Response({"status": "marked as read"})


class NotificationDetailView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def delete(self, request, notification_id):
        deleted, _ = Notification.objects.filter(id=notification_id, user=request.user).delete()
        if not deleted:
            return Response({"error": "Notification not found"}, status=status.HTTP_404_NOT_FOUND)
        return Response(status=status.HTTP_204_NO_CONTENT)


class BroadcastView(APIView):
    """Staff-only push. With ``user_ids`` the users also get an in-app row."""

    permission_classes = [permissions.IsAdminUser]

    def post(self, request):
        serializer = BroadcastSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        payload = serializer.validated_data
        user_ids = payload.get("user_ids") or []
        data = {"url": payload["url"]} if payload.get("url") else {}

        if user_ids:
            dispatch_notification.delay(
                user_ids, Notification.TYPE_BROADCAST, payload["title"], payload["body"], data
            )
        else:
            send_push_task.delay(None, payload["title"], payload["body"], data, payload.get("url") or None)
        logger.info("User %s queued broadcast %r to %s", request.user.id, payload["title"], user_ids or "everyone")
        return Response(
            {"queued": True, "target": "users" if user_ids else "all", "user_count": len(user_ids)},
            status=status.HTTP_202_ACCEPTED,
        )
