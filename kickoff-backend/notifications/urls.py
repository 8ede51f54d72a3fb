from django.urls import path

from .views import (
    BroadcastView,
    NotificationDetailView,
    NotificationListView,
    NotificationMarkReadView,
    NotificationUnreadCountView,
)

urlpatterns = [
    path("", NotificationListView.as_view(), name="notification-list"),
    path("unread-count/", NotificationUnreadCountView.as_view(), name="notification-unread-count"),
    path("mark-read/", NotificationMarkReadView.as_view(), name="notification-mark-all-read"),
    path("broadcast/", BroadcastView.as_view(), name="notification-broadcast"),
    path("<uuid:notification_id>/", NotificationDetailView.as_view(), name="notification-detail"),
    path("<uuid:notification_id>/mark-read/", NotificationMarkReadView.as_view(), name="notification-mark-read"),
]
