from rest_framework import serializers

from .models import Notification


class NotificationSerializer(serializers.ModelSerializer):
    class Meta:
        model = Notification
        fields = ["id", "notification_type", "title", "message", "data", "read", "created_at", "expires_at"]
        read_only_fields = ["id", "created_at"]


class BroadcastSerializer(serializers.Serializer):
    title = serializers.CharField(max_length=200)
    body = serializers.CharField()
    user_ids = serializers.ListField(child=serializers.IntegerField(), required=False, allow_empty=True)
    url = serializers.URLField(required=False, allow_blank=True)
