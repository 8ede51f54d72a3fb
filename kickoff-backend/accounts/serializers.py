from rest_framework import serializers

from .models import User


class UserSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = (
            "id",
            "email",
            "username",
            "full_name",
            "phone_number",
            "avatar_url",
            "is_resident",
            "phone_verified",
            "is_staff",
            "date_joined",
        )
        read_only_fields = fields


class PlayerSerializer(serializers.ModelSerializer):
    """Public subset shown next to a roster entry."""

    class Meta:
        model = User
        fields = ("id", "username", "full_name", "avatar_url")
