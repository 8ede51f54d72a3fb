from django.conf import settings
from rest_framework import serializers

from accounts.serializers import PlayerSerializer
from . import game_store
from .models import Game, Registration


class GameSerializer(serializers.ModelSerializer):
    max_players = serializers.IntegerField(required=False, min_value=1)
    max_standby = serializers.IntegerField(required=False, min_value=0)

    class Meta:
        model = Game
        fields = (
            "id",
            "date",
            "kickoff_time",
            "deadline_time",
            "wave1_opens_at",
            "wave2_opens_at",
            "candle_lighting",
            "shabbat_end",
            "max_players",
            "max_standby",
            "status",
            "is_auto_generated",
            "created_at",
            "updated_at",
        )
        read_only_fields = ("id", "created_at", "updated_at")

    def validate(self, attrs):
        wave1 = attrs.get("wave1_opens_at")
        wave2 = attrs.get("wave2_opens_at")
        if wave1 and wave2 and wave2 < wave1:
            raise serializers.ValidationError({"wave2_opens_at": "Wave 2 cannot open before wave 1."})
        return attrs

    def create(self, validated_data):
        validated_data.setdefault("max_players", settings.DEFAULT_MAX_PLAYERS)
        validated_data.setdefault("max_standby", settings.DEFAULT_MAX_STANDBY)
        return game_store.create_game(**validated_data)


class RegistrationSerializer(serializers.ModelSerializer):
    user = PlayerSerializer(read_only=True)

    class Meta:
        model = Registration
        fields = (
            "id",
            "user",
            "game",
            "status",
            "check_in_status",
            "queue_position",
            "eta_minutes",
            "checked_in_at",
            "created_at",
        )
        read_only_fields = fields


class GameStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=Game.STATUS_CHOICES)


class EtaSerializer(serializers.Serializer):
    eta_minutes = serializers.IntegerField(min_value=0, allow_null=True)


class CheckInSerializer(serializers.Serializer):
    qr_secret = serializers.CharField(trim_whitespace=False)
    latitude = serializers.FloatField(min_value=-90, max_value=90)
    longitude = serializers.FloatField(min_value=-180, max_value=180)
