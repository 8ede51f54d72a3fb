"""
Game metadata: lookup, creation, deletion and status changes.
"""
import logging
from typing import Optional

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from notifications.dispatcher import broadcast_on_commit
from notifications.models import Notification
from .errors import GameNotFound, ValidationFailed
from .models import Game

logger = logging.getLogger(__name__)

STATUS_VALUES = {value for value, _ in Game.STATUS_CHOICES}


def fetch_current_game(now=None) -> Optional[Game]:
    """Earliest upcoming game on or after today's local date."""
    today = timezone.localdate(now or timezone.now())
    return (
        Game.objects.filter(date__gte=today, status__in=Game.UPCOMING_STATUSES)
        .order_by("date", "kickoff_time")
        .first()
    )


def get_game(game_id: int) -> Game:
    try:
        return Game.objects.get(id=game_id)
    except Game.DoesNotExist:
        raise GameNotFound()


def _validate_capacity(max_players, max_standby):
    if max_players is None or max_players <= 0:
        raise ValidationFailed("max_players must be positive.", field="max_players")
    if max_standby is None or max_standby < 0:
        raise ValidationFailed("max_standby must not be negative.", field="max_standby")


def create_game(**fields) -> Game:
    fields.setdefault("max_players", settings.DEFAULT_MAX_PLAYERS)
    fields.setdefault("max_standby", settings.DEFAULT_MAX_STANDBY)
    fields.setdefault("status", Game.STATUS_SCHEDULED)
    _validate_capacity(fields["max_players"], fields["max_standby"])
    if fields["status"] not in STATUS_VALUES:
        raise ValidationFailed(f"Unknown status {fields['status']!r}.", field="status")

    game = Game.objects.create(**fields)
    logger.info("Created game %s on %s (%s/%s)", game.id, game.date, game.max_players, game.max_standby)
    return game


def delete_game(game_id: int) -> None:
    deleted, _ = Game.objects.filter(id=game_id).delete()
    if not deleted:
        raise GameNotFound()
    logger.info("Deleted game %s", game_id)


def update_game_status(game_id: int, status: str) -> Game:
    if status not in STATUS_VALUES:
        raise ValidationFailed(f"Unknown status {status!r}.", field="status")

    with transaction.atomic():
        try:
            game = Game.objects.select_for_update().get(id=game_id)
        except Game.DoesNotExist:
            raise GameNotFound()
        previous = game.status
        game.status = status
        game.save(update_fields=["status", "updated_at"])

        if status in Game.OPEN_STATUSES and previous != status:
            audience = "residents" if status == Game.STATUS_OPEN_FOR_RESIDENTS else "everyone"
            broadcast_on_commit(
                "Registration is open",
                f"Sign-up for the game on {game.date:%d/%m} is open for {audience}.",
                {"game_id": game.id, "status": status, "notification_type": Notification.TYPE_GAME_OPEN},
            )

    logger.info("Game %s status %s -> %s", game_id, previous, status)
    return game
