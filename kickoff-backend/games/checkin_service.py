"""
Game-day check-in: QR shared secret, time window and geofence.

Checks run in a fixed order so the client always sees the first failing gate:
code, window, registration, venue, distance.
"""
import logging
from dataclasses import dataclass
from datetime import datetime, time, timedelta
from typing import Any, Dict, Optional, Tuple

from django.conf import settings
from django.utils import timezone

from . import registration_ledger as ledger
from .errors import (
    AlreadyCheckedIn,
    InvalidCode,
    NotRegistered,
    TooFar,
    ValidationFailed,
    VenueNotConfigured,
    WindowClosed,
)
from .geo import haversine_distance, is_within_radius
from .models import AppSettings, Game, Registration
from .registration_service import ledger_transaction, lock_game

logger = logging.getLogger(__name__)


@dataclass
class CheckInResult:
    registration: Registration
    distance_meters: float

    def as_dict(self) -> Dict[str, Any]:
        return {
            "ok": True,
            "registration_id": self.registration.id,
            "distance_meters": self.distance_meters,
        }


def checkin_window(game: Game) -> Tuple[datetime, Optional[datetime]]:
    """(opens_at, closes_at). Manually created games never close."""
    opens_at = game.kickoff_time - timedelta(minutes=settings.CHECKIN_OPENS_MINUTES_BEFORE)
    closes_at = None
    if game.is_auto_generated:
        # Local midnight at the end of the game's calendar day
        closes_at = timezone.make_aware(datetime.combine(game.date + timedelta(days=1), time.min))
    return opens_at, closes_at


def is_window_open(game: Game, now: datetime) -> bool:
    opens_at, closes_at = checkin_window(game)
    if now < opens_at:
        return False
    return closes_at is None or now <= closes_at


def _coordinate(value, name: str, bound: float) -> float:
    if isinstance(value, bool):
        raise ValidationFailed(f"{name} must be a number.")
    try:
        value = float(value)
    except (TypeError, ValueError):
        raise ValidationFailed(f"{name} must be a number.")
    if not -bound <= value <= bound:
        raise ValidationFailed(f"{name} is out of range.")
    return value


def check_in(user, game_id: int, scanned_secret: str, latitude, longitude, now=None) -> CheckInResult:
    now = now or timezone.now()
    latitude = _coordinate(latitude, "latitude", 90)
    longitude = _coordinate(longitude, "longitude", 180)

    app_settings = AppSettings.load()
    if not app_settings.qr_secret_key or scanned_secret != app_settings.qr_secret_key:
        raise InvalidCode()

    with ledger_transaction():
        game = lock_game(game_id)
        if not is_window_open(game, now):
            opens_at, closes_at = checkin_window(game)
            raise WindowClosed(opens_at=opens_at.isoformat(), closes_at=closes_at.isoformat() if closes_at else None)

        registration = ledger.live_registration(game, user.id, lock=True)
        if registration is None:
            raise NotRegistered()
        if registration.is_checked_in:
            raise AlreadyCheckedIn()

        if not app_settings.venue_configured:
            raise VenueNotConfigured()
        distance = haversine_distance(
            latitude, longitude, app_settings.field_latitude, app_settings.field_longitude
        )
        radius = settings.CHECKIN_RADIUS_METERS
        if not is_within_radius(distance, radius):
            logger.info("User %s check-in for game %s rejected at %.1f m", user.id, game_id, distance)
            raise TooFar(distance, radius)

        registration.check_in_status = Registration.CHECK_IN_CHECKED_IN
        registration.checked_in_at = now
        registration.save(update_fields=["check_in_status", "checked_in_at", "updated_at"])

    logger.info("User %s checked in for game %s (%s, %.1f m)", user.id, game_id, registration.status, distance)
    return CheckInResult(registration, distance)
