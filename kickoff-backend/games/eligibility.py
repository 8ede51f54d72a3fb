"""
Who may register for a game, and when.

Registration is gated by two timestamps and a legacy status field. Precedence:

1. A closed, completed or cancelled game admits nobody.
2. Once ``wave2_opens_at`` has passed, everyone may register.
3. Once ``wave1_opens_at`` has passed, residents may register.
4. Otherwise the legacy ``status`` decides: ``open_for_all`` admits everyone,
   ``open_for_residents`` admits residents only.
"""
from dataclasses import dataclass
from datetime import datetime

from .models import Game

REASON_GAME_CLOSED = "game_closed"
REASON_RESIDENTS_ONLY = "residents_only"
REASON_NOT_OPEN = "not_open"


@dataclass(frozen=True)
class Eligibility:
    allowed: bool
    reason: str


def eligibility(game: Game, user, now: datetime) -> Eligibility:
    is_resident = bool(getattr(user, "is_resident", False))

    if game.status in Game.FINAL_STATUSES:
        return Eligibility(False, REASON_GAME_CLOSED)

    if game.wave2_opens_at and now >= game.wave2_opens_at:
        return Eligibility(True, "wave2_open")

    wave1_open = bool(game.wave1_opens_at and now >= game.wave1_opens_at)
    if wave1_open and is_resident:
        return Eligibility(True, "wave1_open")

    if game.status == Game.STATUS_OPEN_FOR_ALL:
        return Eligibility(True, Game.STATUS_OPEN_FOR_ALL)
    if game.status == Game.STATUS_OPEN_FOR_RESIDENTS:
        if is_resident:
            return Eligibility(True, Game.STATUS_OPEN_FOR_RESIDENTS)
        return Eligibility(False, REASON_RESIDENTS_ONLY)

    if wave1_open:
        return Eligibility(False, REASON_RESIDENTS_ONLY)
    return Eligibility(False, REASON_NOT_OPEN)
