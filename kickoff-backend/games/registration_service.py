"""
Registration state machine: register, cancel, late swaps, ETA and no-shows.

Every operation runs in one ``transaction.atomic()`` block that starts by
locking the game row with ``select_for_update()``, so all writes to a game's
ledger are serialized by the database. Notifications are scheduled with
``transaction.on_commit`` and never run inside the transaction.
"""
import logging
import random
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import redis
from django.conf import settings
from django.db import IntegrityError, OperationalError, transaction
from django.utils import timezone

from notifications.dispatcher import notify_on_commit
from notifications.models import Notification
from utils.redis_client import acquire_lock, get_redis, release_lock
from . import registration_ledger as ledger
from .eligibility import eligibility
from .errors import (
    AlreadyRegistered,
    ConcurrencyConflict,
    GameNotFound,
    NotRegistered,
    RegistrationClosed,
    ValidationFailed,
    WaitlistFull,
)
from .models import Game, Registration

logger = logging.getLogger(__name__)

SWEEP_LOCK_TTL_SECONDS = 10
RETRY_BACKOFF_SECONDS = 0.05


@dataclass
class RegisterResult:
    registration: Registration

    @property
    def status(self) -> str:
        return self.registration.status

    @property
    def queue_position(self) -> Optional[int]:
        return self.registration.queue_position

    def as_dict(self) -> Dict[str, Any]:
        return {
            "registration_id": self.registration.id,
            "status": self.status,
            "queue_position": self.queue_position,
        }


@dataclass
class CancelResult:
    cancelled_id: int
    promoted_registration_id: Optional[int] = None
    promoted_user_id: Optional[int] = None

    def as_dict(self) -> Dict[str, Any]:
        return {
            "cancelled_id": self.cancelled_id,
            "promoted_registration_id": self.promoted_registration_id,
            "promoted_user_id": self.promoted_user_id,
        }


@dataclass
class Swap:
    promoted_registration_id: int
    promoted_user_id: int
    demoted_registration_id: int
    demoted_user_id: int
    demoted_queue_position: int

    def as_dict(self) -> Dict[str, Any]:
        return {
            "promoted_registration_id": self.promoted_registration_id,
            "promoted_user_id": self.promoted_user_id,
            "demoted_registration_id": self.demoted_registration_id,
            "demoted_user_id": self.demoted_user_id,
            "demoted_queue_position": self.demoted_queue_position,
        }


@dataclass
class LateSwapResult:
    swaps: List[Swap] = field(default_factory=list)

    @property
    def swap_count(self) -> int:
        return len(self.swaps)

    def as_dict(self) -> Dict[str, Any]:
        return {"swap_count": self.swap_count, "swaps": [swap.as_dict() for swap in self.swaps]}


@contextmanager
def ledger_transaction():
    """Atomic block whose lock timeouts and serialization failures surface as conflicts."""
    try:
        with transaction.atomic():
            yield
    except OperationalError as exc:
        logger.warning("Ledger transaction aborted: %s", exc)
        raise ConcurrencyConflict() from exc


def lock_game(game_id: int) -> Game:
    try:
        return Game.objects.select_for_update().get(id=game_id)
    except Game.DoesNotExist:
        raise GameNotFound()


def with_conflict_retry(fn, *args, attempts: Optional[int] = None, **kwargs):
    """Call ``fn`` and retry it a bounded number of times on ConcurrencyConflict."""
    attempts = attempts or settings.CONFLICT_RETRY_ATTEMPTS
    for attempt in range(1, attempts + 1):
        try:
            return fn(*args, **kwargs)
        except ConcurrencyConflict:
            if attempt >= attempts:
                raise
            logger.info("Retrying %s after conflict (%s/%s)", fn.__name__, attempt, attempts)
            # Jittered linear backoff
            time.sleep(RETRY_BACKOFF_SECONDS * attempt + random.uniform(0, RETRY_BACKOFF_SECONDS))


def register(user, game_id: int, now=None) -> RegisterResult:
    now = now or timezone.now()
    try:
        with ledger_transaction():
            game = lock_game(game_id)
            verdict = eligibility(game, user, now)
            if not verdict.allowed:
                raise RegistrationClosed(reason=verdict.reason)
            if ledger.live_registration(game, user.id) is not None:
                raise AlreadyRegistered()

            if ledger.count_active(game) < game.max_players:
                registration = ledger.append_registration(game, user, Registration.STATUS_ACTIVE)
            else:
                if ledger.count_standby(game) >= game.max_standby:
                    raise WaitlistFull()
                registration = ledger.append_registration(
                    game, user, Registration.STATUS_STANDBY, ledger.next_queue_position(game)
                )
    except IntegrityError as exc:
        if Registration.objects.filter(
            game_id=game_id, user_id=user.id, status__in=Registration.LIVE_STATUSES
        ).exists():
            raise AlreadyRegistered() from exc
        raise ConcurrencyConflict() from exc

    logger.info(
        "User %s registered for game %s as %s (queue position %s)",
        user.id, game_id, registration.status, registration.queue_position,
    )
    return RegisterResult(registration)


def _promote_next(game: Game) -> Optional[Registration]:
    if ledger.count_active(game) >= game.max_players:
        return None
    queue = ledger.standby_queue(game, lock=True)
    if not queue:
        return None
    head = queue[0]
    ledger.mark_active(head)
    return head


def cancel(user, game_id: int) -> CancelResult:
    with ledger_transaction():
        game = lock_game(game_id)
        registration = ledger.live_registration(game, user.id, lock=True)
        if registration is None:
            raise NotRegistered()

        was_active = registration.status == Registration.STATUS_ACTIVE
        ledger.mark_cancelled(registration)
        promoted = _promote_next(game) if was_active else None
        ledger.renumber_standby(game)

        result = CancelResult(cancelled_id=registration.id)
        if promoted is not None:
            result.promoted_registration_id = promoted.id
            result.promoted_user_id = promoted.user_id
            notify_on_commit(
                [promoted.user_id],
                Notification.TYPE_PROMOTED,
                "You're in!",
                f"A spot opened up for the game on {game.date:%d/%m}. You are now on the active roster.",
                {"game_id": game.id, "registration_id": promoted.id},
            )

    logger.info(
        "User %s cancelled registration %s for game %s; promoted user %s",
        user.id, registration.id, game_id, result.promoted_user_id,
    )
    return result


@contextmanager
def sweep_lock(game_id: int):
    """One late-swap sweep in flight per game. Runs unlocked (row lock only) without Redis."""
    key = f"game:sweep:{game_id}"
    try:
        r = get_redis()
        token = acquire_lock(r, key, SWEEP_LOCK_TTL_SECONDS)
    except redis.RedisError as exc:
        logger.warning("Sweep lock unavailable for game %s, relying on the row lock: %s", game_id, exc)
        yield
        return
    if token is None:
        raise ConcurrencyConflict("A late-swap sweep is already running for this game.")
    try:
        yield
    finally:
        release_lock(r, key, token)


def _demotion_candidates(game: Game) -> List[Registration]:
    min_eta = settings.LATE_SWAP_MIN_ETA_MINUTES
    candidates = [
        registration
        for registration in ledger.active_registrations(game)
        if not registration.is_checked_in and (registration.eta_minutes or 0) >= min_eta
    ]
    # Latest arrival first; equal ETAs go in sign-up order.
    candidates.sort(key=lambda r: (-(r.eta_minutes or 0), r.created_at, r.id))
    return candidates


def process_late_swaps(game_id: int) -> LateSwapResult:
    """
    Swap checked-in standby players into the slots of active players who have
    not checked in, pairing the head of the standby queue with the latest
    active player. Zero swaps is a normal outcome.
    """
    with sweep_lock(game_id):
        with ledger_transaction():
            game = lock_game(game_id)
            demotable = _demotion_candidates(game)
            promotable = [r for r in ledger.standby_queue(game, lock=True) if r.is_checked_in]
            pairs = list(zip(promotable, demotable))
            if not pairs:
                return LateSwapResult()

            tail = ledger.next_queue_position(game)
            for promoted, _ in pairs:
                ledger.mark_active(promoted)
            for offset, (_, demoted) in enumerate(pairs):
                ledger.mark_standby(demoted, tail + offset)
            ledger.renumber_standby(game)

            swaps = []
            for promoted, demoted in pairs:
                demoted.refresh_from_db(fields=["queue_position"])
                swaps.append(
                    Swap(
                        promoted_registration_id=promoted.id,
                        promoted_user_id=promoted.user_id,
                        demoted_registration_id=demoted.id,
                        demoted_user_id=demoted.user_id,
                        demoted_queue_position=demoted.queue_position,
                    )
                )

            data = {"game_id": game.id}
            notify_on_commit(
                [swap.promoted_user_id for swap in swaps],
                Notification.TYPE_PROMOTED,
                "You're in!",
                "A late player was swapped out. You are now on the active roster.",
                data,
            )
            notify_on_commit(
                [swap.demoted_user_id for swap in swaps],
                Notification.TYPE_DEMOTED,
                "Moved to standby",
                "You had not checked in, so a player waiting at the field took your spot.",
                data,
            )

    logger.info("Late-swap sweep for game %s performed %s swaps", game_id, len(swaps))
    return LateSwapResult(swaps)


def report_eta(user, game_id: int, eta_minutes: Optional[int]) -> Registration:
    if eta_minutes is not None and (isinstance(eta_minutes, bool) or not isinstance(eta_minutes, int) or eta_minutes < 0):
        raise ValidationFailed("eta_minutes must be a non-negative integer.")
    with ledger_transaction():
        game = lock_game(game_id)
        registration = ledger.live_registration(game, user.id, lock=True)
        if registration is None:
            raise NotRegistered()
        registration.eta_minutes = eta_minutes
        registration.save(update_fields=["eta_minutes", "updated_at"])
    logger.info("User %s reported ETA %s min for game %s", user.id, eta_minutes, game_id)
    return registration


def mark_no_shows(game_id: int) -> int:
    """Active players who never checked in become no-shows. They do not re-enter the queue."""
    with ledger_transaction():
        game = lock_game(game_id)
        count = Registration.objects.filter(
            game=game,
            status=Registration.STATUS_ACTIVE,
        ).exclude(check_in_status=Registration.CHECK_IN_CHECKED_IN).update(
            status=Registration.STATUS_NO_SHOW,
            check_in_status=Registration.CHECK_IN_NO_SHOW,
            updated_at=timezone.now(),
        )
    logger.info("Marked %s no-shows for game %s", count, game_id)
    return count
