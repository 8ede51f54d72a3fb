"""
Row-level reads and primitive writes over the registration ledger.

Nothing here opens a transaction or checks business rules; the functions are
called by ``registration_service`` while it holds the game row lock.
"""
from typing import List, Optional, Tuple

from django.db.models import F, Max

from .models import Game, Registration


def _standby_queryset(game: Game):
    return Registration.objects.filter(game=game, status=Registration.STATUS_STANDBY).order_by(
        F("queue_position").asc(nulls_last=True), "created_at", "id"
    )


def live_registration(game: Game, user_id: int, lock: bool = False) -> Optional[Registration]:
    qs = Registration.objects.filter(game=game, user_id=user_id, status__in=Registration.LIVE_STATUSES)
    if lock:
        qs = qs.select_for_update()
    return qs.first()


def count_active(game: Game) -> int:
    return Registration.objects.filter(game=game, status=Registration.STATUS_ACTIVE).count()


def count_standby(game: Game) -> int:
    return Registration.objects.filter(game=game, status=Registration.STATUS_STANDBY).count()


def active_registrations(game: Game) -> List[Registration]:
    return list(
        Registration.objects.filter(game=game, status=Registration.STATUS_ACTIVE)
        .select_related("user")
        .order_by("created_at", "id")
    )


def standby_queue(game: Game, lock: bool = False) -> List[Registration]:
    """Standby rows in promotion order: queue_position, then created_at."""
    qs = _standby_queryset(game)
    if lock:
        qs = qs.select_for_update(of=("self",))
    return list(qs.select_related("user"))


def next_queue_position(game: Game) -> int:
    current = Registration.objects.filter(
        game=game, status=Registration.STATUS_STANDBY
    ).aggregate(top=Max("queue_position"))["top"]
    return (current or 0) + 1


def roster(game: Game) -> Tuple[List[Registration], List[Registration]]:
    return active_registrations(game), standby_queue(game)


def append_registration(game: Game, user, status: str, queue_position: Optional[int] = None) -> Registration:
    return Registration.objects.create(
        game=game,
        user=user,
        status=status,
        queue_position=queue_position if status == Registration.STATUS_STANDBY else None,
    )


def mark_cancelled(registration: Registration) -> None:
    registration.status = Registration.STATUS_CANCELLED
    registration.queue_position = None
    registration.save(update_fields=["status", "queue_position", "updated_at"])


def mark_active(registration: Registration) -> None:
    registration.status = Registration.STATUS_ACTIVE
    registration.queue_position = None
    registration.save(update_fields=["status", "queue_position", "updated_at"])


def mark_standby(registration: Registration, queue_position: int) -> None:
    registration.status = Registration.STATUS_STANDBY
    registration.queue_position = queue_position
    registration.save(update_fields=["status", "queue_position", "updated_at"])


def renumber_standby(game: Game) -> List[Registration]:
    """Re-rank the standby queue to 1..n, keeping its order.

    Positions only ever move down, in ascending order, so the per-game unique
    standby position is never violated mid-way.
    """
    queue = standby_queue(game)
    for index, registration in enumerate(queue, start=1):
        if registration.queue_position != index:
            registration.queue_position = index
            registration.save(update_fields=["queue_position", "updated_at"])
    return queue
