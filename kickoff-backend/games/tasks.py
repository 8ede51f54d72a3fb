import logging
from datetime import timedelta

from celery import shared_task
from django.conf import settings
from django.utils import timezone

from .errors import ConcurrencyConflict, GameNotFound
from .models import Game
from .registration_service import process_late_swaps

logger = logging.getLogger(__name__)


@shared_task
def process_late_swaps_task(game_id: int):
    try:
        result = process_late_swaps(game_id)
    except ConcurrencyConflict:
        logger.info("Late-swap sweep for game %s skipped: another sweep holds the lock", game_id)
        return None
    except GameNotFound:
        logger.warning("Late-swap sweep for missing game %s", game_id)
        return None
    return result.as_dict()


def games_due_for_sweep(now=None):
    """Upcoming games that kicked off within the last LATE_SWAP_LEAD_MINUTES. Nothing is swept before kickoff."""
    now = now or timezone.now()
    window = timedelta(minutes=settings.LATE_SWAP_LEAD_MINUTES)
    return Game.objects.filter(
        status__in=Game.UPCOMING_STATUSES,
        kickoff_time__lte=now,
        kickoff_time__gte=now - window,
    ).values_list("id", flat=True)


@shared_task
def late_swap_sweep():
    """
    Periodic trigger for late swaps just after kickoff.
    Runs every minute via Celery Beat; each game is swept in its own task.
    """
    game_ids = list(games_due_for_sweep())
    for game_id in game_ids:
        process_late_swaps_task.delay(game_id)
    if game_ids:
        logger.info("Queued late-swap sweeps for games %s", game_ids)
    return game_ids
