import threading
from concurrent.futures import ThreadPoolExecutor

import pytest
from django.db import connections

from games import registration_service
from games.errors import AlreadyRegistered, PreconditionFailed, WaitlistFull
from games.models import Registration
from games.registration_service import cancel, register, with_conflict_retry


@pytest.fixture
def patient_retries(settings, monkeypatch):
    settings.CONFLICT_RETRY_ATTEMPTS = 60
    monkeypatch.setattr(registration_service, "RETRY_BACKOFF_SECONDS", 0.01)


def _run_together(calls):
    """Start every call at the same moment, each on its own thread and DB connection."""
    barrier = threading.Barrier(len(calls))

    def worker(fn, args):
        try:
            barrier.wait()
            try:
                return with_conflict_retry(fn, *args)
            except PreconditionFailed as exc:
                return exc
        finally:
            connections.close_all()

    with ThreadPoolExecutor(max_workers=len(calls)) as pool:
        futures = [pool.submit(worker, fn, args) for fn, args in calls]
        return [future.result() for future in futures]


def _ledger(game):
    rows = Registration.objects.filter(game=game, status__in=Registration.LIVE_STATUSES)
    active = [r for r in rows if r.status == Registration.STATUS_ACTIVE]
    standby = sorted(
        (r for r in rows if r.status == Registration.STATUS_STANDBY), key=lambda r: r.queue_position
    )
    return active, standby


@pytest.mark.django_db(transaction=True)
def test_concurrent_burst_never_overfills(create_game, create_user, patient_retries):
    game = create_game(max_players=4, max_standby=3)
    users = [create_user() for _ in range(10)]

    results = _run_together([(register, (user, game.id)) for user in users])

    rejected = [r for r in results if isinstance(r, WaitlistFull)]
    accepted = [r for r in results if not isinstance(r, WaitlistFull)]
    assert len(rejected) == 3
    assert sorted(r.status for r in accepted) == ["active"] * 4 + ["standby"] * 3

    active, standby = _ledger(game)
    assert len(active) == 4
    assert all(r.queue_position is None for r in active)
    assert [r.queue_position for r in standby] == [1, 2, 3]
    assert len({r.user_id for r in active + standby}) == 7


@pytest.mark.django_db(transaction=True)
def test_concurrent_double_submit_registers_once(create_game, create_user, patient_retries):
    game = create_game()
    user = create_user()

    results = _run_together([(register, (user, game.id)) for _ in range(2)])

    assert sum(1 for r in results if isinstance(r, AlreadyRegistered)) == 1
    assert Registration.objects.filter(game=game, user=user).count() == 1


@pytest.mark.django_db(transaction=True)
def test_cancel_racing_register_fills_slot_once(create_game, create_user, patient_retries):
    game = create_game(max_players=1, max_standby=5)
    leaving, waiting, newcomer = create_user(), create_user(), create_user()
    register(leaving, game.id)
    register(waiting, game.id)

    _run_together([(cancel, (leaving, game.id)), (register, (newcomer, game.id))])

    active, standby = _ledger(game)
    assert [r.user_id for r in active] == [waiting.id]
    assert [(r.user_id, r.queue_position) for r in standby] == [(newcomer.id, 1)]
