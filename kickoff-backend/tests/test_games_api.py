from datetime import timedelta

import pytest
from django.utils import timezone

from games import game_store
from games.errors import GameNotFound, ValidationFailed
from games.models import Game, Registration


def _game_payload(**overrides):
    kickoff = timezone.now() + timedelta(days=3)
    payload = {
        "date": timezone.localtime(kickoff).date().isoformat(),
        "kickoff_time": kickoff.isoformat(),
        "deadline_time": kickoff.isoformat(),
    }
    payload.update(overrides)
    return payload


@pytest.mark.django_db
def test_current_game_is_earliest_upcoming(create_game):
    now = timezone.now()
    create_game(kickoff_time=now - timedelta(days=2))
    create_game(kickoff_time=now + timedelta(days=1), status=Game.STATUS_CANCELLED)
    expected = create_game(kickoff_time=now + timedelta(days=2), status=Game.STATUS_SCHEDULED)
    create_game(kickoff_time=now + timedelta(days=9))

    assert game_store.fetch_current_game() == expected


@pytest.mark.django_db
def test_current_game_none():
    assert game_store.fetch_current_game() is None


@pytest.mark.django_db
def test_current_game_endpoint_includes_own_registration(auth_client, create_game):
    game = create_game()
    client, user = auth_client()
    client.post(f"/api/games/{game.id}/register/")

    response = client.get("/api/games/current/")

    assert response.status_code == 200
    assert response.data["game"]["id"] == game.id
    assert response.data["registration"]["status"] == Registration.STATUS_ACTIVE
    assert response.data["registration"]["user"]["id"] == user.id


@pytest.mark.django_db
def test_create_game_requires_staff(auth_client, staff_client):
    client, _ = auth_client()
    assert client.post("/api/games/", _game_payload(), format="json").status_code == 403

    client, _ = staff_client()
    response = client.post("/api/games/", _game_payload(), format="json")
    assert response.status_code == 201
    assert response.data["max_players"] == 15
    assert response.data["max_standby"] == 10
    assert response.data["status"] == Game.STATUS_SCHEDULED


@pytest.mark.django_db
def test_create_game_rejects_bad_capacity(staff_client):
    client, _ = staff_client()
    assert client.post("/api/games/", _game_payload(max_players=0), format="json").status_code == 400
    assert client.post("/api/games/", _game_payload(max_standby=-1), format="json").status_code == 400

    with pytest.raises(ValidationFailed):
        game_store.create_game(**{**_game_payload(), "max_players": 0})


@pytest.mark.django_db
def test_create_game_rejects_wave2_before_wave1(staff_client):
    client, _ = staff_client()
    now = timezone.now()
    payload = _game_payload(
        wave1_opens_at=(now + timedelta(hours=2)).isoformat(),
        wave2_opens_at=(now + timedelta(hours=1)).isoformat(),
    )
    response = client.post("/api/games/", payload, format="json")
    assert response.status_code == 400
    assert "wave2_opens_at" in response.data


@pytest.mark.django_db
def test_missing_game_is_404(auth_client):
    client, _ = auth_client()
    response = client.get("/api/games/999999/")
    assert response.status_code == 404
    assert response.data["kind"] == "game_not_found"

    with pytest.raises(GameNotFound):
        game_store.get_game(999999)


@pytest.mark.django_db
def test_delete_game_cascades(staff_client, create_game, create_user):
    game = create_game()
    Registration.objects.create(game=game, user=create_user())
    client, _ = staff_client()

    assert client.delete(f"/api/games/{game.id}/").status_code == 204
    assert not Registration.objects.filter(game_id=game.id).exists()
    assert client.delete(f"/api/games/{game.id}/").status_code == 404


@pytest.mark.django_db
def test_opening_a_game_notifies_after_commit(create_game, django_capture_on_commit_callbacks):
    game = create_game(status=Game.STATUS_SCHEDULED)

    with django_capture_on_commit_callbacks(execute=True) as callbacks:
        updated = game_store.update_game_status(game.id, Game.STATUS_OPEN_FOR_RESIDENTS)
    assert updated.status == Game.STATUS_OPEN_FOR_RESIDENTS
    assert len(callbacks) == 1

    with django_capture_on_commit_callbacks() as callbacks:
        game_store.update_game_status(game.id, Game.STATUS_CLOSED)
    assert callbacks == []


@pytest.mark.django_db
def test_status_endpoint(staff_client, auth_client, create_game):
    game = create_game(status=Game.STATUS_SCHEDULED)
    client, _ = auth_client()
    assert client.post(f"/api/games/{game.id}/status/", {"status": "open_for_all"}).status_code == 403

    client, _ = staff_client()
    assert client.post(f"/api/games/{game.id}/status/", {"status": "bogus"}).status_code == 400
    response = client.post(f"/api/games/{game.id}/status/", {"status": "open_for_all"})
    assert response.status_code == 200
    assert response.data["status"] == Game.STATUS_OPEN_FOR_ALL


@pytest.mark.django_db
def test_register_and_cancel_endpoints(auth_client, create_game):
    game = create_game(max_players=1)
    first_client, first = auth_client()
    second_client, second = auth_client()

    response = first_client.post(f"/api/games/{game.id}/register/")
    assert response.status_code == 201
    assert response.data["status"] == Registration.STATUS_ACTIVE
    assert response.data["queue_position"] is None

    response = first_client.post(f"/api/games/{game.id}/register/")
    assert response.status_code == 409
    assert response.data["kind"] == "already_registered"

    response = second_client.post(f"/api/games/{game.id}/register/")
    assert (response.data["status"], response.data["queue_position"]) == (Registration.STATUS_STANDBY, 1)

    response = first_client.post(f"/api/games/{game.id}/cancel/")
    assert response.status_code == 200
    assert response.data["promoted_user_id"] == second.id

    response = first_client.post(f"/api/games/{game.id}/cancel/")
    assert response.status_code == 409
    assert response.data["kind"] == "not_registered"


@pytest.mark.django_db
def test_register_endpoint_reports_closed_reason(auth_client, create_game):
    game = create_game(status=Game.STATUS_OPEN_FOR_RESIDENTS)
    client, _ = auth_client()
    response = client.post(f"/api/games/{game.id}/register/")
    assert response.status_code == 403
    assert response.data == {
        "kind": "registration_closed",
        "detail": "Registration is closed.",
        "reason": "residents_only",
    }


@pytest.mark.django_db
def test_waitlist_full_endpoint(auth_client, create_game):
    game = create_game(max_players=1, max_standby=0)
    auth_client()[0].post(f"/api/games/{game.id}/register/")
    response = auth_client()[0].post(f"/api/games/{game.id}/register/")
    assert response.status_code == 409
    assert response.data["kind"] == "waitlist_full"


@pytest.mark.django_db
def test_roster_endpoint(auth_client, create_game):
    game = create_game(max_players=2)
    clients = [auth_client() for _ in range(4)]
    for client, _ in clients:
        client.post(f"/api/games/{game.id}/register/")

    response = clients[0][0].get(f"/api/games/{game.id}/registrations/")

    assert response.status_code == 200
    assert response.data["active_count"] == 2
    assert [r["user"]["id"] for r in response.data["active"]] == [clients[0][1].id, clients[1][1].id]
    assert [r["queue_position"] for r in response.data["standby"]] == [1, 2]
    assert [r["user"]["id"] for r in response.data["standby"]] == [clients[2][1].id, clients[3][1].id]


@pytest.mark.django_db
def test_eta_endpoint(auth_client, create_game):
    game = create_game()
    client, _ = auth_client()
    assert client.post(f"/api/games/{game.id}/eta/", {"eta_minutes": 10}, format="json").status_code == 409

    client.post(f"/api/games/{game.id}/register/")
    response = client.post(f"/api/games/{game.id}/eta/", {"eta_minutes": 10}, format="json")
    assert response.status_code == 200
    assert response.data["eta_minutes"] == 10

    assert client.post(f"/api/games/{game.id}/eta/", {"eta_minutes": -5}, format="json").status_code == 400


@pytest.mark.django_db
def test_staff_only_sweeps(auth_client, staff_client, create_game):
    game = create_game()
    client, _ = auth_client()
    assert client.post(f"/api/games/{game.id}/late-swaps/").status_code == 403
    assert client.post(f"/api/games/{game.id}/no-shows/").status_code == 403

    client, _ = staff_client()
    response = client.post(f"/api/games/{game.id}/late-swaps/")
    assert response.status_code == 200
    assert response.data == {"swap_count": 0, "swaps": []}

    response = client.post(f"/api/games/{game.id}/no-shows/")
    assert response.data == {"game_id": game.id, "no_show_count": 0}


@pytest.mark.django_db
def test_requests_need_a_token(api_client):
    assert api_client.get("/api/games/current/").status_code == 401
