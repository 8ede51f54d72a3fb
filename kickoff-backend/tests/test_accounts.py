import pytest
from django.core.management import call_command

from games.models import Game, Registration


@pytest.mark.django_db
def test_profile(auth_client, create_user):
    user = create_user(full_name="Dana Levi", is_resident=True)
    client, _ = auth_client(user)
    response = client.get("/api/accounts/me/")
    assert response.status_code == 200
    assert response.data["email"] == user.email
    assert response.data["is_resident"] is True
    assert user.name == "Dana Levi"


@pytest.mark.django_db
def test_name_falls_back_to_username(create_user):
    user = create_user(username="keeper")
    assert user.name == "keeper"


@pytest.mark.django_db
def test_healthz(api_client):
    response = api_client.get("/healthz")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


@pytest.mark.django_db
def test_seed_test_game_command():
    call_command("seed_test_game", "--active", "4", "--standby", "2", "--max-players", "4")

    game = Game.objects.get()
    assert game.status == Game.STATUS_OPEN_FOR_ALL
    assert game.is_auto_generated is False
    active = Registration.objects.filter(game=game, status=Registration.STATUS_ACTIVE)
    standby = Registration.objects.filter(game=game, status=Registration.STATUS_STANDBY)
    assert active.count() == 4
    assert not active.filter(check_in_status=Registration.CHECK_IN_CHECKED_IN).exists()
    assert sorted(standby.values_list("queue_position", flat=True)) == [1, 2]
    assert standby.filter(check_in_status=Registration.CHECK_IN_CHECKED_IN).count() == 2
