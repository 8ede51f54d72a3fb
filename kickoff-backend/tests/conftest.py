import itertools
from datetime import datetime, time, timedelta

import pytest
from django.contrib.auth import get_user_model
from django.utils import timezone
from rest_framework.authtoken.models import Token
from rest_framework.test import APIClient

from games.models import AppSettings, Game


_user_counter = itertools.count(1)


class FakeRedis:
    """Just enough of redis.Redis for the sweep lock."""

    def __init__(self):
        self.store = {}

    def set(self, key, value, nx=False, ex=None):
        if nx and key in self.store:
            return None
        self.store[key] = value
        return True

    def get(self, key):
        return self.store.get(key)

    def delete(self, key):
        return 1 if self.store.pop(key, None) is not None else 0

    def eval(self, script, numkeys, key, token):
        if self.store.get(key) == token:
            del self.store[key]
            return 1
        return 0

    def ping(self):
        return True


@pytest.fixture(autouse=True)
def fake_redis(monkeypatch):
    fake = FakeRedis()
    monkeypatch.setattr("games.registration_service.get_redis", lambda: fake)
    return fake


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def create_user(db):
    User = get_user_model()

    def _create_user(
        email=None,
        username=None,
        password="Pass1234!",
        **extra,
    ):
        idx = next(_user_counter)
        email = email or f"user{idx}@example.com"
        username = username or f"user{idx}"
        return User.objects.create_user(
            email=email,
            username=username,
            password=password,
            **extra,
        )

    return _create_user


@pytest.fixture
def auth_client(create_user):
    def _auth_client(user=None):
        if user is None:
            user = create_user()
        client = APIClient()
        token, _ = Token.objects.get_or_create(user=user)
        client.credentials(HTTP_AUTHORIZATION=f"Token {token.key}")
        return client, user

    return _auth_client


@pytest.fixture
def staff_client(auth_client, create_user):
    def _staff_client():
        return auth_client(create_user(is_staff=True))

    return _staff_client


@pytest.fixture
def create_game(db):
    def _create_game(**fields):
        kickoff = fields.pop("kickoff_time", None)
        if kickoff is None:
            tomorrow = timezone.localdate() + timedelta(days=1)
            kickoff = timezone.make_aware(datetime.combine(tomorrow, time(18, 45)))
        fields.setdefault("date", timezone.localtime(kickoff).date())
        fields.setdefault("deadline_time", kickoff)
        fields.setdefault("status", Game.STATUS_OPEN_FOR_ALL)
        return Game.objects.create(kickoff_time=kickoff, **fields)

    return _create_game


@pytest.fixture
def venue(db):
    app_settings = AppSettings.load()
    app_settings.field_latitude = 32.0853
    app_settings.field_longitude = 34.7818
    app_settings.qr_secret_key = "field-secret"
    app_settings.save()
    return app_settings
