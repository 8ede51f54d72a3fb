import pytest
from asgiref.sync import async_to_sync
from channels.db import database_sync_to_async
from channels.testing import WebsocketCommunicator
from rest_framework.authtoken.models import Token

from config.asgi import application
from notifications import dispatcher
from notifications.models import Notification


@pytest.mark.django_db(transaction=True)
def test_user_channel_receives_notifications(create_user):
    user = create_user()
    token = Token.objects.create(user=user)

    async def scenario():
        communicator = WebsocketCommunicator(application, f"/ws/user/{user.id}/?token={token.key}")
        connected, _ = await communicator.connect()
        assert connected
        await database_sync_to_async(dispatcher.notify_users)(
            [user.id], Notification.TYPE_DEMOTED, "Moved to standby", "Late", {"game_id": 1}
        )
        message = await communicator.receive_json_from()
        await communicator.disconnect()
        return message

    message = async_to_sync(scenario)()
    assert message["type"] == "notification"
    assert message["notification"]["title"] == "Moved to standby"
    assert message["notification"]["data"] == {"game_id": 1}


@pytest.mark.django_db(transaction=True)
def test_user_channel_rejects_other_users(create_user):
    user, other = create_user(), create_user()
    token = Token.objects.create(user=user)

    async def scenario():
        communicator = WebsocketCommunicator(application, f"/ws/user/{other.id}/?token={token.key}")
        connected, _ = await communicator.connect()
        return connected

    assert async_to_sync(scenario)() is False


@pytest.mark.django_db(transaction=True)
def test_user_channel_rejects_anonymous(create_user):
    user = create_user()

    async def scenario():
        communicator = WebsocketCommunicator(application, f"/ws/user/{user.id}/")
        connected, _ = await communicator.connect()
        return connected

    assert async_to_sync(scenario)() is False
