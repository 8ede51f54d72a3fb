import logging
from urllib.parse import parse_qs

from channels.db import database_sync_to_async
from channels.middleware import BaseMiddleware
from rest_framework.authtoken.models import Token

logger = logging.getLogger(__name__)


@database_sync_to_async
def get_user_from_token(token_key):
    try:
        token = Token.objects.select_related("user").get(key=token_key)
        return token.user
    except Token.DoesNotExist:
        return None


def extract_token(scope):
    """Token from the ``token`` query parameter, else the Authorization header."""
    query_params = parse_qs(scope.get("query_string", b"").decode())
    if "token" in query_params:
        return query_params["token"][0]
    headers = dict(scope.get("headers", []))
    auth_header = headers.get(b"authorization", b"").decode()
    if auth_header.startswith("Token "):
        return auth_header.replace("Token ", "").strip()
    return None


class TokenAuthMiddleware(BaseMiddleware):
    """
    DRF token authentication for websocket connections.
    Runs before AuthMiddlewareStack; an unauthenticated scope is left for it
    to fill with AnonymousUser.
    """

    async def __call__(self, scope, receive, send):
        if scope["type"] != "websocket":
            return await super().__call__(scope, receive, send)

        token_key = extract_token(scope)
        if token_key:
            user = await get_user_from_token(token_key)
            if user:
                scope["user"] = user
            else:
                logger.info("Rejected websocket token")
        return await super().__call__(scope, receive, send)


def TokenAuthMiddlewareStack(inner):
    return TokenAuthMiddleware(inner)
