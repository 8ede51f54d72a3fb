import os
import django

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")
# Apps must be loaded before the websocket routing imports consumers
django.setup()

from channels.auth import AuthMiddlewareStack
from channels.routing import ProtocolTypeRouter, URLRouter
from django.core.asgi import get_asgi_application

from .middleware import TokenAuthMiddlewareStack
from .routing import websocket_urlpatterns

application = ProtocolTypeRouter(
    {
        "http": get_asgi_application(),
        "websocket": TokenAuthMiddlewareStack(AuthMiddlewareStack(URLRouter(websocket_urlpatterns))),
    }
)
