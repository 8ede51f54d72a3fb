from rest_framework.response import Response
from rest_framework.views import exception_handler

from games.errors import KickoffError


def kickoff_exception_handler(exc, context):
    """Render domain errors as ``{"kind", "detail", **data}``; defer the rest to DRF."""
    if isinstance(exc, KickoffError):
        return Response(exc.as_dict(), status=exc.http_status)
    return exception_handler(exc, context)
