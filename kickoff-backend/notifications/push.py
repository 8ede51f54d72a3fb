"""
OneSignal REST client. Delivery is best-effort: failures are logged and
reported as ``None``, never raised.
"""
import logging
from typing import Any, Dict, Iterable, Optional

import requests
from django.conf import settings

logger = logging.getLogger(__name__)

ALL_SUBSCRIBERS_SEGMENT = "Total Subscriptions"


def build_payload(
    user_ids: Optional[Iterable[int]],
    title: str,
    body: str,
    data: Optional[Dict[str, Any]] = None,
    url: Optional[str] = None,
) -> Dict[str, Any]:
    payload: Dict[str, Any] = {
        "app_id": settings.ONESIGNAL_APP_ID,
        "headings": {"en": title},
        "contents": {"en": body},
        "data": data or {},
    }
    external_ids = [str(uid) for uid in (user_ids or [])]
    if external_ids:
        payload["include_external_user_ids"] = external_ids
        payload["channel_for_external_user_ids"] = "push"
    else:
        payload["included_segments"] = [ALL_SUBSCRIBERS_SEGMENT]
    if url:
        payload["url"] = url
    return payload


def send_push(
    user_ids: Optional[Iterable[int]],
    title: str,
    body: str,
    data: Optional[Dict[str, Any]] = None,
    url: Optional[str] = None,
) -> Optional[Dict[str, Any]]:
    """Send one push. ``user_ids`` empty or None targets every subscriber."""
    if not settings.ONESIGNAL_APP_ID or not settings.ONESIGNAL_REST_API_KEY:
        logger.info("OneSignal is not configured; skipping push %r", title)
        return None

    payload = build_payload(user_ids, title, body, data, url)
    try:
        response = requests.post(
            settings.ONESIGNAL_API_URL,
            json=payload,
            headers={"Authorization": f"Basic {settings.ONESIGNAL_REST_API_KEY}"},
            timeout=settings.PUSH_TIMEOUT_SECONDS,
        )
    except requests.RequestException as exc:
        logger.warning("Push %r failed: %s", title, exc)
        return None

    if response.status_code >= 400:
        logger.warning("Push %r rejected with %s: %s", title, response.status_code, response.text[:500])
        return None
    try:
        return response.json()
    except ValueError:
        return {}
