import logging
import uuid
from typing import Optional

import redis
from django.conf import settings

logger = logging.getLogger(__name__)

_RELEASE_LOCK_LUA = """
if redis.call("get", KEYS[1]) == ARGV[1] then
  return redis.call("del", KEYS[1])
else
  return 0
end
"""


def get_redis():
    return redis.Redis.from_url(settings.REDIS_URL, decode_responses=True)


def acquire_lock(r, key: str, ttl_seconds: int) -> Optional[str]:
    """Set ``key`` if absent. Returns the owner token, or None when already held.

    Connection errors propagate so callers can decide whether to run unlocked.
    """
    token = uuid.uuid4().hex
    if r.set(key, token, nx=True, ex=ttl_seconds):
        return token
    return None


def release_lock(r, key: str, token: str) -> None:
    try:
        r.eval(_RELEASE_LOCK_LUA, 1, key, token)
    except redis.RedisError as exc:
        logger.warning("Could not release lock %s, it will expire with its TTL: %s", key, exc)
