import logging

import redis

from .errors import CacheUnavailable

logger = logging.getLogger("shorrt.cache")


class LinkCache:
    """token -> original URL in Redis. A cache built without a client is disabled."""

    def __init__(self, client: redis.Redis | None = None):
        self.client = client

    @classmethod
    def from_url(cls, redis_url: str | None) -> "LinkCache":
        if not redis_url:
            logger.info("REDIS_URL not set, caching disabled")
            return cls()
        client = redis.Redis.from_url(
            redis_url,
            decode_responses=True,
            socket_timeout=2,
            socket_connect_timeout=2,
        )
        return cls(client)

    @property
    def enabled(self) -> bool:
        return self.client is not None

    def get(self, token: str) -> str | None:
        if not self.enabled:
            return None
        try:
            return self.client.get(token)
        except redis.RedisError as exc:
            raise CacheUnavailable(f"Error querying cache: {exc}") from exc

    def set(self, token: str, original: str) -> None:
        # No TTL: expiration is checked against the store on every hit
        if not self.enabled:
            return
        try:
            self.client.set(token, original)
        except redis.RedisError as exc:
            raise CacheUnavailable(f"Error caching URL: {exc}") from exc

    def delete(self, token: str) -> None:
        if not self.enabled:
            return
        try:
            self.client.delete(token)
        except redis.RedisError as exc:
            raise CacheUnavailable(f"Error evicting URL: {exc}") from exc

    def close(self) -> None:
        if self.client is not None:
            self.client.close()
