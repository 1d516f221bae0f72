"""Sliding-window rate limiter backed by Redis

Each client address owns a sorted set of request timestamps (milliseconds).
A check runs as one transactional pipeline, i.e. a single round trip:

    ZREMRANGEBYSCORE <key> 0 <now - window>     drop requests that left the window
    ZADD <key> <now> <unique member>            record this request (allowed or not)
    ZCARD <key>                                 requests inside the window
    ZRANGE <key> 0 0 WITHSCORES                 oldest request inside the window
    PEXPIRE <key> <window>                      let idle clients disappear

Example:
    >>> limiter = RateLimitRedisDAO(redis_client=client, limit=10, window_seconds=10)
    >>> decision = limiter.check('203.0.113.7')
    >>> decision.allowed, decision.remaining
    (True, 9)
"""

import uuid
from datetime import datetime, UTC

from beartype import beartype

from dropshare.models import RateLimitDecision
from dropshare.dao.base import RateLimitBaseDAO
from dropshare.dao.redis.mixins import RedisClientMixin
from dropshare.dao.redis.helpers import handle_redis_connection_error
from dropshare.constants import RateLimit


class RateLimitRedisDAO(RedisClientMixin, RateLimitBaseDAO):
    """Redis-based sliding-window rate limiter

    Attributes:
        limit (int):
            Maximum requests per client address inside the window.
        window_ms (int):
            Window length in milliseconds.
    """

    def __init__(self, *, limit: int = RateLimit.LIMIT, window_seconds: int = RateLimit.WINDOW_SECONDS, **kwargs):
        if limit < 1:
            raise ValueError(f'Rate limit must be a positive integer (given value: {limit}).')
        if window_seconds < 1:
            raise ValueError(f'Rate limit window must be a positive integer (given value: {window_seconds}).')

        super().__init__(**kwargs)
        self.limit = int(limit)
        self.window_ms = int(window_seconds) * 1000

    @handle_redis_connection_error
    @beartype
    def check(self, client_address: str, **kwargs) -> RateLimitDecision:
        """Record a request and decide whether it fits into the sliding window

        NOTE: denied requests are recorded as well, so a client that keeps
              hammering the endpoint stays throttled until it backs off.

        Returns:
            RateLimitDecision: allow/deny plus quota metadata.

        Raises:
            DataStoreError:
                If Redis connectivity issues occur (the limiter fails closed).
        """
        key = self.keys.rate_limit_key(client_address)
        now_ms = int(datetime.now(UTC).timestamp() * 1000)
        member = f'{now_ms}:{uuid.uuid4().hex}'

        with self.redis.pipeline(transaction=True) as pipe:
            pipe.zremrangebyscore(key, 0, now_ms - self.window_ms)
            pipe.zadd(key, {member: now_ms})
            pipe.zcard(key)
            pipe.zrange(key, 0, 0, withscores=True)
            pipe.pexpire(key, self.window_ms)
            _, _, count, oldest, _ = pipe.execute()

        oldest_ms = int(oldest[0][1]) if oldest else now_ms
        return RateLimitDecision(
            allowed=count <= self.limit,
            limit=self.limit,
            remaining=max(0, self.limit - count),
            reset_at=datetime.fromtimestamp((oldest_ms + self.window_ms) / 1000, tz=UTC),
        )
