import functools
from typing import Any
from collections.abc import Callable

import redis

from dropshare.dao.exceptions import DataStoreError


__all__ = []


def connection_label(client: redis.Redis) -> str:
    """Describe a client's target as host:port/db for error messages (never credentials)."""
    info = client.connection_pool.connection_kwargs
    return f'{info.get("host")}:{info.get("port")}/{info.get("db")}'


def handle_redis_connection_error[F: Callable[..., Any]](method: F) -> F:
    """Turn Redis connectivity failures inside a DAO method into DataStoreError

    Only ConnectionError and TimeoutError are translated. Other Redis errors
    (WRONGTYPE, script errors, ...) indicate bugs and propagate unchanged.

    Example:
        >>> @handle_redis_connection_error
        ... def get(self, share_id):
        ...     return self.redis.get(self.keys.share_key(share_id))
    """

    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        try:
            return method(self, *args, **kwargs)
        except (redis.exceptions.ConnectionError, redis.exceptions.TimeoutError) as e:
            raise DataStoreError(f"Can't connect to Redis at {connection_label(self.redis)}.") from e

    return wrapper
