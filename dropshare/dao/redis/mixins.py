"""Redis client setup shared by the Redis-backed DAOs.

RedisClientMixin adopts an injected client or builds one from `redis_*`
keyword arguments, which is how lambda handlers pass the `redis` section of
their AppConfig document:

    >>> redis_config = {f'redis_{k}': v for k, v in app_config['redis'].items()}
    >>> dao = ShareRecordRedisDAO(**redis_config, prefix='dropshare:dev')

Construction PINGs the server once, so a misconfigured or unreachable Redis
fails fast with DataStoreError instead of on the first command. DAOs given the
same client share its connection pool.
"""

import redis

from dropshare.dao.redis.redis_key_schema import RedisKeySchema
from dropshare.dao.redis.helpers import connection_label
from dropshare.dao.exceptions import DataStoreError


class RedisClientMixin:
    """Attach a Redis client (`self.redis`) and a key schema (`self.keys`) to a DAO.

    Connection parameters are ignored when `redis_client` is given. Pass
    healthcheck=False when reusing a client another DAO already checked.
    Port and db may arrive as strings from configuration and are coerced to int.

    Raises:
        DataStoreError:
            If the initial healthcheck fails.
    """

    def __init__(
        self,
        redis_host: str = 'localhost',
        redis_port: int | str = 6379,
        redis_db: int | str = 0,
        redis_decode_responses: bool = True,
        redis_username: str | None = None,
        redis_password: str | None = None,
        redis_client: redis.Redis | None = None,
        prefix: str | None = None,
        healthcheck: bool = True,
    ):
        if redis_client is None:
            redis_client = redis.Redis(
                host=redis_host,
                port=int(redis_port),
                db=int(redis_db),
                decode_responses=redis_decode_responses,
                username=redis_username,
                password=redis_password,
            )

        self.redis = redis_client
        self.keys = RedisKeySchema(prefix=prefix)
        if healthcheck:
            self._healthcheck()

    def _healthcheck(self, raise_error: bool = True) -> bool:
        """PING Redis. Returns False on failure only when raise_error is False."""
        try:
            self.redis.ping()
        except (redis.exceptions.ConnectionError, redis.exceptions.TimeoutError) as e:
            if not raise_error:
                return False
            raise DataStoreError(
                f"Can't connect to Redis at {connection_label(self.redis)}. Check the provided configuration parameters."
            ) from e
        return True
