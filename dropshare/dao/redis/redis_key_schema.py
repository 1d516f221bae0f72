import functools
from collections.abc import Callable


__all__ = ['RedisKeySchema']


def prefix_key(build: Callable[..., str]) -> Callable[..., str]:
    """Namespace the key returned by a RedisKeySchema method with the schema's prefix."""

    @functools.wraps(build)
    def namespaced(schema: 'RedisKeySchema', *args, **kwargs) -> str:
        key = build(schema, *args, **kwargs)
        return key if schema.prefix is None else f'{schema.prefix}:{key}'

    return namespaced


class RedisKeySchema:
    """Key layout for dropshare data in Redis

    Keys are `[<prefix>:]share:<share id>` and `[<prefix>:]ratelimit:<client address>`.
    The prefix is '<app name>:<app env>' in deployed lambdas, so several
    environments can share one Redis database.
    """

    def __init__(self, prefix: str | None = None):
        if not isinstance(prefix, str | None):
            raise TypeError(f'Prefix must be of type string, got {type(prefix).__name__}.')
        self.prefix = prefix

    @prefix_key
    def share_key(self, share_id: str) -> str:
        return f'share:{share_id}'

    @prefix_key
    def rate_limit_key(self, client_address: str) -> str:
        return f'ratelimit:{client_address}'
