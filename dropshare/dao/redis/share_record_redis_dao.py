"""Data Access Object (DAO) implementation for managing share records in Redis

Responsibilities:
    - Write share records with a native Redis TTL (create-if-absent);
    - Read and validate stored share records;
    - Delete share records observed as expired (best effort).

Stored layout:
    [<prefix>:]share:<share id>  ->  {"files": [...], "createdAt": "...", "expiresAt": "..."}  EX <ttl>

Example:
    >>> from dropshare.dao.redis import ShareRecordRedisDAO

    >>> dao = ShareRecordRedisDAO(prefix="dropshare:dev")
    >>> dao.put(record, ttl_seconds=600)
    <ShareRecordRedisDAO>
    >>> dao.get(record.share_id).files[0].filename
    'report.pdf'
    >>> dao.delete(record.share_id)
    True
"""

import logging

import redis
from beartype import beartype

from dropshare.models import ShareRecordModel
from dropshare.dao.base import ShareRecordBaseDAO
from dropshare.dao.redis.mixins import RedisClientMixin
from dropshare.dao.redis.helpers import handle_redis_connection_error
from dropshare.dao.exceptions import DataStoreError, ShareAlreadyExistsError


logger = logging.getLogger(__name__)


class ShareRecordRedisDAO(RedisClientMixin, ShareRecordBaseDAO):
    """Redis-based Data Access Object (DAO) for share records

    Attributes (see RedisClientMixin):
        redis (redis.Redis):
            Redis client used to communicate with the Redis datastore.
        keys (RedisKeySchema):
            Key schema helper for generating namespaced Redis keys.
    """

    @handle_redis_connection_error
    @beartype
    def put(self, record: ShareRecordModel, ttl_seconds: int, **kwargs) -> 'ShareRecordRedisDAO':
        """Write a share record into Redis with an absolute expiration

        The write is conditional (SET NX), so a live record is never clobbered
        by a colliding share id.

        Args:
            record (ShareRecordModel):
                Share record to persist.
            ttl_seconds (int):
                Native Redis TTL for the key.

        Returns:
            ShareRecordRedisDAO: self (for method chaining)

        Raises:
            ShareAlreadyExistsError:
                If a record with the same share id is still live.
            DataStoreError:
                If a Redis connection issue occurs.
        """
        share_key = self.keys.share_key(record.share_id)
        created = self.redis.set(share_key, record.to_json(), nx=True, ex=ttl_seconds)
        if not created:
            raise ShareAlreadyExistsError(f"Share with id '{record.share_id}' already exists.")
        return self

    @handle_redis_connection_error
    @beartype
    def get(self, share_id: str, **kwargs) -> ShareRecordModel | None:
        """Retrieve and validate a stored share record

        Returns:
            ShareRecordModel | None:
                The record, or None if the key does not exist (including after
                Redis-side expiry).

        Raises:
            DataStoreError:
                If Redis connectivity issues occur or the stored value is malformed.
        """
        raw = self.redis.get(self.keys.share_key(share_id))
        if raw is None:
            return None

        try:
            return ShareRecordModel.from_json(share_id, raw)
        except ValueError as e:
            raise DataStoreError(f"Stored share record '{share_id}' is malformed.") from e

    @beartype
    def delete(self, share_id: str, **kwargs) -> bool:
        """Delete a share record (best effort)

        NOTE: the native Redis TTL is authoritative, so failures here are
              logged and swallowed rather than surfaced to the caller.

        Returns:
            bool: True if a key was removed, False otherwise.
        """
        try:
            return bool(self.redis.delete(self.keys.share_key(share_id)))
        except redis.exceptions.RedisError:
            logger.warning(
                'Failed to delete expired share record.',
                exc_info=True,
                extra={'shareId': share_id},
            )
            return False
