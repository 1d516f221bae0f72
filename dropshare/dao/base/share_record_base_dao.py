"""Abstract base class for share record data access objects (DAOs).

This class establishes a consistent contract for all share record DAO
implementations, regardless of the underlying key-value store.

Responsibilities:
    - Provide an interface for writing, reading and deleting ShareRecordModel objects.
    - Standardize error handling across data store implementations.

Example:
    Typical usage with a datastore-specific implementation:

        >>> from dropshare.dao.redis import ShareRecordRedisDAO

        >>> dao = ShareRecordRedisDAO(...)
        >>> dao.put(record, ttl_seconds=600)
        >>> dao.get(record.share_id).files
        (SharedFileModel(url='https://store.example/abc', filename='report.pdf'),)
        >>> dao.delete(record.share_id)
        True
"""

from abc import ABC, abstractmethod

from dropshare.models import ShareRecordModel


class ShareRecordBaseDAO(ABC):
    """Interface for share record data access objects (DAOs).

    NOTE:
        - Records are expected to expire automatically via the store's native TTL.
          delete() exists for lazy cleanup of records observed as expired on read.
    """

    @abstractmethod
    def put(self, record: ShareRecordModel, ttl_seconds: int, **kwargs) -> 'ShareRecordBaseDAO':
        """Write a share record with an absolute expiration.

        Args:
            record (ShareRecordModel):
                The record to persist.

            ttl_seconds (int):
                Seconds until the store evicts the record.

        Returns:
            ShareRecordBaseDAO: self (for method chaining)

        Raises:
            ShareAlreadyExistsError:
                If a live record with the same share id exists.

            DataStoreError:
                If there is an error in the data store.
        """
        pass

    @abstractmethod
    def get(self, share_id: str, **kwargs) -> ShareRecordModel | None:
        """Retrieve a share record by id.

        Returns:
            ShareRecordModel | None: The record if found, otherwise None.

        Raises:
            DataStoreError:
                If there is an error in the data store or the stored record is malformed.
        """
        pass

    @abstractmethod
    def delete(self, share_id: str, **kwargs) -> bool:
        """Remove a share record (best effort).

        Returns:
            bool: True if a record was removed, False otherwise (including on store failures).
        """
        pass
