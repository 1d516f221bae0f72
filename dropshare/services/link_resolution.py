"""Share link resolution

LinkResolutionService treats a record as gone once `expires_at` has passed, even
if Redis has not evicted it yet, and deletes it on the spot. Missing and expired
shares are indistinguishable to callers.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, UTC

from dropshare.models import SharedFileModel
from dropshare.dao.base import ShareRecordBaseDAO
from dropshare.exceptions import ShareNotFoundError


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolvedShare:
    share_id: str
    files: tuple[SharedFileModel, ...]
    minutes_remaining: int
    expires_at: datetime


class LinkResolutionService:
    def __init__(self, share_dao: ShareRecordBaseDAO):
        self.share_dao = share_dao

    def resolve(self, share_id: str) -> ResolvedShare:
        """Look up a share and enforce its expiry.

        Args:
            share_id (str):
                Identifier taken from the share URL.

        Returns:
            ResolvedShare: the files and whole minutes left (floored, never negative).

        Raises:
            ShareNotFoundError:
                If the share does not exist or has expired.
            DataStoreError:
                On backend failures or malformed stored data.
        """
        record = self.share_dao.get(share_id)
        if record is None:
            raise ShareNotFoundError(f"Share '{share_id}' not found.")

        now = datetime.now(UTC)
        if record.is_expired(now):
            logger.info('Share record expired but not yet evicted. Deleting it.', extra={'shareId': share_id})
            self.share_dao.delete(share_id)
            raise ShareNotFoundError(f"Share '{share_id}' not found.")

        seconds_left = (record.expires_at - now).total_seconds()
        return ResolvedShare(
            share_id=share_id,
            files=record.files,
            minutes_remaining=max(0, int(seconds_left // 60)),
            expires_at=record.expires_at,
        )
