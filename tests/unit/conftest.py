from datetime import datetime, timedelta, UTC

import pytest

from dropshare.models import ShareRecordModel, RateLimitDecision
from dropshare.dao.base import ShareRecordBaseDAO, RateLimitBaseDAO
from dropshare.dao.exceptions import ShareAlreadyExistsError


class InMemoryShareRecordDAO(ShareRecordBaseDAO):
    """Dict-backed share store honoring create-if-absent writes."""

    def __init__(self):
        self.records: dict[str, ShareRecordModel] = {}
        self.redis = object()  # client handle the create_link handler hands on to the rate limiter
        self.ttls: dict[str, int] = {}
        self.deleted: list[str] = []

    def put(self, record, ttl_seconds, **kwargs):
        if record.share_id in self.records:
            raise ShareAlreadyExistsError(f"Share with id '{record.share_id}' already exists.")
        self.records[record.share_id] = record
        self.ttls[record.share_id] = ttl_seconds
        return self

    def get(self, share_id, **kwargs):
        return self.records.get(share_id)

    def delete(self, share_id, **kwargs):
        self.deleted.append(share_id)
        return self.records.pop(share_id, None) is not None


class InMemoryRateLimiter(RateLimitBaseDAO):
    """Sliding-window log over an in-process clock, one list per client address."""

    def __init__(self, limit: int = 10, window_seconds: int = 10):
        self.limit = limit
        self.window = timedelta(seconds=window_seconds)
        self.log: dict[str, list[datetime]] = {}

    def check(self, client_address, **kwargs):
        now = datetime.now(UTC)
        entries = [t for t in self.log.get(client_address, []) if t > now - self.window]
        entries.append(now)
        self.log[client_address] = entries
        return RateLimitDecision(
            allowed=len(entries) <= self.limit,
            limit=self.limit,
            remaining=max(0, self.limit - len(entries)),
            reset_at=entries[0] + self.window,
        )


@pytest.fixture
def share_dao() -> InMemoryShareRecordDAO:
    return InMemoryShareRecordDAO()


@pytest.fixture
def rate_limiter() -> InMemoryRateLimiter:
    return InMemoryRateLimiter()
