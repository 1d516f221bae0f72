"""Data models shared by the share-link lifecycle.

Classes:
    SharedFileModel:
        One downloadable file: object storage URL plus display filename.

    ShareRecordModel:
        Persisted metadata describing one batch of shared files and its expiry.

    RateLimitDecision:
        Outcome of a single rate limiter check (not persisted by this app).

Example:
    >>> from datetime import datetime, timedelta, UTC
    >>> now = datetime.now(UTC)
    >>> record = ShareRecordModel(
    ...     share_id='V1StGXR8_Z',
    ...     files=(SharedFileModel(url='https://store.example/abc', filename='report.pdf'),),
    ...     created_at=now,
    ...     expires_at=now + timedelta(minutes=10),
    ... )
    >>> ShareRecordModel.from_json('V1StGXR8_Z', record.to_json()).files == record.files
    True
"""

import json
import math
from dataclasses import dataclass
from datetime import datetime, UTC


@dataclass(frozen=True)
class SharedFileModel:
    url: str       # Opaque reference into external object storage
    filename: str  # Display name supplied by the uploading client (untrusted)

    def to_dict(self) -> dict[str, str]:
        return {'url': self.url, 'filename': self.filename}


@dataclass(frozen=True)
class ShareRecordModel:
    share_id: str                         # Opaque short identifier, storage key suffix
    files: tuple[SharedFileModel, ...]    # Ordered, non-empty at creation
    created_at: datetime                  # Creation time (UTC)
    expires_at: datetime                  # created_at + share TTL

    def is_expired(self, now: datetime | None = None) -> bool:
        now = now or datetime.now(UTC)
        return now >= self.expires_at

    def to_json(self) -> str:
        """Serialize to the stored JSON layout (share id lives in the key, not the value)."""
        return json.dumps(
            {
                'files': [f.to_dict() for f in self.files],
                'createdAt': _isoformat(self.created_at),
                'expiresAt': _isoformat(self.expires_at),
            }
        )

    @classmethod
    def from_json(cls, share_id: str, raw: str | bytes) -> 'ShareRecordModel':
        """Deserialize and validate a stored share record.

        Args:
            share_id (str):
                Identifier the record was stored under.
            raw (str | bytes):
                JSON document as written by to_json().

        Returns:
            ShareRecordModel: the validated record.

        Raises:
            ValueError:
                If the document is not JSON or does not have the expected shape.
        """
        try:
            payload = json.loads(raw)
        except (TypeError, json.JSONDecodeError) as e:
            raise ValueError('Share record is not valid JSON') from e

        if not isinstance(payload, dict):
            raise ValueError('Share record must be a JSON object')

        files = payload.get('files')
        if not isinstance(files, list) or not files:
            raise ValueError("Share record 'files' must be a non-empty list")

        parsed_files = []
        for i, item in enumerate(files):
            if not isinstance(item, dict):
                raise ValueError(f'Share record file #{i} must be an object')
            url, filename = item.get('url'), item.get('filename')
            if not isinstance(url, str) or not isinstance(filename, str):
                raise ValueError(f"Share record file #{i} must have string 'url' and 'filename'")
            parsed_files.append(SharedFileModel(url=url, filename=filename))

        return cls(
            share_id=share_id,
            files=tuple(parsed_files),
            created_at=_parse_timestamp(payload.get('createdAt'), 'createdAt'),
            expires_at=_parse_timestamp(payload.get('expiresAt'), 'expiresAt'),
        )


@dataclass(frozen=True)
class RateLimitDecision:
    """Outcome of a rate limiter check.

    Attributes:
        allowed (bool):
            Whether the request may proceed.
        limit (int):
            Maximum requests per window.
        remaining (int):
            Requests left in the current window (never negative).
        reset_at (datetime):
            Moment the oldest counted request leaves the window.
    """

    allowed: bool
    limit: int
    remaining: int
    reset_at: datetime

    @property
    def retry_after(self) -> int:
        """Whole seconds until the quota frees up (rounded up, at least 1 when denied)."""
        delta = (self.reset_at - datetime.now(UTC)).total_seconds()
        return max(0 if self.allowed else 1, math.ceil(delta))

    def headers(self) -> dict[str, str]:
        return {
            'X-RateLimit-Limit': str(self.limit),
            'X-RateLimit-Remaining': str(self.remaining),
            'X-RateLimit-Reset': str(int(self.reset_at.timestamp() * 1000)),
        }


def _isoformat(dt: datetime) -> str:
    return dt.astimezone(UTC).isoformat(timespec='milliseconds').replace('+00:00', 'Z')


def _parse_timestamp(value: object, field: str) -> datetime:
    if not isinstance(value, str):
        raise ValueError(f"Share record '{field}' must be an ISO-8601 string")
    try:
        parsed = datetime.fromisoformat(value.replace('Z', '+00:00'))
    except ValueError as e:
        raise ValueError(f"Share record '{field}' is not a valid timestamp: {value!r}") from e
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed
