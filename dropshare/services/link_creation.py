"""Share link creation

LinkCreationService follows this procedure to create a share:
    - Step 1: Consult the rate limiter for the client address
    - Step 2: Validate the request body
    - Step 3: Generate a fresh share id
    - Step 4: Build the ShareRecordModel (expires 10 minutes after creation)
    - Step 5: Persist it with the same native TTL (create-if-absent, retried on collision)

Every error raised after Step 1 carries the rate limit decision in `rate_limit`,
so callers can attach quota metadata to any response.

Example:
    >>> service = LinkCreationService(share_dao=ShareRecordRedisDAO(...), rate_limiter=RateLimitRedisDAO(...))
    >>> result = service.create('203.0.113.7', '{"files": [{"url": "https://store.example/abc", "filename": "report.pdf"}]}')
    >>> result.share_id
    'V1StGXR8_Z'
    >>> result.rate_limit.remaining
    9
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta, UTC

from dropshare.models import ShareRecordModel, SharedFileModel, RateLimitDecision
from dropshare.dao.base import ShareRecordBaseDAO, RateLimitBaseDAO
from dropshare.dao.exceptions import ShareAlreadyExistsError, ShareIdCollisionError
from dropshare.exceptions import DropShareError, RateLimitExceededError
from dropshare.services.validation import parse_create_link_request
from dropshare.utils.shortener import generate_share_id
from dropshare.constants import TTL, ShareId


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CreateLinkResult:
    share_id: str
    record: ShareRecordModel
    rate_limit: RateLimitDecision


class LinkCreationService:
    def __init__(
        self,
        share_dao: ShareRecordBaseDAO,
        rate_limiter: RateLimitBaseDAO,
        ttl_seconds: int = TTL.SHARE,
        id_generator: Callable[[], str] = generate_share_id,
        max_attempts: int = ShareId.MAX_ATTEMPTS,
    ):
        self.share_dao = share_dao
        self.rate_limiter = rate_limiter
        self.ttl_seconds = ttl_seconds
        self.id_generator = id_generator
        self.max_attempts = max_attempts

    def create(self, client_address: str, body: str | bytes | None) -> CreateLinkResult:
        """Rate-limit, validate and persist a new share.

        Args:
            client_address (str):
                Rate limiting key (first X-Forwarded-For entry or loopback).
            body (str | bytes | None):
                Raw JSON request body.

        Returns:
            CreateLinkResult: the new share id, its record and the quota metadata.

        Raises:
            RateLimitExceededError:
                If the client exhausted its quota. Nothing is validated or stored.
            ValidationError:
                If the body is malformed. Nothing is stored.
            ShareIdCollisionError:
                If every generated share id was already taken.
            DataStoreError:
                On backend failures.
        """
        decision = self.rate_limiter.check(client_address)
        if not decision.allowed:
            raise RateLimitExceededError(decision)

        try:
            files = parse_create_link_request(body)
            record = self._store(files)
        except DropShareError as e:
            e.rate_limit = decision
            raise

        return CreateLinkResult(share_id=record.share_id, record=record, rate_limit=decision)

    def _store(self, files: list[SharedFileModel]) -> ShareRecordModel:
        created_at = datetime.now(UTC)
        expires_at = created_at + timedelta(seconds=self.ttl_seconds)

        for attempt in range(1, self.max_attempts + 1):
            record = ShareRecordModel(
                share_id=self.id_generator(),
                files=tuple(files),
                created_at=created_at,
                expires_at=expires_at,
            )
            try:
                self.share_dao.put(record, ttl_seconds=self.ttl_seconds)
            except ShareAlreadyExistsError:
                logger.warning(
                    'Share id collision. Retrying with a new id.',
                    extra={'shareId': record.share_id, 'attempt': attempt},
                )
            else:
                return record

        raise ShareIdCollisionError(f'No free share id found after {self.max_attempts} attempts.')
