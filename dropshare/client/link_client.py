"""HTTP client for the create-link endpoint

Example:
    >>> client = LinkClient('https://share.example.com')
    >>> share_id = client.create_link([SharedFileModel(url='https://store.example/abc', filename='report.pdf')])
    >>> client.share_url(share_id)
    'https://share.example.com/share/V1StGXR8_Z'
"""

import json
import logging
import urllib.error
import urllib.request

from dropshare.models import SharedFileModel
from dropshare.client.exceptions import LinkCreationError
from dropshare.utils.helpers import share_url


logger = logging.getLogger(__name__)


class LinkClient:
    def __init__(self, api_url: str, timeout: float = 10.0):
        self.api_url = api_url.rstrip('/')
        self.timeout = timeout

    def share_url(self, share_id: str) -> str:
        return share_url(share_id, self.api_url)

    def create_link(self, files: list[SharedFileModel]) -> str:
        """POST the uploaded files to /create-link and return the new share id.

        Raises:
            LinkCreationError:
                On non-2xx responses (with the server's message and code) or when
                the server is unreachable.
        """
        payload = json.dumps({'files': [f.to_dict() for f in files]}).encode('utf-8')
        request = urllib.request.Request(
            f'{self.api_url}/create-link',
            data=payload,
            method='POST',
            headers={'Content-Type': 'application/json', 'Accept': 'application/json'},
        )

        try:
            with urllib.request.urlopen(request, timeout=self.timeout) as r:  # noqa: S310
                body = json.load(r)
                remaining = r.headers.get('X-RateLimit-Remaining')
        except urllib.error.HTTPError as e:
            raise self._error_from_response(e) from e
        except urllib.error.URLError as e:
            raise LinkCreationError(f'Failed to reach {self.api_url}: {e.reason}') from e

        logger.debug('Share link created.', extra={'shareId': body.get('shareId'), 'rateLimitRemaining': remaining})
        share_id = body.get('shareId')
        if not share_id:
            raise LinkCreationError('Failed to create share link: response has no shareId')
        return share_id

    @staticmethod
    def _error_from_response(e: urllib.error.HTTPError) -> LinkCreationError:
        try:
            data = json.loads(e.read() or b'{}')
        except ValueError:
            data = {}
        if not isinstance(data, dict):
            data = {}

        retry_after = e.headers.get('Retry-After') if e.headers else None
        return LinkCreationError(
            data.get('message') or 'Failed to create share link',
            status=e.code,
            code=data.get('code'),
            retry_after=int(retry_after) if retry_after and retry_after.isdigit() else None,
        )
