"""Request and handler helpers for the dropshare lambda functions

URL builders (`base_url`, `share_url`, `download_url`), request inspection
(`get_header`, `client_address`) and two handler decorators
(`require_environment`, `guarantee_500_response`).

    >>> share_url('V1StGXR8_Z', base_url({'requestContext': {'domainName': 'share.example.com'}}))
    'https://share.example.com/share/V1StGXR8_Z'
"""

import os
import json
import logging
import functools
from typing import Any
from urllib.parse import quote
from collections.abc import Callable

from dropshare.constants import FALLBACK_CLIENT_ADDRESS
from dropshare.exceptions import MissingEnvironmentVariableError
from dropshare.utils.runtime import running_locally


logger = logging.getLogger(__name__)

LOCAL_BASE_URL = 'http://localhost:3000'


def base_url(event: dict[str, Any]) -> str:
    """Public base URL the request came in on.

    Default execute-api hosts need the stage in the path; custom domains map the
    stage through a base path mapping and don't. Events without a domain
    (SAM CLI, direct invokes) resolve to the local API address.
    """
    context = event.get('requestContext') or {}
    domain = context.get('domainName')
    if not domain:
        return LOCAL_BASE_URL
    if '.execute-api.' in domain:
        return f'https://{domain}/{context.get("stage", "")}'
    return f'https://{domain}'


def share_url(share_id: str, base: str) -> str:
    """Get string representation of the share page URL

    Args:
        share_id (str): share identifier
        base (str): public base URL of the deployment

    Returns:
        str: share page URL, e.g. 'https://share.example.com/share/V1StGXR8_Z'
    """
    return f'{base.rstrip("/")}/share/{share_id}'


def download_url(url: str, filename: str) -> str:
    """Build a URL that makes object storage serve the file as an attachment

    Example:
        >>> download_url('https://store.example/abc', 'my report.pdf')
        'https://store.example/abc?download=my%20report.pdf'
    """
    separator = '&' if '?' in url else '?'
    return f'{url}{separator}download={quote(filename, safe="")}'


def get_header(event: dict[str, Any], name: str) -> str | None:
    """Case-insensitive lookup of a request header on an API Gateway event."""
    headers = event.get('headers') or {}
    wanted = name.lower()
    for key, value in headers.items():
        if key.lower() == wanted:
            return value
    return None


def client_address(event: dict[str, Any]) -> str:
    """Extract the client address used to key rate limiting

    Uses the first entry of X-Forwarded-For, falling back to the loopback address.

    NOTE: X-Forwarded-For is client controlled unless a trusted proxy overwrites it.
          API Gateway appends the real source IP as the last entry, so the first
          entry is spoofable.

    Example:
        >>> client_address({'headers': {'X-Forwarded-For': '203.0.113.7, 10.0.0.1'}})
        '203.0.113.7'
        >>> client_address({})
        '127.0.0.1'
    """
    forwarded = get_header(event, 'X-Forwarded-For')
    if forwarded:
        first = forwarded.split(',')[0].strip()
        if first:
            return first
    return FALLBACK_CLIENT_ADDRESS


def require_environment(*names: str) -> Callable:
    """Refuse to call the decorated function while any of `names` is unset or empty.

    Raises:
        MissingEnvironmentVariableError: listing every missing name, quoted.
    """

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            if missing := [f"'{name}'" for name in names if not os.getenv(name)]:
                raise MissingEnvironmentVariableError(f'Missing required environment variables: {", ".join(missing)}')
            return func(*args, **kwargs)

        return wrapper

    return decorator


def guarantee_500_response(handler: Callable) -> Callable:
    """Decorator: respond with a generic 500 when a lambda handler raises unexpectedly

    The exception is logged with its traceback. Backend details never reach the client.
    When running locally the exception is re-raised to ease debugging.
    """

    @functools.wraps(handler)
    def wrapper(event: dict[str, Any], context: Any) -> dict[str, Any]:
        try:
            return handler(event, context)
        except Exception:
            if running_locally():
                raise
            logger.exception('Unhandled exception in lambda handler. Responding with 500.')
            return {
                'statusCode': 500,
                'headers': {'Content-Type': 'application/json'},
                'body': json.dumps({'message': 'Internal Server Error'}),
            }

    return wrapper
