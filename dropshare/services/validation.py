"""Validation of create-link request bodies.

Expected body:

    {"files": [{"url": "<absolute URL>", "filename": "<non-empty string>"}, ...]}

Every violation is collected before raising, so clients see the full list.

Example:
    >>> parse_create_link_request('{"files": []}')
    Traceback (most recent call last):
        ...
    dropshare.exceptions.ValidationError: Invalid request body: files: must contain at least 1 entry
"""

import json
from typing import Any
from urllib.parse import urlsplit

from dropshare.models import SharedFileModel
from dropshare.exceptions import ValidationError


SAFE_SCHEMES = frozenset({'http', 'https'})


def is_absolute_url(value: str) -> bool:
    """Return True if value is an absolute http(s) URL with a host.

    Other schemes are refused: stored URLs end up as download links on the share
    page, where `javascript:` or `data:` would run in the page's origin.
    """
    if not value or value != value.strip() or any(c.isspace() for c in value):
        return False
    try:
        parts = urlsplit(value)
    except ValueError:
        return False
    return parts.scheme in SAFE_SCHEMES and bool(parts.hostname)


def validate_files(payload: Any) -> list[SharedFileModel]:
    """Validate a decoded request body and return its file descriptors in order.

    Raises:
        ValidationError: with every violation found.
    """
    if not isinstance(payload, dict):
        raise ValidationError(['body: must be a JSON object'])

    files = payload.get('files')
    if files is None:
        raise ValidationError(['files: required'])
    if not isinstance(files, list):
        raise ValidationError(['files: must be a list'])
    if not files:
        raise ValidationError(['files: must contain at least 1 entry'])

    violations = []
    parsed = []
    for i, item in enumerate(files):
        if not isinstance(item, dict):
            violations.append(f'files[{i}]: must be an object')
            continue

        url, filename = item.get('url'), item.get('filename')
        if not isinstance(url, str):
            violations.append(f'files[{i}].url: required string')
        elif not is_absolute_url(url):
            violations.append(f'files[{i}].url: must be a valid absolute URL')

        if not isinstance(filename, str):
            violations.append(f'files[{i}].filename: required string')
        elif len(filename) < 1:
            violations.append(f'files[{i}].filename: must contain at least 1 character')

        if isinstance(url, str) and isinstance(filename, str):
            parsed.append(SharedFileModel(url=url, filename=filename))

    if violations:
        raise ValidationError(violations)
    return parsed


def parse_create_link_request(body: str | bytes | None) -> list[SharedFileModel]:
    """Decode a raw JSON request body and validate it.

    Raises:
        ValidationError: if the body is not JSON or fails validation.
    """
    try:
        payload = json.loads(body or '')
    except (TypeError, ValueError) as e:
        raise ValidationError(['body: must be valid JSON']) from e
    return validate_files(payload)
