"""Share identifier generation utility

Functions:
    generate_share_id(length=10, alphabet=ShareId.ALPHABET):
        Generate a random, URL-safe share identifier.

Example:
    >>> from dropshare.utils import generate_share_id
    >>> generate_share_id()
    'V1StGXR8_Z'
"""

import secrets

from dropshare.constants import ShareId


def generate_share_id(length: int = ShareId.LENGTH, alphabet: str = ShareId.ALPHABET) -> str:
    """Generate a random share identifier.

    The identifier is the only access control a share has, so symbols are
    drawn from a CSPRNG. With the default 64-symbol alphabet and 10 symbols
    this is 60 bits of entropy, which makes enumeration impractical.

    Args:
        length (int, optional):
            Number of symbols. Defaults to 10.

        alphabet (str, optional):
            Symbols to draw from. Defaults to the URL-safe [A-Za-z0-9_-].

    Returns:
        str: A random identifier of exactly `length` symbols.

    Raises:
        ValueError: If length is not positive or the alphabet has fewer than 2 distinct symbols.
    """
    if not isinstance(length, int) or isinstance(length, bool):
        raise TypeError(f'Length must be of type integer (given type: {type(length)}).')
    if length < 1:
        raise ValueError(f'Length must be a positive integer (given value: {length}).')
    if len(set(alphabet)) < 2:
        raise ValueError(f'Alphabet must contain at least 2 distinct symbols (given value: {alphabet!r}).')

    return ''.join(secrets.choice(alphabet) for _ in range(length))
