"""Anti-forgery state generation and validation.

The state parameter binds the redirect to the request that started the
dialog. It must be unguessable, so it is drawn from the OS secure random
source only.
"""

from __future__ import annotations

import secrets

from oauth_dialog.models.errors import EntropyError, StateMismatchError

MIN_STATE_BYTES = 16  # 128 bits
DEFAULT_STATE_BYTES = 32


def generate_state(nbytes: int = DEFAULT_STATE_BYTES) -> str:
    """Generate a cryptographically secure, URL-safe state parameter.

    Args:
        nbytes: Number of random bytes to draw (at least 16)

    Returns:
        Base64url encoded random string without padding

    Raises:
        ValueError: If fewer than 128 bits of entropy are requested
        EntropyError: If the secure random source is unavailable
    """
    if nbytes < MIN_STATE_BYTES:
        raise ValueError(f"state needs at least {MIN_STATE_BYTES} random bytes")

    try:
        return secrets.token_urlsafe(nbytes)
    except (OSError, NotImplementedError) as e:
        raise EntropyError(f"Secure random source unavailable: {e}") from e


def validate_state(expected: str, actual: str) -> None:
    """Validate state parameter matches expected value.

    Args:
        expected: State parameter sent in the authorization request
        actual: State parameter received on the redirect

    Raises:
        StateMismatchError: If state parameters don't match
    """
    if not secrets.compare_digest(expected.encode(), actual.encode()):
        raise StateMismatchError("State parameter mismatch - possible CSRF attack")
