"""Authorization URL extension parameters.

Options are opaque key/value pairs appended to the authorization URL in the
order the caller passes them. PKCE parameters travel this way too.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class AuthCodeOption:
    """A single provider-specific authorization URL parameter."""

    key: str
    value: str


def set_auth_url_param(key: str, value: str) -> AuthCodeOption:
    """Build an option that sets ``key=value`` on the authorization URL."""
    return AuthCodeOption(key=key, value=value)


# Common Google-style extensions
ACCESS_TYPE_ONLINE = set_auth_url_param("access_type", "online")
ACCESS_TYPE_OFFLINE = set_auth_url_param("access_type", "offline")
APPROVAL_FORCE = set_auth_url_param("prompt", "consent")
