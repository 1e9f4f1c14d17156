"""OAuth2 client configuration used to build authorization URLs.

The dialog only needs one thing from an OAuth2 client: turn a state value, a
redirect URI and extension options into a complete authorization URL. Any
object with a matching ``auth_code_url`` method can be passed in place of
``OAuth2Config``.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Protocol
from urllib.parse import urlencode

from oauth_dialog.models.options import AuthCodeOption


class AuthorizationURLBuilder(Protocol):
    """Protocol for the OAuth2 client collaborator."""

    def auth_code_url(
        self, state: str, redirect_uri: str, *options: AuthCodeOption
    ) -> str:
        """Return the authorization URL for one authorization attempt."""
        ...


@dataclass(frozen=True)
class OAuth2Config:
    """Client registration details for an authorization server."""

    client_id: str
    authorization_endpoint: str
    scopes: tuple[str, ...] = field(default_factory=tuple)
    redirect_uri: str = ""

    def with_redirect_uri(self, redirect_uri: str) -> OAuth2Config:
        """Return a copy bound to ``redirect_uri``; the original is untouched."""
        return replace(self, redirect_uri=redirect_uri)

    def auth_code_url(
        self, state: str, redirect_uri: str = "", *options: AuthCodeOption
    ) -> str:
        """Build the complete authorization URL.

        Options are applied in order after the standard parameters. An option
        whose key is already present replaces that value in place.
        """
        params = {
            "response_type": "code",
            "client_id": self.client_id,
        }

        redirect_uri = redirect_uri or self.redirect_uri
        if redirect_uri:
            params["redirect_uri"] = redirect_uri
        if self.scopes:
            params["scope"] = " ".join(self.scopes)
        if state:
            params["state"] = state

        for option in options:
            params[option.key] = option.value

        separator = "&" if "?" in self.authorization_endpoint else "?"
        return f"{self.authorization_endpoint}{separator}{urlencode(params)}"
