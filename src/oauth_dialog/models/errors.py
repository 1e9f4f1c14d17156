"""Exception hierarchy for the OAuth2 loopback dialog.

Provides one exception type per failure mode of a dialog, plus one type per
RFC 6749 section 4.1.2.1 error identifier a provider can send back.
"""

from __future__ import annotations


class OAuthDialogError(Exception):
    """Base exception for all dialog related errors."""

    pass


class ListenError(OAuthDialogError):
    """Raised when the local redirect listener cannot be bound or dies."""

    pass


class EntropyError(OAuthDialogError):
    """Raised when the secure random source is unavailable."""

    pass


class BrowserLaunchError(OAuthDialogError):
    """Raised when the OS could not open the authorization URL."""

    pass


class StateMismatchError(OAuthDialogError):
    """Raised when the redirect carries a state we did not issue.

    This indicates a possible CSRF attack. The message never contains the
    expected or received state values.
    """

    pass


class DialogStateError(OAuthDialogError):
    """Raised when a dialog is opened more than once."""

    pass


class ProviderError(OAuthDialogError):
    """Raised when the provider redirected back with an error parameter.

    Attributes:
        error_code: The raw ``error`` identifier sent by the provider.
    """

    error_code: str = ""
    description: str = "Provider error"

    def __init__(self, error_code: str | None = None):
        if error_code is not None:
            self.error_code = error_code
        super().__init__(self.description)


class InvalidRequestError(ProviderError):
    error_code = "invalid_request"
    description = "Invalid request"


class UnauthorizedClientError(ProviderError):
    error_code = "unauthorized_client"
    description = "Client not authorized"


class AccessDeniedError(ProviderError):
    error_code = "access_denied"
    description = "Access denied"


class UnsupportedResponseTypeError(ProviderError):
    error_code = "unsupported_response_type"
    description = "Unsupported response type"


class InvalidScopeError(ProviderError):
    error_code = "invalid_scope"
    description = "Invalid scope"


class ServerError(ProviderError):
    error_code = "server_error"
    description = "Server error"


class TemporarilyUnavailableError(ProviderError):
    error_code = "temporarily_unavailable"
    description = "Temporarily unavailable"


class UnknownProviderError(ProviderError):
    """Raised for error identifiers outside RFC 6749.

    The raw identifier is kept in ``error_code`` and in the message.
    """

    def __init__(self, error_code: str):
        self.error_code = error_code
        OAuthDialogError.__init__(self, f"Unknown provider error: {error_code}")
