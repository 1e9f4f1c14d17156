"""Mapping of RFC 6749 authorization error identifiers to exceptions."""

from __future__ import annotations

from enum import Enum
from types import MappingProxyType

from oauth_dialog.models.errors import (
    AccessDeniedError,
    InvalidRequestError,
    InvalidScopeError,
    ProviderError,
    ServerError,
    TemporarilyUnavailableError,
    UnauthorizedClientError,
    UnknownProviderError,
    UnsupportedResponseTypeError,
)


class ProviderErrorCode(str, Enum):
    """Error identifiers defined in RFC 6749 section 4.1.2.1."""

    INVALID_REQUEST = "invalid_request"
    UNAUTHORIZED_CLIENT = "unauthorized_client"
    ACCESS_DENIED = "access_denied"
    UNSUPPORTED_RESPONSE_TYPE = "unsupported_response_type"
    INVALID_SCOPE = "invalid_scope"
    SERVER_ERROR = "server_error"
    TEMPORARILY_UNAVAILABLE = "temporarily_unavailable"


ERRORS_BY_CODE: MappingProxyType[ProviderErrorCode, type[ProviderError]] = (
    MappingProxyType(
        {
            ProviderErrorCode.INVALID_REQUEST: InvalidRequestError,
            ProviderErrorCode.UNAUTHORIZED_CLIENT: UnauthorizedClientError,
            ProviderErrorCode.ACCESS_DENIED: AccessDeniedError,
            ProviderErrorCode.UNSUPPORTED_RESPONSE_TYPE: UnsupportedResponseTypeError,
            ProviderErrorCode.INVALID_SCOPE: InvalidScopeError,
            ProviderErrorCode.SERVER_ERROR: ServerError,
            ProviderErrorCode.TEMPORARILY_UNAVAILABLE: TemporarilyUnavailableError,
        }
    )
)


def classify(identifier: str) -> ProviderError:
    """Turn a redirect's ``error`` parameter into a typed exception.

    Matching is exact and case-sensitive. Identifiers outside the RFC yield
    ``UnknownProviderError`` carrying the raw value.
    """
    try:
        code = ProviderErrorCode(identifier)
    except ValueError:
        return UnknownProviderError(identifier)
    return ERRORS_BY_CODE[code]()
