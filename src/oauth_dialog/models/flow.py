"""Authorization flow models for the loopback dialog.

Contains the per-attempt authorization request, the parsed redirect and the
dialog lifecycle states.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from oauth_dialog.models.options import AuthCodeOption


class DialogState(Enum):
    """Lifecycle of a single dialog. Terminal states are never left."""

    IDLE = "idle"
    LISTENING = "listening"
    AWAITING_REDIRECT = "awaiting_redirect"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (
            DialogState.COMPLETED,
            DialogState.CANCELLED,
            DialogState.FAILED,
        )


@dataclass(frozen=True)
class AuthorizationRequest:
    """Parameters of one authorization attempt."""

    state: str
    redirect_uri: str
    options: tuple[AuthCodeOption, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class RedirectResult:
    """Parameters recovered from the provider's redirect.

    Absent parameters are empty strings.
    """

    state: str = ""
    code: str = ""
    error: str = ""

    def is_complete(self) -> bool:
        return bool(self.state) and bool(self.code or self.error)

    def is_error(self) -> bool:
        return bool(self.error)
