"""OAuth2 authorization dialog for native applications.

Opens the user's browser at the authorization URL and captures the
provider's redirect on a loopback listener, returning the authorization code.
Token exchange is left to the caller's OAuth2 client.
"""

from __future__ import annotations

import asyncio
import logging

from oauth_dialog.models.config import AuthorizationURLBuilder
from oauth_dialog.models.errors import DialogStateError, ListenError
from oauth_dialog.models.flow import AuthorizationRequest, DialogState, RedirectResult
from oauth_dialog.models.options import AuthCodeOption
from oauth_dialog.primitives.cancellation import CancelToken
from oauth_dialog.primitives.oneshot import OneShot
from oauth_dialog.primitives.state import generate_state, validate_state
from oauth_dialog.primitives.taxonomy import classify
from oauth_dialog.services.browser import (
    BrowserOpener,
    launch_browser,
    open_in_browser,
)
from oauth_dialog.services.capture import LOOPBACK_HOST, RedirectCapture
from oauth_dialog.services.responder import (
    SuccessResponder,
    default_success_responder,
)

logger = logging.getLogger(__name__)


class Dialog:
    """A single OAuth2 authorization attempt.

    Each dialog can be opened once. ``open()`` blocks until the redirect is
    captured or the dialog is cancelled:
    - returns the authorization code on success
    - returns None when cancelled
    - raises an ``OAuthDialogError`` subclass on any failure

    Example:
        config = OAuth2Config(
            client_id="my-client",
            authorization_endpoint="https://auth.example.com/authorize",
            scopes=("openid",),
        )
        dialog = Dialog(config)
        dialog.cancel_token.cancel_after(300)
        code = await dialog.open(ACCESS_TYPE_OFFLINE)
    """

    def __init__(
        self,
        config: AuthorizationURLBuilder,
        *,
        success_responder: SuccessResponder = default_success_responder,
        browser: BrowserOpener = open_in_browser,
        cancel_token: CancelToken | None = None,
        host: str = LOOPBACK_HOST,
    ) -> None:
        """Initialize the dialog.

        Args:
            config: OAuth2 client used to build the authorization URL
            success_responder: Renders the page shown after the redirect
            browser: Opens the authorization URL
            cancel_token: Shared cancellation signal (a new one if omitted)
            host: Loopback address to listen on
        """
        self.config = config
        self.success_responder = success_responder
        self.browser = browser
        self.cancel_token = cancel_token if cancel_token is not None else CancelToken()
        self.host = host

        self.state = DialogState.IDLE
        self.authorization_request: AuthorizationRequest | None = None
        self._completion: OneShot[RedirectResult] | None = None

    def cancel(self) -> None:
        """Cancel an in-flight ``open()``; it returns None."""
        self.cancel_token.cancel()

    async def open(self, *options: AuthCodeOption) -> str | None:
        """Run the dialog.

        Args:
            options: Extension parameters appended to the authorization URL

        Returns:
            The authorization code, or None if the dialog was cancelled

        Raises:
            DialogStateError: If this dialog was already opened
            ListenError: If the loopback listener cannot be bound or dies
            EntropyError: If no secure state can be generated
            BrowserLaunchError: If the browser could not be opened
            StateMismatchError: If the redirect carries a foreign state
            ProviderError: If the provider redirected with an error
        """
        if self.state.is_terminal:
            raise DialogStateError(f"Dialog already finished ({self.state.value})")
        if self.state is not DialogState.IDLE:
            raise DialogStateError("Dialog is already open")

        if self.cancel_token.cancelled:
            logger.debug("Dialog cancelled before opening")
            self.state = DialogState.CANCELLED
            return None

        self.state = DialogState.LISTENING
        self._completion = OneShot()
        capture = RedirectCapture(
            self._completion, self.success_responder, host=self.host
        )

        try:
            capture.bind()
            await capture.start()

            expected_state = await self._request_authorization(capture, options)
            self.state = DialogState.AWAITING_REDIRECT

            result = await self._wait_for_redirect(capture)
            if result is None:
                logger.info("Dialog cancelled")
                self.state = DialogState.CANCELLED
                return None

            code = self._resolve(expected_state, result)
            self.state = DialogState.COMPLETED
            return code

        except asyncio.CancelledError:
            self.state = DialogState.CANCELLED
            raise
        except Exception:
            self.state = DialogState.FAILED
            raise
        finally:
            self._completion.close()
            await capture.stop()

    async def _request_authorization(
        self, capture: RedirectCapture, options: tuple[AuthCodeOption, ...]
    ) -> str:
        """Build the authorization URL and send the user to it.

        Returns:
            The state value the redirect must carry back
        """
        redirect_uri = capture.redirect_uri
        state = generate_state()
        self.authorization_request = AuthorizationRequest(
            state=state, redirect_uri=redirect_uri, options=tuple(options)
        )

        url = self.config.auth_code_url(state, redirect_uri, *options)
        await launch_browser(self.browser, url)
        return state

    async def _wait_for_redirect(
        self, capture: RedirectCapture
    ) -> RedirectResult | None:
        """Race the captured redirect against cancellation.

        Returns:
            The captured redirect, or None if cancelled first

        Raises:
            ListenError: If the listener stopped before any redirect arrived
        """
        completion = asyncio.create_task(self._completion.wait())
        cancelled = asyncio.create_task(self.cancel_token.wait())
        serve_task = capture.serve_task

        try:
            done, _ = await asyncio.wait(
                {completion, cancelled, serve_task},
                return_when=asyncio.FIRST_COMPLETED,
            )
        finally:
            completion.cancel()
            cancelled.cancel()
            await asyncio.gather(completion, cancelled, return_exceptions=True)

        if completion in done:
            return completion.result()
        if cancelled in done:
            return None

        error = None if serve_task.cancelled() else serve_task.exception()
        raise ListenError("Redirect listener stopped unexpectedly") from error

    def _resolve(self, expected_state: str, result: RedirectResult) -> str:
        validate_state(expected_state, result.state)
        if result.is_error():
            raise classify(result.error)
        return result.code


async def open_dialog(
    config: AuthorizationURLBuilder, *options: AuthCodeOption, **kwargs
) -> str | None:
    """Create a dialog for ``config`` and open it.

    Keyword arguments are passed to ``Dialog``.
    """
    dialog = Dialog(config, **kwargs)
    return await dialog.open(*options)
