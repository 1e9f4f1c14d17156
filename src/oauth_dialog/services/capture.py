"""Loopback HTTP listener that captures the provider's redirect.

Binds an OS-assigned port on the loopback interface, serves any number of
requests, and hands the first complete redirect to the dialog through a
one-shot handoff. Everything else (favicon fetches, prefetches, retries after
the first success) is answered without reaching the dialog.
"""

from __future__ import annotations

import asyncio
import logging
import socket
from typing import Any, Mapping
from urllib.parse import parse_qs, unquote, urlsplit

import uvicorn
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import Response
from starlette.routing import Route

from oauth_dialog.models.errors import ListenError
from oauth_dialog.models.flow import RedirectResult
from oauth_dialog.primitives.oneshot import OneShot
from oauth_dialog.services.responder import (
    SuccessResponder,
    default_success_responder,
    render_success,
)

logger = logging.getLogger(__name__)

LOOPBACK_HOST = "127.0.0.1"
LISTEN_BACKLOG = 16
STARTUP_POLL_INTERVAL = 0.01
SHUTDOWN_TIMEOUT = 5.0


def request_target(scope: Mapping[str, Any]) -> str:
    """Rebuild the raw request target (path, query and fragment) from ASGI scope.

    Relies on the h11 protocol backend, which leaves any ``#fragment`` in
    ``raw_path`` or ``query_string`` instead of discarding it.
    """
    raw_path = scope.get("raw_path") or scope["path"].encode("latin-1")
    query_string = scope.get("query_string", b"")
    target = raw_path + b"?" + query_string if query_string else raw_path
    return target.decode("latin-1")


def parse_fragment(fragment: str) -> dict[str, str]:
    """Split a URL fragment into key/value pairs.

    Pieces that are not exactly ``key=value`` are skipped.
    """
    params: dict[str, str] = {}
    if not fragment:
        return params

    for piece in unquote(fragment).split("&"):
        kv = piece.split("=")
        if len(kv) == 2:
            params[kv[0]] = kv[1]
    return params


def parse_redirect_target(target: str) -> tuple[RedirectResult, str]:
    """Parse a redirect request target.

    Query string values win; the fragment is only consulted for parameters
    the query string leaves empty.

    Returns:
        Tuple of (result, raw_fragment)
    """
    parts = urlsplit(target)
    query = parse_qs(parts.query, keep_blank_values=True)
    fragment = parse_fragment(parts.fragment)

    def get_param(key: str) -> str:
        values = query.get(key, [])
        if values and values[0]:
            return values[0]
        return fragment.get(key, "")

    result = RedirectResult(
        state=get_param("state"),
        code=get_param("code"),
        error=get_param("error"),
    )
    return result, parts.fragment


class RedirectCapture:
    """Single-use loopback server for one authorization redirect.

    Lifecycle: ``bind()`` reserves the port, ``start()`` begins serving in a
    background task, ``stop()`` shuts the server down and releases the port.
    """

    def __init__(
        self,
        completion: OneShot[RedirectResult],
        success_responder: SuccessResponder = default_success_responder,
        host: str = LOOPBACK_HOST,
    ) -> None:
        self.host = host
        self.port: int | None = None

        self._completion = completion
        self._success_responder = success_responder
        self._socket: socket.socket | None = None
        self._server: uvicorn.Server | None = None
        self._serve_task: asyncio.Task[None] | None = None

        # Starlette also routes HEAD here; the handler turns it away.
        self._app = Starlette(
            routes=[Route("/{path:path}", self._handle_redirect, methods=["GET"])]
        )

    @property
    def redirect_uri(self) -> str:
        if self.port is None:
            raise RuntimeError("Capture is not bound")
        return f"http://{self.host}:{self.port}"

    @property
    def serve_task(self) -> asyncio.Task[None] | None:
        return self._serve_task

    def bind(self) -> tuple[str, int]:
        """Reserve an OS-assigned port and start listening on it.

        Raises:
            ListenError: If no port can be bound
        """
        if self._socket is not None:
            raise RuntimeError("Capture is already bound")

        sock = None
        try:
            sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
            sock.bind((self.host, 0))
            sock.listen(LISTEN_BACKLOG)
        except OSError as e:
            if sock is not None:
                sock.close()
            raise ListenError(f"Failed to bind redirect listener: {e}") from e

        self._socket = sock
        self.host, self.port = sock.getsockname()[:2]
        logger.debug(f"Redirect listener bound to {self.host}:{self.port}")
        return self.host, self.port

    async def start(self) -> None:
        """Start serving on the bound socket in a background task.

        Returns once the server accepts connections.

        Raises:
            ListenError: If the server fails during startup
        """
        if self._socket is None:
            raise RuntimeError("Capture must be bound before starting")
        if self._serve_task is not None:
            return

        config = uvicorn.Config(
            app=self._app,
            http="h11",
            ws="none",
            lifespan="off",
            log_config=None,
            log_level="warning",
            access_log=False,
            timeout_graceful_shutdown=1,
        )
        self._server = uvicorn.Server(config)
        self._serve_task = asyncio.create_task(self._serve())

        while not self._server.started:
            if self._serve_task.done():
                error = self._serve_task.exception()
                raise ListenError(f"Redirect listener failed to start: {error}")
            await asyncio.sleep(STARTUP_POLL_INTERVAL)

        logger.info(f"Waiting for redirect on {self.redirect_uri}")

    async def _serve(self) -> None:
        await self._server.serve(sockets=[self._socket])

    async def stop(self) -> None:
        """Stop the server and release the port. Safe to call multiple times."""
        task = self._serve_task
        if task is not None and not task.done():
            self._server.should_exit = True
            done, _ = await asyncio.wait({task}, timeout=SHUTDOWN_TIMEOUT)
            if not done:
                logger.warning("Redirect listener did not stop in time, cancelling")
                task.cancel()
                await asyncio.gather(task, return_exceptions=True)
        self._serve_task = None

        if self._socket is not None:
            self._socket.close()
            self._socket = None
            logger.debug("Redirect listener closed")

    async def _handle_redirect(self, request: Request) -> Response:
        """Handle one request on the redirect listener."""
        if request.method != "GET":
            logger.debug(f"Rejecting {request.method} request")
            return Response(status_code=405, headers={"Allow": "GET"})

        result, fragment = parse_redirect_target(request_target(request.scope))

        if not result.is_complete():
            logger.debug(f"Ignoring incomplete request: {request.scope['path']}")
            return Response(status_code=404, headers={"X-Fragment": fragment})

        # Rendered before delivery: delivery lets the dialog stop this server.
        response = await render_success(self._success_responder, request)

        if self._completion.fulfil(result):
            logger.debug("Redirect captured")
        else:
            logger.warning("Dropping redirect received after completion")

        return response
