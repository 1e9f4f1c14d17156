"""Pages shown in the user's browser once the redirect is captured."""

from __future__ import annotations

import inspect
import logging
from typing import Awaitable, Callable, Union

from starlette.requests import Request
from starlette.responses import HTMLResponse, Response

logger = logging.getLogger(__name__)

SuccessResponder = Callable[[Request], Union[Response, Awaitable[Response]]]

FALLBACK_PAGE = "Authorization complete."


def default_success_responder(request: Request) -> Response:
    return HTMLResponse("You can close this window.")


async def render_success(responder: SuccessResponder, request: Request) -> Response:
    """Run a success responder, containing any failure.

    The authorization outcome is decided before rendering starts, so a
    broken responder only degrades the page, never the result.
    """
    try:
        response = responder(request)
        if inspect.isawaitable(response):
            response = await response
        if not isinstance(response, Response):
            raise TypeError(f"responder returned {type(response).__name__}")
        return response
    except Exception as e:
        logger.warning(f"Success responder failed: {e}")
        return HTMLResponse(FALLBACK_PAGE)
