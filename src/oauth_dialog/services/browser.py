"""Launching the user's default browser."""

from __future__ import annotations

import asyncio
import logging
import webbrowser
from typing import Protocol

from oauth_dialog.models.errors import BrowserLaunchError

logger = logging.getLogger(__name__)


class BrowserOpener(Protocol):
    """Opens a URL in the user's preferred browser.

    Returns True on success. No further interaction is expected.
    """

    def __call__(self, url: str) -> bool: ...


def open_in_browser(url: str) -> bool:
    return webbrowser.open(url)


async def launch_browser(opener: BrowserOpener, url: str) -> None:
    """Run ``opener`` off the event loop and turn failures into errors.

    Raises:
        BrowserLaunchError: If the opener reports failure or raises
    """
    try:
        opened = await asyncio.to_thread(opener, url)
    except (webbrowser.Error, OSError) as e:
        raise BrowserLaunchError(f"Failed to open browser: {e}") from e

    if not opened:
        raise BrowserLaunchError("No browser could open the authorization URL")
    logger.info("Opened authorization URL in browser")
