import asyncio
from collections.abc import Callable
from urllib.parse import urlsplit

import pytest

from oauth_dialog.models.config import OAuth2Config


async def wait_until(predicate: Callable[[], bool], timeout: float = 5.0) -> None:
    """Poll ``predicate`` until it holds or ``timeout`` expires."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("Condition not met in time")
        await asyncio.sleep(0.01)


async def send_raw_get(
    base_uri: str, target: str
) -> tuple[int, dict[str, str], str]:
    """Send a GET with a verbatim request target, fragment included.

    HTTP clients strip fragments before sending, so this writes the request
    line by hand.

    Returns:
        Tuple of (status_code, lowercased headers, body)
    """
    parts = urlsplit(base_uri)
    reader, writer = await asyncio.open_connection(parts.hostname, parts.port)
    try:
        writer.write(
            (
                f"GET {target} HTTP/1.1\r\n"
                f"Host: {parts.netloc}\r\n"
                "Connection: close\r\n"
                "\r\n"
            ).encode("ascii")
        )
        await writer.drain()
        raw = await asyncio.wait_for(reader.read(), timeout=5.0)
    finally:
        writer.close()
        await writer.wait_closed()

    head, _, body = raw.partition(b"\r\n\r\n")
    lines = head.decode("latin-1").split("\r\n")
    status = int(lines[0].split()[1])
    headers = {}
    for line in lines[1:]:
        name, _, value = line.partition(":")
        headers[name.strip().lower()] = value.strip()
    return status, headers, body.decode("utf-8")


@pytest.fixture
def oauth_config() -> OAuth2Config:
    return OAuth2Config(
        client_id="abc",
        authorization_endpoint="https://auth.example.com/authorize",
        scopes=("openid", "profile"),
    )
