from starlette.requests import Request
from starlette.responses import HTMLResponse, PlainTextResponse, Response

from oauth_dialog.services.responder import (
    FALLBACK_PAGE,
    default_success_responder,
    render_success,
)


def make_request() -> Request:
    return Request(
        {
            "type": "http",
            "method": "GET",
            "path": "/",
            "raw_path": b"/",
            "query_string": b"state=s1&code=XYZ",
            "headers": [],
        }
    )


class TestDefaultSuccessResponder:
    def test_renders_html_close_window_page(self):
        # Act
        response = default_success_responder(make_request())

        # Assert
        assert response.status_code == 200
        assert response.media_type == "text/html"
        assert b"You can close this window." in response.body


class TestRenderSuccess:
    async def test_sync_responder(self):
        # Act
        response = await render_success(
            lambda request: PlainTextResponse("done"), make_request()
        )

        # Assert
        assert response.body == b"done"

    async def test_async_responder(self):
        # Arrange
        async def responder(request: Request) -> Response:
            return HTMLResponse(f"<p>{request.query_params['code']}</p>")

        # Act
        response = await render_success(responder, make_request())

        # Assert
        assert response.body == b"<p>XYZ</p>"

    async def test_failing_responder_falls_back(self):
        # Arrange
        def responder(request: Request) -> Response:
            raise RuntimeError("template missing")

        # Act
        response = await render_success(responder, make_request())

        # Assert
        assert response.status_code == 200
        assert response.body == FALLBACK_PAGE.encode()

    async def test_non_response_result_falls_back(self):
        # Act
        response = await render_success(lambda request: "oops", make_request())

        # Assert
        assert response.body == FALLBACK_PAGE.encode()
