"""Pytest configuration and shared fixtures."""

from typing import Any, Callable, Dict, Generator, List, Optional, Tuple

import pytest
from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse
from fastapi.testclient import TestClient

from pathlocale.localization.config import LocaleConfig
from pathlocale.localization.middleware import (
    BrowserLocaleMiddleware,
    get_request_locale,
    put_locale_cookie,
)

ALL_SOURCES = ["query", "cookie", "referrer", "accept_language"]


@pytest.fixture
def locale_options() -> Dict[str, Any]:
    """Provide the middleware options used across tests."""
    return {
        "default_locale": "en",
        "supported_locales": ["en", "zh-Hans"],
        "detection_order": ALL_SOURCES,
    }


@pytest.fixture
def locale_config(locale_options: Dict[str, Any]) -> LocaleConfig:
    """Provide a validated locale configuration."""
    return LocaleConfig(**locale_options)


def build_demo_app(put_cookie: bool = False, **options: Any) -> FastAPI:
    """Create an app with localized and unlocalized post routes."""
    app = FastAPI()
    app.add_middleware(BrowserLocaleMiddleware, **options)

    @app.get("/posts/{post_id}", response_class=PlainTextResponse)
    async def post(post_id: str) -> str:
        return f"post: {post_id}"

    @app.get("/{locale}/posts/{post_id}", response_class=PlainTextResponse)
    async def localized_post(post_id: str, request: Request) -> PlainTextResponse:
        locale = get_request_locale(request)
        response = PlainTextResponse(f"post: {locale} - {post_id}")
        if put_cookie:
            put_locale_cookie(request, response, locale, max_age=3600)
        return response

    return app


@pytest.fixture
def make_client() -> Generator[Callable[..., TestClient], None, None]:
    """Provide a factory for test clients of demo apps."""
    clients: List[TestClient] = []

    def factory(**options: Any) -> TestClient:
        client = TestClient(build_demo_app(**options))
        clients.append(client)
        return client

    yield factory

    for client in clients:
        client.close()


@pytest.fixture
def client(
    make_client: Callable[..., TestClient], locale_options: Dict[str, Any]
) -> TestClient:
    """Provide a test client for the demo app."""
    return make_client(**locale_options)


@pytest.fixture
def make_request() -> Callable[..., Request]:
    """Provide a factory for bare Starlette requests."""

    def factory(
        path: str = "/",
        query_string: Optional[bytes] = b"",
        headers: Optional[List[Tuple[str, str]]] = None,
        root_path: str = "",
        app: Optional[FastAPI] = None,
        method: str = "GET",
        raw_path: Optional[bytes] = None,
    ) -> Request:
        scope: Dict[str, Any] = {
            "type": "http",
            "method": method,
            "scheme": "http",
            "server": ("www.example.com", 80),
            "path": path,
            "root_path": root_path,
            "headers": [
                (name.lower().encode("latin-1"), value.encode("latin-1"))
                for name, value in (headers or [])
            ],
        }
        if query_string is not None:
            scope["query_string"] = query_string
        if app is not None:
            scope["app"] = app
        if raw_path is not None:
            scope["raw_path"] = raw_path
        return Request(scope)

    return factory
