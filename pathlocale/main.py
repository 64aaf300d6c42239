"""Main FastAPI application module."""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse, PlainTextResponse

from pathlocale.localization.config import localization_settings
from pathlocale.localization.middleware import (
    BrowserLocaleMiddleware,
    HeaderLocaleMiddleware,
    get_request_locale,
    put_locale_cookie,
)
from pathlocale.templates.utils import LocalizedTemplates

logging.basicConfig(
    level=logging.INFO,
    format="%(levelname)s: %(name)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="pathlocale",
    description="Locale resolution and localized redirects for web requests",
    version="1.0.0",
)

# JSON API for mobile clients, locale comes from the x-client-locale header
api = FastAPI()
api.add_middleware(
    HeaderLocaleMiddleware, **localization_settings.get_header_middleware_kwargs()
)

# Browser facing site, locale is part of the path
site = FastAPI()
site.add_middleware(
    BrowserLocaleMiddleware, **localization_settings.get_browser_middleware_kwargs()
)

templates = LocalizedTemplates()


@api.get("/posts/{post_id}")
async def api_post(post_id: str, request: Request) -> dict:
    """Return a post in the client's locale."""
    return {"id": post_id, "locale": request.state.locale}


@site.get("/posts/{post_id}", response_class=PlainTextResponse)
async def post(post_id: str) -> str:
    """Unlocalized post URL, always redirected by the middleware."""
    return f"post: {post_id}"


@site.get("/{locale}", response_class=HTMLResponse)
async def home(locale: str, request: Request) -> HTMLResponse:
    """Render the localized home page."""
    return templates.TemplateResponse(request, "pages/home.html", {"title": locale})


@site.get("/{locale}/posts/{post_id}", response_class=PlainTextResponse)
async def localized_post(locale: str, post_id: str, request: Request) -> PlainTextResponse:
    """Render a post and remember the visitor's locale."""
    response = PlainTextResponse(f"post: {get_request_locale(request)} - {post_id}")
    return put_locale_cookie(
        request, response, locale, max_age=localization_settings.COOKIE_MAX_AGE
    )


app.mount("/api", api)
app.mount("/", site)
