"""Localization middleware for locale resolution from the request path."""

import logging
from typing import Any, Callable, Optional
from urllib.parse import quote

from fastapi import Request, Response
from fastapi.responses import HTMLResponse
from markupsafe import escape
from starlette.middleware.base import BaseHTTPMiddleware

from pathlocale.localization.config import (
    HeaderLocaleConfig,
    LocaleConfig,
    build_header_locale_config,
    build_locale_config,
)
from pathlocale.localization.resolution import (
    LOCALE_ASSIGN_KEY,
    LOCALE_CONTEXT_KEY,
    LocaleContext,
    Redirect,
    assign_locale,
    resolve_header_locale,
    resolve_locale,
)
from pathlocale.localization.routing import (
    RouteInfoProvider,
    StarletteRouteInfo,
    build_locale_path,
    build_locale_url,
)

logger = logging.getLogger(__name__)

# Characters left unescaped in the Location header, as RedirectResponse does
LOCATION_SAFE_CHARS = ":/%#?=@[]!$&'()*+,;"


def redirect_response(url: str) -> HTMLResponse:
    """Build a 302 response pointing at ``url`` with a small HTML body."""
    location = quote(url, safe=LOCATION_SAFE_CHARS)
    body = (
        f'<html><body>You are being <a href="{escape(location)}">redirected</a>.'
        "</body></html>"
    )
    return HTMLResponse(content=body, status_code=302, headers={"location": location})


class BrowserLocaleMiddleware(BaseHTTPMiddleware):
    """Middleware to keep the locale of browser requests in the URL path.

    Requests whose path carries a supported locale continue with the locale
    stored on ``request.state``. Any other request is redirected to the same
    resource under the locale detected from query, cookie, Referer or
    Accept-Language (in the configured order), or the default locale.
    """

    def __init__(
        self,
        app,
        config: Optional[LocaleConfig] = None,
        route_info: Optional[RouteInfoProvider] = None,
        logger: Optional[logging.Logger] = None,
        **options: Any,
    ) -> None:
        super().__init__(app)
        self.config = config or build_locale_config(**options)
        self.route_info = route_info or StarletteRouteInfo()
        self.logger = logger or logging.getLogger(__name__)

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """Continue with the path locale or redirect to a localized path."""
        outcome = resolve_locale(request, self.config, self.route_info, self.logger)

        if isinstance(outcome, Redirect):
            return redirect_response(outcome.path)

        response = await call_next(request)
        return response


class HeaderLocaleMiddleware(BaseHTTPMiddleware):
    """Middleware to set the locale from a custom header, for API clients."""

    def __init__(
        self, app, config: Optional[HeaderLocaleConfig] = None, **options: Any
    ) -> None:
        super().__init__(app)
        self.config = config or build_header_locale_config(**options)

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """Store the header locale, or the default, in request state."""
        locale = resolve_header_locale(request, self.config)
        assign_locale(request, self.config.assign_key, locale)
        response = await call_next(request)
        return response


def _locale_context(request: Request) -> LocaleContext:
    context = getattr(request.state, LOCALE_CONTEXT_KEY, None)
    if context is None:
        raise RuntimeError(
            "No locale context on request, is BrowserLocaleMiddleware installed?"
        )
    return context


def get_request_locale(request: Request, default: Optional[str] = None) -> Optional[str]:
    """Get the locale resolved for the current request by either middleware."""
    assign_key = getattr(request.state, LOCALE_ASSIGN_KEY, None)
    if assign_key is None:
        return default
    return getattr(request.state, assign_key, default)


def locale_path_for(request: Request, locale: str) -> str:
    """Build the path of the current request in another locale.

    The locale is used as given, it is not casted.
    """
    context = _locale_context(request)
    return build_locale_path(request, context.config, locale, context.route)


def locale_url_for(request: Request, locale: str) -> str:
    """Build the absolute URL of the current request in another locale."""
    context = _locale_context(request)
    return build_locale_url(request, context.config, locale, context.route)


def put_locale_cookie(
    request: Request, response: Response, locale: str, **cookie_options: Any
) -> Response:
    """Persist the locale in the configured cookie, e.g. with ``max_age``."""
    context = _locale_context(request)
    response.set_cookie(context.config.cookie_key, locale, **cookie_options)
    return response
