"""Per-request locale resolution."""

import logging
from dataclasses import dataclass
from typing import Optional, Union

from starlette.requests import Request

from pathlocale.localization.casting import cast_locale
from pathlocale.localization.config import HeaderLocaleConfig, LocaleConfig
from pathlocale.localization.detectors import detect_locale, detect_path_segment
from pathlocale.localization.routing import (
    RouteDescriptor,
    RouteInfoProvider,
    StarletteRouteInfo,
    build_locale_path,
)

logger = logging.getLogger(__name__)

# request.state attribute holding the LocaleContext of a resolved request
LOCALE_CONTEXT_KEY = "locale_context"
# request.state attribute naming the attribute the resolved locale is stored in
LOCALE_ASSIGN_KEY = "locale_assign_key"


@dataclass(frozen=True)
class Continue:
    """The path already carries a supported, canonical locale."""

    locale: str


@dataclass(frozen=True)
class Redirect:
    """The request should be redirected to a path carrying a locale."""

    path: str


ResolutionOutcome = Union[Continue, Redirect]


def assign_locale(request: Request, assign_key: str, locale: str) -> None:
    """Store the resolved locale on ``request.state`` under ``assign_key``."""
    setattr(request.state, assign_key, locale)
    setattr(request.state, LOCALE_ASSIGN_KEY, assign_key)


@dataclass(frozen=True)
class LocaleContext:
    """What downstream helpers need to rebuild paths for a request."""

    config: LocaleConfig
    route: Optional[RouteDescriptor]


def resolve_locale(
    request: Request,
    config: LocaleConfig,
    route_info: Optional[RouteInfoProvider] = None,
    log: Optional[logging.Logger] = None,
) -> ResolutionOutcome:
    """Decide whether a request continues as-is or gets redirected.

    The locale in the path is only accepted when casting leaves it unchanged,
    so ``/en-GB/posts`` is redirected to ``/en/posts`` rather than served
    under a non canonical URL. On continue the locale is stored on
    ``request.state`` under the configured assign key.
    """
    log = log or logger
    route = (route_info or StarletteRouteInfo()).route_info(request)

    locale = detect_path_segment(route, config)
    casted = cast_locale(config, locale)
    if locale is not None and casted is not None and locale == casted:
        assign_locale(request, config.assign_key, casted)
        setattr(request.state, LOCALE_CONTEXT_KEY, LocaleContext(config, route))
        return Continue(casted)

    detected = detect_locale(request, config, log)
    locale = cast_locale(config, detected, default=config.default_locale)
    path = build_locale_path(request, config, locale, route)
    log.debug("Redirecting %s to %s", request.scope.get("path"), path)
    return Redirect(path)


def resolve_header_locale(request: Request, config: HeaderLocaleConfig) -> str:
    """Resolve the locale from the configured request header."""
    locale = request.headers.get(config.header_name)
    return cast_locale(config, locale, default=config.default_locale)
