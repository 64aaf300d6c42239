"""Locale detection from request signals.

Each detector reads one signal from the request and returns a raw locale
candidate or ``None``. :func:`detect_locale` walks the configured detection
order and stops at the first candidate. Casting is left to the caller. The
Accept-Language detector casts only to choose among the tags of the header and
still returns the raw tag, so the cast function runs once on the result.

A source whose data is missing from the ASGI scope is skipped with a warning.
ASGI servers always provide ``query_string`` and ``headers`` for HTTP
requests, so this only happens with hand-built scopes, e.g. in tests or
custom adapters.
"""

import logging
from typing import Callable, Dict, Optional
from urllib.parse import urlsplit

from starlette.requests import Request

from pathlocale.constants import ACCEPT_LANGUAGE_HEADER, REFERER_HEADER
from pathlocale.localization.accept_language import extract_locales
from pathlocale.localization.casting import cast_locale
from pathlocale.localization.config import DetectionSource, LocaleConfig
from pathlocale.localization.routing import RouteDescriptor, split_path

logger = logging.getLogger(__name__)

Detector = Callable[[Request, LocaleConfig, logging.Logger], Optional[str]]


def _scope_has(
    request: Request, key: str, source: str, detector: str, log: logging.Logger
) -> bool:
    if key in request.scope:
        return True

    log.warning(
        "%s of request is not available when calling %s, skip getting locale from it",
        source,
        detector,
    )
    return False


def _request_header(request: Request, name: str) -> Optional[str]:
    if "headers" not in request.scope:
        return None
    return request.headers.get(name)


def detect_path_segment(
    route: Optional[RouteDescriptor], config: LocaleConfig
) -> Optional[str]:
    """Read the locale bound to the route identifier of the matched route."""
    if route is None:
        return None

    value = route.params.get(config.path_param_key)
    return None if value is None else str(value)


def detect_from_query(
    request: Request, config: LocaleConfig, log: logging.Logger = logger
) -> Optional[str]:
    if not _scope_has(request, "query_string", "query_params", "detect_from_query", log):
        return None
    return request.query_params.get(config.query_key)


def detect_from_cookie(
    request: Request, config: LocaleConfig, log: logging.Logger = logger
) -> Optional[str]:
    if not _scope_has(request, "headers", "cookies", "detect_from_cookie", log):
        return None
    return request.cookies.get(config.cookie_key)


def detect_from_referrer(
    request: Request, config: LocaleConfig, log: logging.Logger = logger
) -> Optional[str]:
    """Take the first path segment of the Referer URL."""
    referrer = _request_header(request, REFERER_HEADER)
    if not referrer:
        return None

    try:
        path = urlsplit(referrer).path
    except ValueError:
        return None

    segments = split_path(path)
    return segments[0] if segments else None


def detect_from_accept_language(
    request: Request, config: LocaleConfig, log: logging.Logger = logger
) -> Optional[str]:
    """Return the most preferred Accept-Language tag that casts, uncasted."""
    accept_language = _request_header(request, ACCEPT_LANGUAGE_HEADER)
    if not accept_language:
        return None

    for tag in extract_locales(accept_language):
        if cast_locale(config, tag) is not None:
            return tag

    return None


DETECTORS: Dict[DetectionSource, Detector] = {
    DetectionSource.QUERY: detect_from_query,
    DetectionSource.COOKIE: detect_from_cookie,
    DetectionSource.REFERRER: detect_from_referrer,
    DetectionSource.ACCEPT_LANGUAGE: detect_from_accept_language,
}


def detect_locale(
    request: Request, config: LocaleConfig, log: Optional[logging.Logger] = None
) -> Optional[str]:
    """Return the first raw locale found in the configured detection order."""
    log = log or logger
    for source in config.detection_order:
        locale = DETECTORS[source](request, config, log)
        if locale is not None:
            log.debug("Detected locale %r from %s", locale, source.value)
            return locale

    return None
