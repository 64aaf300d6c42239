"""Localization package."""

from .accept_language import extract_locales, parse_accept_language
from .casting import cast_locale, negotiating_caster
from .config import (
    DetectionSource,
    HeaderLocaleConfig,
    LocaleConfig,
    LocaleConfigError,
    LocalizationSettings,
    localization_settings,
)
from .detectors import detect_locale
from .middleware import (
    BrowserLocaleMiddleware,
    HeaderLocaleMiddleware,
    get_request_locale,
    locale_path_for,
    locale_url_for,
    put_locale_cookie,
)
from .resolution import Continue, Redirect, resolve_header_locale, resolve_locale
from .routing import (
    NoRouteInfo,
    RouteDescriptor,
    RouteInfoProvider,
    StarletteRouteInfo,
    build_locale_path,
    build_locale_url,
)

__all__ = [
    "extract_locales",
    "parse_accept_language",
    "cast_locale",
    "negotiating_caster",
    "DetectionSource",
    "HeaderLocaleConfig",
    "LocaleConfig",
    "LocaleConfigError",
    "LocalizationSettings",
    "localization_settings",
    "detect_locale",
    "BrowserLocaleMiddleware",
    "HeaderLocaleMiddleware",
    "get_request_locale",
    "locale_path_for",
    "locale_url_for",
    "put_locale_cookie",
    "Continue",
    "Redirect",
    "resolve_header_locale",
    "resolve_locale",
    "NoRouteInfo",
    "RouteDescriptor",
    "RouteInfoProvider",
    "StarletteRouteInfo",
    "build_locale_path",
    "build_locale_url",
]
