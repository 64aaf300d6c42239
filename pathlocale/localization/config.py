"""Locale resolution configuration."""

import os
from enum import Enum
from typing import Any, Callable, List, Optional, Tuple
from urllib.parse import urlsplit

from dotenv import load_dotenv
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    ValidationInfo,
    field_validator,
    model_validator,
)

from pathlocale.constants import (
    DEFAULT_COOKIE_KEY,
    DEFAULT_HEADER_NAME,
    DEFAULT_ROUTE_IDENTIFIER,
)

load_dotenv()


class LocaleConfigError(ValueError):
    """Raised when a locale middleware is configured with invalid options."""


class DetectionSource(str, Enum):
    """Request signals a locale can be detected from, besides the path."""

    QUERY = "query"
    COOKIE = "cookie"
    REFERRER = "referrer"
    ACCEPT_LANGUAGE = "accept_language"


DEFAULT_DETECTION_ORDER: Tuple[DetectionSource, ...] = (
    DetectionSource.COOKIE,
    DetectionSource.REFERRER,
    DetectionSource.ACCEPT_LANGUAGE,
)


class BaseLocaleConfig(BaseModel):
    """Options shared by every locale middleware."""

    model_config = ConfigDict(frozen=True)

    default_locale: str = Field(..., min_length=1)
    supported_locales: Tuple[str, ...] = Field((), validate_default=True)
    cast_fn: Optional[Callable[[str], str]] = None

    @field_validator("supported_locales")
    def include_default_locale(
        cls, value: Tuple[str, ...], info: ValidationInfo
    ) -> Tuple[str, ...]:
        """Put the default locale first and drop duplicates."""
        default_locale = info.data.get("default_locale")
        locales = [default_locale] if default_locale else []
        for locale in value:
            if locale not in locales:
                locales.append(locale)
        return tuple(locales)


class LocaleConfig(BaseLocaleConfig):
    """Configuration for path based locale resolution with redirects."""

    detection_order: Tuple[DetectionSource, ...] = DEFAULT_DETECTION_ORDER
    route_identifier: str = Field(DEFAULT_ROUTE_IDENTIFIER, min_length=1)
    assign_key: str = DEFAULT_ROUTE_IDENTIFIER
    query_key: str = DEFAULT_ROUTE_IDENTIFIER
    cookie_key: str = Field(DEFAULT_COOKIE_KEY, min_length=1)
    base_url: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def derive_keys(cls, values: Any) -> Any:
        """Default the assign and query keys to the route identifier."""
        if not isinstance(values, dict):
            return values

        values = dict(values)
        route_identifier = values.get("route_identifier") or DEFAULT_ROUTE_IDENTIFIER
        if values.get("assign_key") is None:
            values["assign_key"] = str(route_identifier)
        if values.get("query_key") is None:
            values["query_key"] = str(route_identifier)
        return values

    @field_validator("base_url")
    def validate_base_url(cls, value: Optional[str]) -> Optional[str]:
        """Require a scheme and a host on the canonical base URL."""
        if value is None:
            return value

        try:
            parts = urlsplit(value)
            parts.port  # raises on a malformed port
        except ValueError as e:
            raise ValueError(f"Invalid base URL: {e}") from e

        if not parts.scheme or not parts.hostname:
            raise ValueError("Base URL must include a scheme and a host")

        return value

    @property
    def path_param_key(self) -> str:
        """Name of the route parameter holding the locale."""
        return self.route_identifier


class HeaderLocaleConfig(BaseLocaleConfig):
    """Configuration for resolving the locale from a single request header."""

    header_name: str = Field(DEFAULT_HEADER_NAME, min_length=1)
    assign_key: str = Field(DEFAULT_ROUTE_IDENTIFIER, min_length=1)


def format_config_error(error: ValidationError) -> str:
    """Flatten a pydantic ValidationError into a one-line message."""
    parts: List[str] = []
    for e in error.errors():
        location = ".".join(str(item) for item in e.get("loc", ())) or "config"
        msg = e.get("msg") or str(e)
        if msg.startswith("Value error, "):
            msg = msg[len("Value error, ") :]
        parts.append(f"{location}: {msg}")

    return "; ".join(parts)


def build_locale_config(**options: Any) -> LocaleConfig:
    """Validate browser middleware options."""
    try:
        return LocaleConfig(**options)
    except ValidationError as e:
        raise LocaleConfigError(format_config_error(e)) from e


def build_header_locale_config(**options: Any) -> HeaderLocaleConfig:
    """Validate header middleware options."""
    try:
        return HeaderLocaleConfig(**options)
    except ValidationError as e:
        raise LocaleConfigError(format_config_error(e)) from e


def _split_env_list(value: Optional[str]) -> List[str]:
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


class LocalizationSettings:
    """Environment backed settings for the application's locale middleware."""

    DEFAULT_LOCALE: str = os.getenv("DEFAULT_LOCALE", "en")
    SUPPORTED_LOCALES: List[str] = _split_env_list(
        os.getenv("SUPPORTED_LOCALES", "en,fr")
    )
    DETECTION_ORDER: List[str] = _split_env_list(
        os.getenv("LOCALE_DETECTION_ORDER")
    ) or [source.value for source in DEFAULT_DETECTION_ORDER]
    COOKIE_KEY: str = os.getenv("LOCALE_COOKIE_KEY", DEFAULT_COOKIE_KEY)
    HEADER_NAME: str = os.getenv("LOCALE_HEADER_NAME", DEFAULT_HEADER_NAME)

    # Canonical URL of the application when it runs behind a proxy
    BASE_URL: Optional[str] = os.getenv("BASE_URL")

    # Cookie lifetime used when persisting the resolved locale
    COOKIE_MAX_AGE: int = 31536000  # 1 year

    @classmethod
    def get_browser_middleware_kwargs(cls) -> dict:
        """Get kwargs for BrowserLocaleMiddleware configuration."""
        return {
            "default_locale": cls.DEFAULT_LOCALE,
            "supported_locales": cls.SUPPORTED_LOCALES,
            "detection_order": cls.DETECTION_ORDER,
            "cookie_key": cls.COOKIE_KEY,
            "base_url": cls.BASE_URL,
        }

    @classmethod
    def get_header_middleware_kwargs(cls) -> dict:
        """Get kwargs for HeaderLocaleMiddleware configuration."""
        return {
            "default_locale": cls.DEFAULT_LOCALE,
            "supported_locales": cls.SUPPORTED_LOCALES,
            "header_name": cls.HEADER_NAME,
        }


localization_settings = LocalizationSettings()
