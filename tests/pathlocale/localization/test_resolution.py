"""Unit tests for per-request locale resolution."""

from typing import Callable, Optional

import pytest
from starlette.requests import Request
from starlette.responses import PlainTextResponse
from starlette.routing import Route

from pathlocale.localization.casting import negotiating_caster
from pathlocale.localization.config import HeaderLocaleConfig, LocaleConfig
from pathlocale.localization.resolution import (
    LOCALE_ASSIGN_KEY,
    LOCALE_CONTEXT_KEY,
    Continue,
    LocaleContext,
    Redirect,
    resolve_header_locale,
    resolve_locale,
)
from pathlocale.localization.routing import (
    NoRouteInfo,
    RouteDescriptor,
    StarletteRouteInfo,
)


async def endpoint(request: Request) -> PlainTextResponse:
    return PlainTextResponse("ok")


@pytest.fixture
def route_info() -> StarletteRouteInfo:
    """Provide route info for unlocalized and localized post routes."""
    return StarletteRouteInfo(
        [
            Route("/posts/{id}", endpoint),
            Route("/{locale}/posts/{id}", endpoint),
        ]
    )


class FixedRouteInfo:
    """Route info provider returning a fixed descriptor."""

    def __init__(self, route: Optional[RouteDescriptor]) -> None:
        self.route = route

    def route_info(self, request: Request) -> Optional[RouteDescriptor]:
        return self.route


class TestResolveLocale:
    """Tests for resolve_locale function."""

    def test_supported_path_locale_continues(
        self,
        make_request: Callable[..., Request],
        locale_config: LocaleConfig,
        route_info: StarletteRouteInfo,
    ) -> None:
        """Test that a supported locale in the path is accepted."""
        request = make_request("/zh-Hans/posts/7")

        outcome = resolve_locale(request, locale_config, route_info)

        assert outcome == Continue("zh-Hans")
        assert request.state.locale == "zh-Hans"

    def test_context_stored_on_continue(
        self,
        make_request: Callable[..., Request],
        locale_config: LocaleConfig,
        route_info: StarletteRouteInfo,
    ) -> None:
        """Test that config and route are kept for downstream helpers."""
        request = make_request("/en/posts/7")

        resolve_locale(request, locale_config, route_info)

        context = getattr(request.state, LOCALE_CONTEXT_KEY)
        assert isinstance(context, LocaleContext)
        assert context.config is locale_config
        assert context.route.template == "/{locale}/posts/{id}"

    def test_custom_assign_key(
        self, make_request: Callable[..., Request], route_info: StarletteRouteInfo
    ) -> None:
        """Test that the locale is stored under the configured assign key."""
        config = LocaleConfig(default_locale="en", assign_key="ui_locale")
        request = make_request("/en/posts/7")

        resolve_locale(request, config, route_info)

        assert request.state.ui_locale == "en"

    def test_missing_locale_redirects_to_default(
        self,
        make_request: Callable[..., Request],
        locale_config: LocaleConfig,
        route_info: StarletteRouteInfo,
    ) -> None:
        """Test that a path without locale redirects to the default locale."""
        outcome = resolve_locale(make_request("/posts/7"), locale_config, route_info)
        assert outcome == Redirect("/en/posts/7")

    def test_unsupported_locale_replaced(
        self,
        make_request: Callable[..., Request],
        locale_config: LocaleConfig,
        route_info: StarletteRouteInfo,
    ) -> None:
        """Test that an unsupported path locale is swapped for the detected one."""
        request = make_request("/de/posts/7", headers=[("cookie", "locale=zh-Hans")])

        outcome = resolve_locale(request, locale_config, route_info)

        assert outcome == Redirect("/zh-Hans/posts/7")
        assert not hasattr(request.state, "locale")

    def test_unsupported_detected_locale_falls_back(
        self,
        make_request: Callable[..., Request],
        locale_config: LocaleConfig,
        route_info: StarletteRouteInfo,
    ) -> None:
        """Test that an unsupported detected locale becomes the default."""
        request = make_request("/posts/7", query_string=b"locale=de")

        outcome = resolve_locale(request, locale_config, route_info)

        assert outcome == Redirect("/en/posts/7")

    def test_fuzzy_cast_path_locale_redirected(
        self, make_request: Callable[..., Request], route_info: StarletteRouteInfo
    ) -> None:
        """Test that a path locale changed by casting is not accepted as-is."""
        config = LocaleConfig(
            default_locale="en",
            supported_locales=["zh-Hans"],
            cast_fn=negotiating_caster(["en", "zh-Hans"]),
        )

        outcome = resolve_locale(make_request("/en-GB/posts/7"), config, route_info)

        assert outcome == Redirect("/en/posts/7")

    def test_fuzzy_cast_applies_to_detection(
        self, make_request: Callable[..., Request], route_info: StarletteRouteInfo
    ) -> None:
        """Test that detected locales go through the cast function."""
        config = LocaleConfig(
            default_locale="en",
            supported_locales=["zh-Hans"],
            detection_order=["cookie"],
            cast_fn=negotiating_caster(["en", "zh-Hans"]),
        )
        request = make_request("/posts/7", headers=[("cookie", "locale=zh-hans")])

        outcome = resolve_locale(request, config, route_info)

        assert outcome == Redirect("/zh-Hans/posts/7")

    def test_detected_locale_casted_once(
        self, make_request: Callable[..., Request], route_info: StarletteRouteInfo
    ) -> None:
        """Test that a detected Accept-Language tag goes through cast_fn once."""
        mapping = {"en-GB": "en", "en": "zh-Hans"}
        config = LocaleConfig(
            default_locale="en",
            supported_locales=["zh-Hans"],
            detection_order=["accept_language"],
            cast_fn=lambda locale: mapping.get(locale, locale),
        )
        request = make_request("/posts/7", headers=[("accept-language", "en-GB")])

        outcome = resolve_locale(request, config, route_info)

        assert outcome == Redirect("/en/posts/7")

    def test_assign_key_recorded(
        self, make_request: Callable[..., Request], route_info: StarletteRouteInfo
    ) -> None:
        """Test that the attribute holding the locale is recorded on the state."""
        config = LocaleConfig(default_locale="en", assign_key="ui_locale")
        request = make_request("/en/posts/7")

        resolve_locale(request, config, route_info)

        assert getattr(request.state, LOCALE_ASSIGN_KEY) == "ui_locale"

    def test_without_route_info_locale_prepended(
        self, make_request: Callable[..., Request], locale_config: LocaleConfig
    ) -> None:
        """Test that without a router the locale is prepended to the path."""
        outcome = resolve_locale(make_request("/de/posts/7"), locale_config, NoRouteInfo())
        assert outcome == Redirect("/en/de/posts/7")

    def test_custom_route_info_provider(
        self, make_request: Callable[..., Request], locale_config: LocaleConfig
    ) -> None:
        """Test resolution with a provider other than the Starlette router."""
        provider = FixedRouteInfo(
            RouteDescriptor("/{locale}/posts/{id}", {"locale": "en", "id": "7"})
        )

        outcome = resolve_locale(make_request("/en/posts/7"), locale_config, provider)

        assert outcome == Continue("en")

    def test_redirect_keeps_root_path(
        self,
        make_request: Callable[..., Request],
        locale_config: LocaleConfig,
        route_info: StarletteRouteInfo,
    ) -> None:
        """Test that redirects of mounted apps stay under the mount point."""
        request = make_request("/site/posts/7", root_path="/site")

        outcome = resolve_locale(request, locale_config, route_info)

        assert outcome == Redirect("/site/en/posts/7")


class TestResolveHeaderLocale:
    """Tests for resolve_header_locale function."""

    @pytest.fixture
    def header_config(self) -> HeaderLocaleConfig:
        """Provide a header locale configuration."""
        return HeaderLocaleConfig(default_locale="en", supported_locales=["zh-Hans"])

    def test_supported_header(
        self, make_request: Callable[..., Request], header_config: HeaderLocaleConfig
    ) -> None:
        """Test that a supported header locale is used."""
        request = make_request("/posts/7", headers=[("x-client-locale", "zh-Hans")])
        assert resolve_header_locale(request, header_config) == "zh-Hans"

    def test_unsupported_header(
        self, make_request: Callable[..., Request], header_config: HeaderLocaleConfig
    ) -> None:
        """Test that an unsupported header locale gives the default."""
        request = make_request("/posts/7", headers=[("x-client-locale", "de")])
        assert resolve_header_locale(request, header_config) == "en"

    def test_missing_header(
        self, make_request: Callable[..., Request], header_config: HeaderLocaleConfig
    ) -> None:
        """Test that a missing header gives the default."""
        assert resolve_header_locale(make_request("/posts/7"), header_config) == "en"

    def test_custom_header_name(self, make_request: Callable[..., Request]) -> None:
        """Test that the configured header is read."""
        config = HeaderLocaleConfig(
            default_locale="en", supported_locales=["fr"], header_name="x-lang"
        )
        request = make_request("/posts/7", headers=[("x-lang", "fr")])

        assert resolve_header_locale(request, config) == "fr"
