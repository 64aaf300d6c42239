"""Template utilities for localized responses."""

import os
from typing import Any, Dict, Optional

from babel import Locale, UnknownLocaleError
from fastapi import Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates
from jinja2 import pass_context

from pathlocale.localization.middleware import (
    get_request_locale,
    locale_path_for,
    locale_url_for,
)
from pathlocale.localization.resolution import LOCALE_CONTEXT_KEY

TEMPLATES_DIR = os.path.dirname(__file__)


def locale_display_name(locale: Optional[str]) -> str:
    """Name of a locale in its own language, e.g. ``zh-Hans`` -> ``中文``."""
    if not locale:
        return ""

    try:
        name = Locale.parse(locale, sep="-").get_display_name()
    except (ValueError, UnknownLocaleError):
        return locale

    return name or locale


@pass_context
def _locale_path(context, locale: str) -> str:
    return locale_path_for(context["request"], locale)


@pass_context
def _locale_url(context, locale: str) -> str:
    return locale_url_for(context["request"], locale)


class LocalizedTemplates:
    """Template manager exposing locale switching helpers to templates.

    Templates get ``locale_path(locale)`` and ``locale_url(locale)`` for the
    current request, ``locale_name(locale)``, and the ``current_locale`` and
    ``supported_locales`` of the request's locale configuration.
    """

    def __init__(self, directory: str = TEMPLATES_DIR):
        self.templates = Jinja2Templates(directory=directory)

        self.templates.env.globals["locale_path"] = _locale_path
        self.templates.env.globals["locale_url"] = _locale_url
        self.templates.env.globals["locale_name"] = locale_display_name

    def TemplateResponse(
        self,
        request: Request,
        name: str,
        context: Dict[str, Any],
        status_code: int = 200,
    ) -> HTMLResponse:
        """Create a template response with the request's locale information."""
        locale_context = getattr(request.state, LOCALE_CONTEXT_KEY, None)

        context["current_locale"] = get_request_locale(request)
        context["supported_locales"] = (
            locale_context.config.supported_locales if locale_context else ()
        )

        return self.templates.TemplateResponse(
            request, name, context, status_code=status_code
        )
