"""Casting of raw locale candidates against the supported locales."""

from typing import Callable, Iterable, Optional

from babel import negotiate_locale

from pathlocale.localization.config import BaseLocaleConfig


def cast_locale(
    config: BaseLocaleConfig,
    locale: Optional[str],
    default: Optional[str] = None,
) -> Optional[str]:
    """Return the casted locale when it is supported, otherwise ``default``.

    The configured ``cast_fn`` is applied to the raw value first, so an
    application can map e.g. ``en-US`` to ``en`` before the membership check.
    """
    if locale is None:
        return default

    casted = config.cast_fn(locale) if config.cast_fn else locale
    if casted in config.supported_locales:
        return casted

    return default


def negotiating_caster(supported_locales: Iterable[str]) -> Callable[[str], str]:
    """Build a cast function that negotiates raw tags with Babel.

    Region and script variants fall back to their language
    (``en-GB`` -> ``en``), matching is case insensitive and results use the
    casing of ``supported_locales``. Tags with no match are returned as-is.
    """
    canonical = {locale.lower(): locale for locale in supported_locales}
    available = list(canonical.values())

    def cast(locale: str) -> str:
        negotiated = negotiate_locale([locale], available, sep="-")
        if negotiated is None:
            return locale
        return canonical.get(negotiated.lower(), locale)

    return cast
