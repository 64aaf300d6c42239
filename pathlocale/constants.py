"""Application-wide constants."""

# Route parameter name that carries the locale, e.g. "/{locale}/posts/{id}"
DEFAULT_ROUTE_IDENTIFIER = "locale"

# Cookie used to persist a visitor's locale between requests
DEFAULT_COOKIE_KEY = "locale"

# Request header read by the header-only locale middleware
DEFAULT_HEADER_NAME = "x-client-locale"

# Request headers consulted during detection
REFERER_HEADER = "referer"
ACCEPT_LANGUAGE_HEADER = "accept-language"

# Scheme default ports, omitted when building absolute URLs
DEFAULT_PORTS = {
    "http": 80,
    "https": 443,
    "ws": 80,
    "wss": 443,
}
