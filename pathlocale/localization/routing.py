"""Route-aware construction of locale paths and URLs.

The router is a collaborator here: a :class:`RouteInfoProvider` reports the
route template a request matches (``/{locale}/posts/{id}``) together with the
path parameters extracted from it. When the template carries the locale
placeholder, a path for another locale is rendered from the template with the
locale parameter swapped; otherwise the locale is prepended to the request's
own path.

Paths are built percent-encoded: request segments are taken from the raw
path as received and rendered parameters are quoted, so an escaped ``/``, ``?``
or ``#`` inside a segment never changes the resource a path points at.
"""

import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol, Sequence, Tuple
from urllib.parse import quote, unquote, urlsplit, urlunsplit

from starlette.convertors import CONVERTOR_TYPES
from starlette.requests import Request
from starlette.routing import BaseRoute, Match, Mount
from starlette.types import Scope

from pathlocale.constants import DEFAULT_PORTS
from pathlocale.localization.config import LocaleConfig

PLACEHOLDER_PATTERN = re.compile(
    r"^\{(?P<name>[a-zA-Z_][a-zA-Z0-9_]*)(?::(?P<convertor>[a-zA-Z_][a-zA-Z0-9_]*))?\}$"
)

# Characters allowed unescaped inside a single path segment
SEGMENT_SAFE_CHARS = "!$&'()*+,;=:@"


def split_path(path: Optional[str]) -> List[str]:
    """Split a path into its non-empty segments."""
    if not path:
        return []
    return [segment for segment in path.split("/") if segment]


def join_path(segments: Sequence[str]) -> str:
    """Join segments into an absolute path."""
    return "/" + "/".join(segment for segment in segments if segment)


@dataclass(frozen=True)
class RouteDescriptor:
    """A matched route template and the parameters bound for one request."""

    template: str
    params: Dict[str, Any] = field(default_factory=dict)

    @property
    def segments(self) -> List[str]:
        return split_path(self.template)

    def placeholder(self, segment: str) -> Optional[Tuple[str, Optional[str]]]:
        """Return ``(name, convertor)`` when the segment is a placeholder."""
        match = PLACEHOLDER_PATTERN.match(segment)
        if not match:
            return None
        return match.group("name"), match.group("convertor")

    def has_placeholder(self, name: str) -> bool:
        for segment in self.segments:
            placeholder = self.placeholder(segment)
            if placeholder and placeholder[0] == name:
                return True
        return False

    def render(self, params: Dict[str, Any]) -> List[str]:
        """Render template segments, filling placeholders from ``params``.

        Parameter values are decoded, as the router extracted them, and are
        percent-encoded again here.
        """
        rendered = []
        for segment in self.segments:
            placeholder = self.placeholder(segment)
            if placeholder is None:
                rendered.append(segment)
                continue

            name, convertor_name = placeholder
            value = params[name]
            convertor = CONVERTOR_TYPES.get(convertor_name or "str")
            if convertor is not None and not isinstance(value, str):
                value = convertor.to_string(value)
            safe = SEGMENT_SAFE_CHARS + ("/" if convertor_name == "path" else "")
            rendered.append(quote(str(value), safe=safe))

        return rendered


class RouteInfoProvider(Protocol):
    """Reports the route a request matches, if the router can tell."""

    def route_info(self, request: Request) -> Optional[RouteDescriptor]:
        ...


class NoRouteInfo:
    """Provider for applications without a template based router."""

    def route_info(self, request: Request) -> Optional[RouteDescriptor]:
        return None


class StarletteRouteInfo:
    """Match a request against a Starlette (or FastAPI) route table.

    Routes are matched the way Starlette's router does it, first full match
    wins, then the first partial match (wrong method), without dispatching.
    Mounted routers are searched recursively and their path prefix becomes
    part of the template. By default the routes of the application in the
    request scope are used.
    """

    def __init__(self, routes: Optional[Sequence[BaseRoute]] = None) -> None:
        self.routes = routes

    def route_info(self, request: Request) -> Optional[RouteDescriptor]:
        routes = self.routes
        if routes is None:
            routes = getattr(request.scope.get("app"), "routes", None)
        if not routes:
            return None

        _, descriptor = self._match(routes, request.scope, "")
        return descriptor

    def _match(
        self, routes: Sequence[BaseRoute], scope: Scope, prefix: str
    ) -> Tuple[Match, Optional[RouteDescriptor]]:
        partial = None
        for route in routes:
            match, child_scope = route.matches(scope)
            if match == Match.NONE:
                continue

            if isinstance(route, Mount):
                match, descriptor = self._match(
                    route.routes or [], {**scope, **child_scope}, prefix + route.path
                )
            elif getattr(route, "path", None) is not None:
                descriptor = RouteDescriptor(
                    template=prefix + route.path,
                    params=dict(child_scope.get("path_params", {})),
                )
            else:
                descriptor = None

            if descriptor is None:
                continue
            if match == Match.FULL:
                return Match.FULL, descriptor
            if partial is None:
                partial = descriptor

        if partial is not None:
            return Match.PARTIAL, partial
        return Match.NONE, None


def _raw_path_segments(scope: Scope) -> Optional[List[str]]:
    raw_path = scope.get("raw_path")
    if not raw_path:
        return None
    # some servers keep the query string in raw_path
    raw_path = raw_path.split(b"?", 1)[0]
    # existing escapes are kept, stray non-ASCII bytes are escaped
    return [
        quote(segment, safe=SEGMENT_SAFE_CHARS + "%")
        for segment in raw_path.split(b"/")
        if segment
    ]


def request_path_parts(request: Request) -> Tuple[List[str], List[str]]:
    """Split the request path into mount prefix and remaining segments.

    Segments are percent-encoded. They come from ``raw_path`` when the server
    provides it, otherwise the decoded path is quoted segment by segment.
    """
    root_path = request.scope.get("root_path", "")
    script_name = split_path(root_path)

    raw_segments = _raw_path_segments(request.scope)
    if raw_segments is not None:
        prefix = raw_segments[: len(script_name)]
        if [unquote(segment) for segment in prefix] == script_name:
            return prefix, raw_segments[len(script_name) :]

    path = request.scope.get("path", "")
    if root_path and path.startswith(root_path):
        path = path[len(root_path) :]

    return (
        [quote(segment, safe=SEGMENT_SAFE_CHARS) for segment in script_name],
        [quote(segment, safe=SEGMENT_SAFE_CHARS) for segment in split_path(path)],
    )


def build_locale_path(
    request: Request,
    config: LocaleConfig,
    locale: str,
    route: Optional[RouteDescriptor] = None,
) -> str:
    """Build the path of the current request for the given locale."""
    script_name, path_info = request_path_parts(request)

    if route is not None and route.has_placeholder(config.path_param_key):
        params = {**route.params, config.path_param_key: locale}
        segments = route.render(params)
    else:
        segments = [quote(locale, safe=SEGMENT_SAFE_CHARS), *path_info]

    return join_path(script_name + segments)


def base_url_parts(request: Request, config: LocaleConfig) -> Tuple[str, str, Optional[int]]:
    """Return scheme, host and port for absolute URLs."""
    if config.base_url:
        parts = urlsplit(config.base_url)
        return parts.scheme, parts.hostname or "", parts.port

    url = request.url
    return url.scheme, url.hostname or "", url.port


def build_locale_url(
    request: Request,
    config: LocaleConfig,
    locale: str,
    route: Optional[RouteDescriptor] = None,
) -> str:
    """Build the absolute URL of the current request for the given locale."""
    scheme, host, port = base_url_parts(request, config)
    path = build_locale_path(request, config, locale, route)

    netloc = f"[{host}]" if ":" in host else host
    if port is not None and port != DEFAULT_PORTS.get(scheme):
        netloc = f"{netloc}:{port}"

    # request.url is built from the decoded path, so read the query from the scope
    query = request.scope.get("query_string", b"").decode("latin-1")
    return urlunsplit((scheme, netloc, path, query, ""))
