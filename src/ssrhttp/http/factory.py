# Assumptions:
# - The HTTP library exposes create(config), defaults.headers and per-instance
#   interceptors/defaults (HttpLibrary does; tests pass fakes)
# - req/res are only present when rendering on the server
# - Cookies are replayed through a single accumulated cookie header

from collections.abc import Callable, Mapping
from typing import Any, Protocol

import structlog

from ..errors import ConfigurationError, ErrorCode
from .cookies import append_cookie, cookie_pair, get_set_cookie_values
from .library import HttpInstance, default_library, merge_headers

logger = structlog.get_logger(__name__)

_DEFAULT_LIBRARY = object()


class IncomingRequest(Protocol):
    headers: Mapping[str, str]
    secure: bool


class OutgoingResponse(Protocol):
    def append(self, name: str, value: str) -> None: ...


def _find_header(headers: Mapping[str, Any], name: str) -> Any:
    for key, value in headers.items():
        if isinstance(key, str) and key.lower() == name:
            return value
    return None


def _response_headers(response: Any) -> Any:
    if isinstance(response, Mapping):
        return response.get("headers")
    return getattr(response, "headers", None)


def _library_headers(http_library: Any) -> dict[str, Any]:
    defaults = getattr(http_library, "defaults", None)
    return dict(getattr(defaults, "headers", None) or {})


def create_http_client(
    options: Mapping[str, Any] | None = None,
    req: IncomingRequest | None = None,
    res: OutgoingResponse | None = None,
    http_library: Any = _DEFAULT_LIBRARY,
) -> HttpInstance:
    """
    Create an HTTP client bound to the current render

    Header precedence, highest wins: headers added by modify_instance
    interceptors, per-call headers, options["headers"], req.headers, library
    defaults. With req, base_url is derived from req.secure and the Host
    header. Set-Cookie values on every response are appended to res (when
    given) and replayed as the cookie header on later calls of this client.
    Responses rejected by the instance's validate_status (non-2xx by default)
    raise before response interceptors run, so their Set-Cookie values are
    neither relayed nor replayed; pass a wider validate_status, e.g. for a
    login that answers 302, to keep them.

    Args:
        options: Constructor options; "headers" is merged, "modify_instance"
            is applied to the created instance, everything else is passed to
            http_library.create unchanged
        req: Incoming server request (headers, secure), or None in a browser context
        res: Outgoing server response exposing append(name, value), or None
        http_library: Library providing create() and defaults.headers

    Returns:
        The client instance, as returned by modify_instance when supplied

    Raises:
        ConfigurationError: http_library is missing or has no create(), or
            modify_instance is not callable
    """
    if http_library is _DEFAULT_LIBRARY:
        http_library = default_library
    if http_library is None:
        raise ConfigurationError("An HTTP library is required to create a client", ErrorCode.MISSING_HTTP_LIBRARY)
    if not callable(getattr(http_library, "create", None)):
        raise ConfigurationError(
            "HTTP library does not provide create()",
            ErrorCode.INVALID_HTTP_LIBRARY,
            details={"http_library": type(http_library).__name__},
        )

    options = dict(options or {})
    modify_instance: Callable[[Any], Any] | None = options.pop("modify_instance", None)
    if modify_instance is not None and not callable(modify_instance):
        raise ConfigurationError("modify_instance must be callable", ErrorCode.INVALID_MODIFY_INSTANCE)

    config: dict[str, Any] = {}
    request_headers: dict[str, Any] = {}
    if req is not None:
        request_headers = dict(req.headers or {})
        host = _find_header(request_headers, "host")
        if host:
            scheme = "https" if getattr(req, "secure", False) else "http"
            config["base_url"] = f"{scheme}://{host}"

    headers = merge_headers(_library_headers(http_library), request_headers, options.pop("headers", None))
    config.update(options)
    config["headers"] = headers

    created = http_library.create(config)

    def relay_cookies(response):
        values = get_set_cookie_values(_response_headers(response))
        if not values:
            return response

        if res is not None:
            for value in values:
                res.append("Set-Cookie", value)
            logger.debug("Relayed Set-Cookie to server response", count=len(values))

        for value in values:
            pair = cookie_pair(value)
            if pair:
                append_cookie(created.defaults.headers, pair)
        return response

    created.interceptors.response.use(relay_cookies)

    instance = created
    if modify_instance is not None:
        modified = modify_instance(created)
        # None means the hook mutated the instance in place
        if modified is not None:
            instance = modified

    logger.debug(
        "HTTP client created",
        server_side=req is not None,
        base_url=config.get("base_url"),
        relays_cookies=res is not None,
    )
    return instance
