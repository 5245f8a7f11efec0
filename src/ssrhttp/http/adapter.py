from collections.abc import Callable, Mapping
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from http.cookiejar import CookieJar, DefaultCookiePolicy
from typing import Any

import httpx
import structlog

from ..logging.setup import context_headers

logger = structlog.get_logger(__name__)

# httpx frames the outgoing body itself; copies of these from an incoming request would lie
_FRAMING_HEADERS = frozenset({"content-length", "transfer-encoding", "connection"})


@dataclass
class Response:
    """Response handed to response interceptors and returned to callers"""

    status: int
    headers: dict[str, Any]
    data: Any
    config: dict[str, Any]
    status_text: str = ""
    request: httpx.Request | None = None
    raw: httpx.Response | None = field(default=None, repr=False)


def default_validate_status(status: int) -> bool:
    return 200 <= status < 300


def build_url(base_url: str | None, url: str | None) -> str:
    """Join url onto base_url unless url is already absolute"""
    url = url or ""
    if not base_url or httpx.URL(url).is_absolute_url:
        return url
    if not url:
        return base_url
    return f"{base_url.rstrip('/')}/{url.lstrip('/')}"


def _outgoing_headers(headers: Mapping[str, Any]) -> dict[str, str]:
    # lowercased name -> (name, value); a later entry wins, as in merge order
    result: dict[str, tuple[str, str]] = {}
    for name, value in headers.items():
        if value is None or isinstance(value, Mapping):
            continue
        if name.lower() in _FRAMING_HEADERS:
            continue
        result.pop(name.lower(), None)
        result[name.lower()] = (name, str(value))

    for name, value in context_headers().items():
        result.setdefault(name.lower(), (name, value))
    return dict(result.values())


def _response_headers(raw: httpx.Response) -> dict[str, Any]:
    headers: dict[str, Any] = {}
    for name in raw.headers.keys():
        key = name.lower()
        if key in headers:
            continue
        if key == "set-cookie":
            headers[key] = raw.headers.get_list("set-cookie")
        else:
            headers[key] = raw.headers.get(key)
    return headers


def _response_data(raw: httpx.Response) -> Any:
    if not raw.content:
        return None
    if "json" in raw.headers.get("content-type", ""):
        try:
            return raw.json()
        except ValueError:
            logger.debug("Response declared JSON but did not parse", url=str(raw.request.url))
    return raw.text


class HttpxAdapter:
    """
    Dispatches an effective request config through httpx.AsyncClient

    Without an injected client, each dispatch opens and closes its own
    AsyncClient, so nothing is left to clean up after a render. A transport
    passed in is closed along with that client; use a stateless one such as
    httpx.MockTransport, or inject a client to share a connection pool. An
    injected client is owned by the caller and never closed here.
    """

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._shared_client = client
        self._transport = transport

    @asynccontextmanager
    async def _client(self):
        """Yield the injected client, or a short-lived one closed after the dispatch"""
        if self._shared_client is not None:
            yield self._shared_client
            return

        # Cookies are replayed only through the instance's cookie header
        no_cookies = CookieJar(policy=DefaultCookiePolicy(allowed_domains=[]))
        async with httpx.AsyncClient(transport=self._transport, cookies=no_cookies) as client:
            yield client

    async def __call__(self, config: dict[str, Any]) -> Response:
        method = config.get("method", "get").upper()
        url = build_url(config.get("base_url"), config.get("url"))

        request_kwargs: dict[str, Any] = {
            "headers": _outgoing_headers(config.get("headers") or {}),
        }
        if config.get("params") is not None:
            request_kwargs["params"] = config["params"]
        if config.get("json") is not None:
            request_kwargs["json"] = config["json"]
        data = config.get("data")
        if isinstance(data, (str, bytes)):
            request_kwargs["content"] = data
        elif data is not None:
            request_kwargs["data"] = data
        if config.get("content") is not None:
            request_kwargs["content"] = config["content"]
        if config.get("timeout") is not None:
            request_kwargs["timeout"] = config["timeout"]

        async with self._client() as client:
            request = client.build_request(method, url, **request_kwargs)

            logger.debug("Dispatching HTTP request", method=method, url=url)
            try:
                raw = await client.send(request)
            except httpx.RequestError as e:
                logger.error("HTTP request failed", method=method, url=url, error=str(e))
                raise

        logger.debug("HTTP response received", method=method, url=url, status_code=raw.status_code)

        response = Response(
            status=raw.status_code,
            headers=_response_headers(raw),
            data=_response_data(raw),
            config=config,
            status_text=raw.reason_phrase,
            request=request,
            raw=raw,
        )

        validate_status: Callable[[int], bool] | None = config.get("validate_status", default_validate_status)
        if validate_status is not None and not validate_status(raw.status_code):
            logger.error("HTTP request rejected by status", method=method, url=url, status_code=raw.status_code)
            raise httpx.HTTPStatusError(
                f"Request failed with status code {raw.status_code}",
                request=request,
                response=raw,
            )

        return response
