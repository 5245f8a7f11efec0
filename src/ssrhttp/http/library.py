import copy
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

import structlog

from ..config import HttpClientSettings, get_settings
from .adapter import HttpxAdapter, Response
from .interceptors import Interceptors

logger = structlog.get_logger(__name__)

METHODS = ("delete", "get", "head", "options", "post", "put", "patch")
HEADER_BUCKETS = ("common",) + METHODS

Adapter = Callable[[dict[str, Any]], Awaitable[Response]]


def default_headers(settings: HttpClientSettings) -> dict[str, Any]:
    """Library-wide default headers, bucketed by HTTP method"""
    common = {"Accept": settings.accept}
    if settings.user_agent:
        common["User-Agent"] = settings.user_agent

    headers: dict[str, Any] = {"common": common}
    for method in METHODS:
        headers[method] = {}
    return headers


def merge_headers(*sources: Mapping[str, Any] | None) -> dict[str, Any]:
    """Merge header mappings left to right; a later name replaces earlier ones regardless of case"""
    merged: dict[str, Any] = {}
    for source in sources:
        for name, value in (source or {}).items():
            lowered = name.lower()
            for existing in [key for key in merged if key.lower() == lowered]:
                del merged[existing]
            merged[name] = value
    return merged


def flatten_headers(headers: Mapping[str, Any], method: str) -> dict[str, Any]:
    """Collapse bucketed headers into the flat set sent for one method"""
    flat = {
        name: value
        for name, value in headers.items()
        if not (name in HEADER_BUCKETS and isinstance(value, Mapping))
    }
    return merge_headers(headers.get("common"), headers.get(method.lower()), flat)


@dataclass
class LibraryDefaults:
    headers: dict[str, Any]
    timeout: float | None = None


@dataclass
class InstanceDefaults:
    """Per-instance mutable defaults; never shared between instances"""

    headers: dict[str, Any] = field(default_factory=dict)
    config: dict[str, Any] = field(default_factory=dict)


class HttpInstance:
    """A configured client: instance defaults, interceptors and an adapter"""

    def __init__(self, defaults: InstanceDefaults, adapter: Adapter):
        self.defaults = defaults
        self.adapter = adapter
        self.interceptors = Interceptors()

    def _merge_config(self, method: str, url: str, config: Mapping[str, Any]) -> dict[str, Any]:
        call_config = dict(config)
        call_headers = call_config.pop("headers", None) or {}

        merged = {**self.defaults.config, **call_config}
        merged["method"] = method.lower()
        merged["url"] = url
        merged["headers"] = merge_headers(flatten_headers(self.defaults.headers, method), call_headers)
        return merged

    async def request(self, method: str, url: str, **config) -> Response:
        """Run request interceptors, dispatch, then run response interceptors"""
        effective = self._merge_config(method, url, config)
        effective = await self.interceptors.request.run(effective)
        response = await self.adapter(effective)
        return await self.interceptors.response.run(response)

    async def get(self, url: str, **config) -> Response:
        return await self.request("get", url, **config)

    async def delete(self, url: str, **config) -> Response:
        return await self.request("delete", url, **config)

    async def head(self, url: str, **config) -> Response:
        return await self.request("head", url, **config)

    async def options(self, url: str, **config) -> Response:
        return await self.request("options", url, **config)

    async def post(self, url: str, data: Any = None, **config) -> Response:
        if data is not None:
            config["data"] = data
        return await self.request("post", url, **config)

    async def put(self, url: str, data: Any = None, **config) -> Response:
        if data is not None:
            config["data"] = data
        return await self.request("put", url, **config)

    async def patch(self, url: str, data: Any = None, **config) -> Response:
        if data is not None:
            config["data"] = data
        return await self.request("patch", url, **config)

    async def aclose(self) -> None:
        aclose = getattr(self.adapter, "aclose", None)
        if aclose is not None:
            await aclose()

    async def __aenter__(self) -> "HttpInstance":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()


class HttpLibrary:
    """Creates isolated HttpInstance objects over httpx"""

    def __init__(
        self,
        headers: dict[str, Any] | None = None,
        timeout: float | None = None,
        settings: HttpClientSettings | None = None,
    ):
        settings = settings or get_settings()
        self.defaults = LibraryDefaults(
            headers=headers if headers is not None else default_headers(settings),
            timeout=timeout if timeout is not None else settings.timeout,
        )

    def create(self, config: Mapping[str, Any] | None = None) -> HttpInstance:
        """Create an instance; library default headers are deep-copied into it"""
        instance_config = dict(config or {})
        headers = merge_headers(
            copy.deepcopy(self.defaults.headers),
            copy.deepcopy(dict(instance_config.pop("headers", None) or {})),
        )

        client = instance_config.pop("client", None)
        transport = instance_config.pop("transport", None)
        adapter = instance_config.pop("adapter", None) or HttpxAdapter(client=client, transport=transport)
        instance_config.setdefault("timeout", self.defaults.timeout)

        logger.debug(
            "HTTP client instance created",
            base_url=instance_config.get("base_url"),
            header_names=sorted(name for name in headers if name not in HEADER_BUCKETS),
        )
        return HttpInstance(InstanceDefaults(headers=headers, config=instance_config), adapter)


default_library = HttpLibrary()
