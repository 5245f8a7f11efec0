"""Bind the client factory to a Starlette (or FastAPI) request/response pair.

Usage in a FastAPI route::

    @router.get("/page")
    async def page(request: Request, response: Response):
        client = create_request_client(request, response)
        data = await client.get("/api/items")

Each dispatch opens and closes its own httpx client, so the route has nothing
to close. To reuse a connection pool across requests, pass a long-lived
``httpx.AsyncClient`` as ``options={"client": shared_client}`` and close it on
application shutdown.
"""

from dataclasses import dataclass, field
from typing import Any

from starlette.datastructures import MutableHeaders
from starlette.requests import Request
from starlette.responses import Response

from .factory import create_http_client
from .library import HttpInstance


@dataclass
class ServerRequest:
    """Incoming request as the factory sees it"""

    headers: dict[str, str] = field(default_factory=dict)
    secure: bool = False

    @classmethod
    def from_starlette(cls, request: Request, trust_forwarded: bool = False) -> "ServerRequest":
        secure = request.url.scheme == "https"
        if trust_forwarded and not secure:
            forwarded_proto = request.headers.get("x-forwarded-proto", "")
            secure = forwarded_proto.split(",")[0].strip().lower() == "https"
        return cls(headers=dict(request.headers), secure=secure)


class ServerResponse:
    """Outgoing response that accepts repeated headers such as Set-Cookie"""

    def __init__(self, headers: MutableHeaders):
        self.headers = headers

    def append(self, name: str, value: str) -> None:
        self.headers.append(name, value)

    @classmethod
    def from_starlette(cls, response: Response) -> "ServerResponse":
        return cls(response.headers)


def create_request_client(
    request: Request,
    response: Response | None = None,
    options: dict[str, Any] | None = None,
    *,
    trust_forwarded: bool = False,
    **factory_kwargs,
) -> HttpInstance:
    """Create a client for the current Starlette request"""
    req = ServerRequest.from_starlette(request, trust_forwarded=trust_forwarded)
    res = ServerResponse.from_starlette(response) if response is not None else None
    return create_http_client(options, req, res, **factory_kwargs)
