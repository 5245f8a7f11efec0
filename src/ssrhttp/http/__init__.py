"""HTTP client factory with header merging and cookie relay."""

from .adapter import HttpxAdapter, Response, build_url
from .factory import create_http_client
from .interceptors import InterceptorManager
from .library import HttpInstance, HttpLibrary, InstanceDefaults, default_library

__all__ = [
    "HttpInstance",
    "HttpLibrary",
    "HttpxAdapter",
    "InstanceDefaults",
    "InterceptorManager",
    "Response",
    "build_url",
    "create_http_client",
    "default_library",
]
