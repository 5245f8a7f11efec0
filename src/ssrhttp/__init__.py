"""
SSR-aware HTTP client factory.

This library provides:
- A client factory that merges headers from library defaults, the incoming
  request, constructor options, per-call options and a customization hook
- Set-Cookie relay to the outgoing server response
- Cookie replay on subsequent calls made with the same client
- Logging and configuration helpers
"""

from .errors import ConfigurationError, ErrorCode, HttpClientError, InterceptorError
from .http import HttpInstance, HttpLibrary, Response, create_http_client, default_library

__version__ = "1.0.0"
__author__ = "BPT Team"

__all__ = [
    "ConfigurationError",
    "ErrorCode",
    "HttpClientError",
    "HttpInstance",
    "HttpLibrary",
    "InterceptorError",
    "Response",
    "create_http_client",
    "default_library",
]
