"""Structured logging utilities with correlation and tracing support."""

from .setup import (
    CORRELATION_ID_HEADER,
    TRACE_ID_HEADER,
    context_headers,
    get_correlation_id,
    get_logger,
    get_trace_id,
    set_correlation_id,
    set_trace_id,
    setup_logging,
)

__all__ = [
    "CORRELATION_ID_HEADER",
    "TRACE_ID_HEADER",
    "setup_logging",
    "get_logger",
    "get_correlation_id",
    "get_trace_id",
    "set_correlation_id",
    "set_trace_id",
    "context_headers",
]
