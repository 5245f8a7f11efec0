# Assumptions:
# - Using pytest for testing framework
# - Settings are read from SSRHTTP_ environment variables
# - Log processors are exercised directly, without configuring global logging

import pytest

from ssrhttp.config import HttpClientSettings, get_settings
from ssrhttp.errors import ConfigurationError, ErrorCode
from ssrhttp.logging import context_headers, set_correlation_id, set_trace_id
from ssrhttp.logging.setup import add_correlation_context, add_service_context


@pytest.fixture(autouse=True)
def clear_correlation_context():
    yield
    set_correlation_id(None)
    set_trace_id(None)


class TestHttpClientSettings:
    """Test cases for HttpClientSettings"""

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("SSRHTTP_TIMEOUT", raising=False)

        settings = HttpClientSettings(_env_file=None)

        assert settings.timeout == 30.0
        assert settings.accept == "application/json, text/plain, */*"
        assert settings.user_agent is None
        assert settings.log_format == "json"

    def test_reads_prefixed_environment(self, monkeypatch):
        monkeypatch.setenv("SSRHTTP_TIMEOUT", "5")
        monkeypatch.setenv("ssrhttp_user_agent", "renderer/2")

        settings = HttpClientSettings(_env_file=None)

        assert settings.timeout == 5.0
        assert settings.user_agent == "renderer/2"

    def test_get_settings_is_cached(self):
        assert get_settings() is get_settings()


class TestLogProcessors:
    """Test cases for structlog processors"""

    def test_service_context(self):
        processor = add_service_context("renderer")

        assert processor(None, "info", {"event": "x"}) == {"event": "x", "service": "renderer"}

    def test_correlation_context_only_when_set(self):
        processor = add_correlation_context()

        assert processor(None, "info", {}) == {}

        set_correlation_id("corr-1")
        set_trace_id("trace-1")

        assert processor(None, "info", {}) == {"correlation_id": "corr-1", "trace_id": "trace-1"}

    def test_context_headers(self):
        assert context_headers() == {}

        set_correlation_id("corr-1")

        assert context_headers() == {"X-Correlation-ID": "corr-1"}


class TestErrors:
    """Test cases for error formatting"""

    def test_str_includes_error_code(self):
        error = ConfigurationError("missing library", ErrorCode.MISSING_HTTP_LIBRARY)

        assert str(error) == "[CFG_001] missing library"

    def test_str_without_code(self):
        assert str(ConfigurationError()) == "HTTP client is misconfigured"
