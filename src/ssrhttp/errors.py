from enum import Enum


class ErrorCode(Enum):
    """Standard error codes for the HTTP client layer"""

    # Configuration errors
    MISSING_HTTP_LIBRARY = "CFG_001"
    INVALID_HTTP_LIBRARY = "CFG_002"
    INVALID_MODIFY_INSTANCE = "CFG_003"

    # Pipeline errors
    INTERCEPTOR_RETURNED_NONE = "PIPE_001"


class HttpClientError(Exception):
    """Base exception for HTTP client errors"""

    def __init__(self, message: str, error_code: ErrorCode | None = None, details: dict | None = None):
        super().__init__(message)
        self.error_code = error_code
        self.details = details or {}
        self.message = message

    def __str__(self) -> str:
        if self.error_code:
            return f"[{self.error_code.value}] {self.message}"
        return self.message


class ConfigurationError(HttpClientError):
    """Raised when the factory is given a missing or invalid collaborator"""

    def __init__(
        self,
        message: str = "HTTP client is misconfigured",
        error_code: ErrorCode | None = None,
        details: dict | None = None,
    ):
        super().__init__(message, error_code, details)


class InterceptorError(HttpClientError):
    """Raised when an interceptor returns nothing instead of a config or response"""

    def __init__(self, message: str = "Interceptor returned None", details: dict | None = None):
        super().__init__(message, ErrorCode.INTERCEPTOR_RETURNED_NONE, details)
