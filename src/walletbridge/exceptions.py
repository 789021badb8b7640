"""Exceptions raised by walletbridge.

Every error derives from :class:`WalletBridgeError`, so callers that do not
care about the failure kind can catch a single type. Nothing in the library
retries or swallows these errors; they always reach the immediate caller.
"""

import httpx


class WalletBridgeError(Exception):
    """Base class for all walletbridge errors."""

    pass


class ConfigurationError(WalletBridgeError):
    """Raised when credentials or settings are missing or invalid."""

    pass


class AuthError(WalletBridgeError):
    """Raised when signing an assertion or exchanging it for a token fails.

    Attributes:
        status_code: HTTP status code from the token endpoint, if available.
        body: Raw response body from the token endpoint, if available.
    """

    def __init__(self, message: str, status_code: int | None = None, body: str | None = None) -> None:
        """Initialize the error.

        Args:
            message: Error message describing what went wrong.
            status_code: HTTP status code from the token endpoint, if available.
            body: Raw response body from the token endpoint, if available.
        """
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class ApiError(WalletBridgeError):
    """Raised when the Wallet API answers with a non-2xx status.

    The response body is kept verbatim so callers can inspect or log it.
    """

    def __init__(self, status_code: int, message: str) -> None:
        """Initialize the error.

        Args:
            status_code: HTTP status code returned by the API.
            message: Response body, unmodified.
        """
        super().__init__(f"API error {status_code}: {message}")
        self.status_code = status_code
        self.message = message


class NetworkError(WalletBridgeError):
    """Raised on transport failures (DNS, connection, timeout)."""

    def __init__(self, cause: httpx.RequestError) -> None:
        """Initialize the error with the underlying transport exception."""
        super().__init__(f"Request failed: {cause}")
        self.cause = cause


class SerializationError(WalletBridgeError):
    """Raised when a request or response body cannot be encoded or decoded."""

    pass


class PassValidationError(WalletBridgeError):
    """Raised by ``PassBuilder.build()`` when a pass breaks a struct invariant.

    Attributes:
        errors: Every problem found, in the order checked.
    """

    def __init__(self, errors: list[str]) -> None:
        """Initialize the error with the list of problems found."""
        super().__init__("Invalid pass: " + "; ".join(errors))
        self.errors = errors
