from __future__ import annotations

from .config import ApiErrorKind, AuthErrorKind


class SugarClientError(Exception):
    """Base error for all sugar client errors."""

    def __init__(self, code: str, message: str, details: object = None) -> None:
        super().__init__(message)
        self.code = code
        self.details = details


class AuthError(SugarClientError):
    """Authentication against the OAuth2 endpoint failed."""

    def __init__(
        self, kind: AuthErrorKind, message: str, details: object = None
    ) -> None:
        super().__init__(kind.upper(), message, details)
        self.kind: AuthErrorKind = kind


class ApiError(SugarClientError):
    """A REST call failed at the HTTP or transport level."""

    def __init__(
        self,
        kind: ApiErrorKind,
        message: str,
        *,
        status: int | None = None,
        code: str | None = None,
        details: object = None,
    ) -> None:
        super().__init__(code or kind.upper(), message, details)
        self.kind: ApiErrorKind = kind
        self.status = status


class UnsupportedMethodError(SugarClientError):
    """HTTP verb is not one the client knows how to dispatch."""

    def __init__(self, method: str) -> None:
        super().__init__("UNSUPPORTED_METHOD", f"Unsupported HTTP method: {method!r}")
        self.method = method


class ConfigurationError(SugarClientError):
    """Client is missing configuration required to send a request."""

    def __init__(self, message: str) -> None:
        super().__init__("NOT_CONFIGURED", message)
