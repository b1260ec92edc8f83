from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, TypeAlias

SessionState: TypeAlias = Literal["unauthenticated", "authenticated"]
HttpMethod: TypeAlias = Literal["GET", "POST", "PUT", "DELETE"]
AuthErrorKind: TypeAlias = Literal["invalid_credentials", "unreachable"]
ApiErrorKind: TypeAlias = Literal["unauthorized", "not_found", "other", "unreachable"]

DEFAULT_CLIENT_ID = "sugar"
DEFAULT_CLIENT_SECRET = ""
DEFAULT_PLATFORM = "api"

TOKEN_PATH = "oauth2/token"
PING_PATH = "ping"

DEFAULT_REQUEST_TIMEOUT_MS = 30_000
DEFAULT_ALIVE_TTL_MS = 300_000


@dataclass(frozen=True)
class Credentials:
    username: str | None = None
    password: str | None = None
    client_id: str = DEFAULT_CLIENT_ID
    client_secret: str = DEFAULT_CLIENT_SECRET
    platform: str = DEFAULT_PLATFORM


@dataclass(frozen=True)
class TokenPair:
    access_token: str | None = None
    refresh_token: str | None = None


@dataclass(frozen=True)
class RetryOptions:
    max_retries: float = 3
    initial_delay_ms: int = 200
    max_delay_ms: int = 5_000
    backoff_multiplier: float = 2.0
    jitter_ms: int = 100


@dataclass(frozen=True)
class ClientOptions:
    platform: str = DEFAULT_PLATFORM
    request_timeout_ms: int = DEFAULT_REQUEST_TIMEOUT_MS
    alive_ttl_ms: int = DEFAULT_ALIVE_TTL_MS
    retry: bool | RetryOptions = False
    raise_errors: bool = False
