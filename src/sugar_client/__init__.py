from .api.files import FilesAPI
from .api.metadata import MetadataAPI
from .api.records import RecordsAPI
from .api.relationships import RelationshipsAPI
from .auth.session import Session
from .client import SugarClient
from .config import (
    ClientOptions,
    Credentials,
    HttpMethod,
    RetryOptions,
    SessionState,
    TokenPair,
)
from .errors import (
    ApiError,
    AuthError,
    ConfigurationError,
    SugarClientError,
    UnsupportedMethodError,
)
from .protocol.dispatcher import RequestDispatcher
from .transport import HttpTransport, RetryStrategy, TransportResponse

__all__ = [
    "SugarClient",
    "Session",
    "RequestDispatcher",
    "HttpTransport",
    "TransportResponse",
    "RetryStrategy",
    "RecordsAPI",
    "RelationshipsAPI",
    "FilesAPI",
    "MetadataAPI",
    "ClientOptions",
    "RetryOptions",
    "Credentials",
    "TokenPair",
    "SessionState",
    "HttpMethod",
    "SugarClientError",
    "AuthError",
    "ApiError",
    "UnsupportedMethodError",
    "ConfigurationError",
]
