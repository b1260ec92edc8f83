from .retry import RetryStrategy
from .transport import HttpTransport, TransportResponse

__all__ = ["HttpTransport", "TransportResponse", "RetryStrategy"]
