from .base import Transport, TransportHandle
from .factory import create_transport
from .models import TransportRequest
from .providers import CurlTransport, HttpxTransport

__all__ = [
    "Transport",
    "TransportHandle",
    "TransportRequest",
    "create_transport",
    "CurlTransport",
    "HttpxTransport",
]
