from .curl import CurlTransport
from .httpx_transport import HttpxTransport

__all__ = ["CurlTransport", "HttpxTransport"]
