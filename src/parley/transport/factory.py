from typing import Any

from .base import Transport
from .providers import CurlTransport, HttpxTransport


def create_transport(kind: str = "httpx", **config: Any) -> Transport:
    """Create a streaming transport.

    Args:
        kind: Transport type ('httpx' or 'curl')
        **config: Transport-specific configuration
            For httpx:
                - timeout: float | None
                - client: httpx.Client | None
                - debug_callback: callable | None
            For curl:
                - executable: str (default: 'curl')
                - debug_callback: callable | None

    Returns:
        Initialized transport instance

    Raises:
        ValueError: If transport type is not supported

    Examples:
        >>> transport = create_transport("httpx", timeout=60.0)
        >>> transport = create_transport("curl", executable="/usr/bin/curl")
    """
    kind_lower = kind.lower()

    if kind_lower == "httpx":
        return HttpxTransport(**config)

    if kind_lower == "curl":
        return CurlTransport(**config)

    raise ValueError(
        f"Unsupported transport: {kind}. "
        f"Supported transports: 'httpx', 'curl'"
    )
