"""Error taxonomy for parley.

DecodeError is only raised by strict frame parsing, and StaleDeltaError
never leaves the session that raised it.
"""


class ParleyError(Exception):
    """Base class for all parley errors."""


class ConfigurationError(ParleyError):
    """Sending is impossible with the current configuration (e.g. no API key)."""


class TransportError(ParleyError):
    """The transport could not be started."""


class DecodeError(ParleyError):
    """An event-stream frame could not be decoded."""


class StaleDeltaError(ParleyError):
    """A callback arrived for a request that has since been superseded."""

    def __init__(self, generation: int, current: int | None):
        super().__init__(f"generation {generation} is stale (current: {current})")
        self.generation = generation
        self.current = current
