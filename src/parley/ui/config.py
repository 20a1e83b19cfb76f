"""UI configuration constants.

Key bindings, log levels and display values shared by the app and the CLI.
"""


class LogLevel:
    """Thresholds for the string levels passed to debug callbacks.

    Components report records as "debug", "info", "warning" or "error"; the
    log panel and the CLI compare them numerically against a threshold.
    """

    DEBUG = 10
    INFO = 20
    WARNING = 30
    ERROR = 40

    _by_name = {
        "debug": DEBUG,
        "info": INFO,
        "warning": WARNING,
        "error": ERROR,
    }

    @classmethod
    def name(cls, level: int) -> str:
        """Upper-case label for a numeric level."""
        for label, value in cls._by_name.items():
            if value == level:
                return label.upper()
        return "UNKNOWN"

    @classmethod
    def from_string(cls, level_str: str) -> int:
        """Numeric level for a record or option value; unknown names mean DEBUG."""
        return cls._by_name.get(level_str.strip().lower(), cls.DEBUG)


# Key bindings (Textual key names, comma-separated alternatives)
SEND_KEYS = "ctrl+s,ctrl+right_square_bracket"
SEND_KEY_LABEL = "Ctrl+S"

# Log panel configuration
LOG_TIMESTAMP_FORMAT = "%H:%M:%S"
LOG_MAX_MESSAGE_LENGTH = 500  # Characters before truncating log messages

# Status bar refresh period in seconds
STATUS_REFRESH_INTERVAL = 0.25

APP_TITLE = "Claude Chat"
THEME = "catppuccin-mocha"
