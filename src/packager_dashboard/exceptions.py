"""Application exception classes."""


class ConfigError(Exception):
    """Raised when configuration is invalid or incomplete."""


class EventSourceError(Exception):
    """Raised when the event stream cannot be opened or read."""
