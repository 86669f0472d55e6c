"""Exception hierarchy for anistream."""


class AnistreamError(Exception):
    """Base class for all anistream errors."""


class ConfigError(AnistreamError):
    """Raised when a configuration value is missing or invalid."""


class StreamDirectoryError(AnistreamError):
    """Raised when the stream directory cannot be listed."""


class InvalidPageError(AnistreamError):
    """Raised when a requested page number is not a positive integer."""

    def __init__(self, raw: str):
        super().__init__(f"Invalid page number: {raw!r}")
        self.raw = raw
