"""Configuration error types."""


class ConfigurationError(Exception):
    """Raised when the exporter configuration is rejected."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ConfigLoadError(ConfigurationError):
    """Raised when a configuration document can't be decoded."""

    def __init__(self, path: str, message: str):
        self.path = path
        super().__init__(f"{path}: {message}" if path else message)
