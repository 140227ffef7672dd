from typing import Optional


class ExporterError(Exception):
    """Base class for errors that abort a single collection cycle."""


class TransportError(ExporterError):
    def __init__(self, message: str, url: Optional[str] = None):
        self.reason = message
        self.url = url
        super().__init__(f"{message} ({url})" if url else message)


class DecodeError(ExporterError):
    pass


class ConfigError(ExporterError):
    pass
