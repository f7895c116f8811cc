from typing import Optional


# Exceptions
class BridgeError(Exception):
    """Base exception for failures that make a bridge request unusable."""
    def __init__(self, message: str, url: Optional[str] = None):
        super().__init__(message)
        self.url = url


class ConfigurationError(BridgeError):
    """Raised when a request is attempted before a URL was set."""
    pass


class InvalidURLError(BridgeError):
    """Raised when the URL is malformed or its scheme is not http/https."""
    pass


class MethodError(BridgeError):
    """Raised when the transport rejects the request method."""
    pass


class TransportError(BridgeError):
    """Raised when the connection, body write or response read fails."""
    pass
