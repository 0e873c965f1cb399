"""
Exception types raised while exporting App Services users.
"""

from typing import Any, Optional


class ExportError(Exception):
    """Base class for every error the exporter surfaces to the CLI."""


class ConfigurationError(ExportError):
    """Missing or malformed environment variables and command line flags."""


class TransportError(ExportError):
    """The HTTP request itself failed (DNS, connection reset, TLS...)."""


class AuthenticationError(ExportError):
    def __init__(self, status: Optional[int], body: Any = None):
        self.status = status
        self.body = body
        super().__init__(f"Authentication failed with HTTP status {status}")


class FetchError(ExportError):
    def __init__(self, resource: str, status: Optional[int], body: Any = None, reason: Optional[str] = None):
        self.resource = resource
        self.status = status
        self.body = body
        message = reason or f"HTTP status {status}"
        super().__init__(f"Error fetching {resource}: {message}")
