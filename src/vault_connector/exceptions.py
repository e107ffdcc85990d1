"""
Exception classes for Vault Connector.
"""

from typing import Optional


class VaultConnectorError(Exception):
    """Base exception for Vault Connector."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class AuthorizationRequiredError(VaultConnectorError):
    """Operation requires an authorized connector."""

    def __init__(self, message: str = "Authorization required"):
        super().__init__(message)


class PermissionDeniedError(VaultConnectorError):
    """Vault denied access to the requested resource."""

    def __init__(self, message: str = "Permission denied"):
        super().__init__(message, status_code=403)


class InvalidRequestError(VaultConnectorError):
    """Request validation failed before sending."""
    pass


class InvalidResponseError(VaultConnectorError):
    """Unexpected response code or unparseable response payload."""

    def __init__(
        self,
        message: str = "Invalid response",
        status_code: Optional[int] = None,
        response: Optional[str] = None,
    ):
        super().__init__(message, status_code)
        self.response = response

    def __str__(self) -> str:
        if self.status_code is None:
            return self.message
        return f"{self.message} (HTTP {self.status_code})"


class ConnectionError(VaultConnectorError):
    """Connection to Vault failed."""
    pass


class TlsError(VaultConnectorError):
    """TLS setup failed."""
    pass


class ConfigurationError(VaultConnectorError):
    """Configuration error."""
    pass


VaultConnectionError = ConnectionError
