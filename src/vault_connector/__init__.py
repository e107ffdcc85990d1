"""
Vault Connector

Python client for the HashiCorp Vault HTTP API.
Provides authentication, secret management, token and AppRole administration.
"""

from .client import HTTPVaultConnector
from .builder import HTTPVaultConnectorBuilder
from .connector import VaultConnector
from .auth import AuthMethod, TokenAuth, UserPassAuth, AppRoleAuth, AppIdAuth
from .exceptions import (
    VaultConnectorError,
    AuthorizationRequiredError,
    PermissionDeniedError,
    InvalidRequestError,
    InvalidResponseError,
    ConnectionError,
    VaultConnectionError,
    TlsError,
    ConfigurationError,
)
from .models import AuthBackend, TokenType, Token, TokenRole, AppRole, AppRoleSecret
from .responses import (
    AuthResponse,
    TokenResponse,
    SecretResponse,
    SecretListResponse,
    SecretVersionResponse,
    MetadataResponse,
    AppRoleResponse,
    AppRoleSecretResponse,
    SealResponse,
    HealthResponse,
    TokenRoleResponse,
    CredentialsResponse,
    TransitResponse,
    AuthMethodsResponse,
    RawDataResponse,
    VersionMetadata,
    SecretMetadata,
)
from .config import ClientConfig

__version__ = "1.0.0"

__all__ = [
    "HTTPVaultConnector",
    "HTTPVaultConnectorBuilder",
    "VaultConnector",
    "AuthMethod",
    "TokenAuth",
    "UserPassAuth",
    "AppRoleAuth",
    "AppIdAuth",
    "VaultConnectorError",
    "AuthorizationRequiredError",
    "PermissionDeniedError",
    "InvalidRequestError",
    "InvalidResponseError",
    "ConnectionError",
    "VaultConnectionError",
    "TlsError",
    "ConfigurationError",
    "AuthBackend",
    "TokenType",
    "Token",
    "TokenRole",
    "AppRole",
    "AppRoleSecret",
    "AuthResponse",
    "TokenResponse",
    "SecretResponse",
    "SecretListResponse",
    "SecretVersionResponse",
    "MetadataResponse",
    "AppRoleResponse",
    "AppRoleSecretResponse",
    "SealResponse",
    "HealthResponse",
    "TokenRoleResponse",
    "CredentialsResponse",
    "TransitResponse",
    "AuthMethodsResponse",
    "RawDataResponse",
    "VersionMetadata",
    "SecretMetadata",
    "ClientConfig",
]
