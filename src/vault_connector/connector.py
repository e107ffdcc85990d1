"""
Vault Connector interface.

Defines every operation a connector offers. Convenience operations on the
default ``secret/`` mount are implemented here on top of the generic
primitives.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Union

from .auth import AuthMethod
from .exceptions import InvalidRequestError
from .models import AppRole, AppRoleSecret, AuthBackend, Token, TokenRole
from .responses import (
    AppRoleResponse,
    AppRoleSecretResponse,
    AuthResponse,
    CredentialsResponse,
    HealthResponse,
    MetadataResponse,
    SealResponse,
    SecretResponse,
    SecretVersionResponse,
    TokenResponse,
    TokenRoleResponse,
    TransitResponse,
)

PATH_SECRET = "secret"


class VaultConnector(ABC):
    """Abstract connector for a Vault server."""

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    # Connection state

    @abstractmethod
    def reset_auth(self) -> None:
        """Drop the current token, if any."""
        pass

    @abstractmethod
    def is_authorized(self) -> bool:
        """Whether a token is set and has not expired."""
        pass

    @abstractmethod
    def close(self) -> None:
        """Reset authorization and release the underlying connection pool."""
        pass

    # System

    @abstractmethod
    def seal_status(self) -> SealResponse:
        """Retrieve the seal status."""
        pass

    @abstractmethod
    def seal(self) -> None:
        """Seal the server. Requires a token with sudo capability."""
        pass

    @abstractmethod
    def unseal(self, key: str, reset: bool = False) -> SealResponse:
        """
        Submit an unseal key share.

        Args:
            key: A single unseal key share
            reset: Discard previously submitted shares

        Returns:
            Seal status after submitting the share
        """
        pass

    @abstractmethod
    def get_health(self) -> HealthResponse:
        """Query server health. Works unauthenticated and on sealed servers."""
        pass

    @abstractmethod
    def get_auth_backends(self) -> List[AuthBackend]:
        """List the types of all mounted authentication backends."""
        pass

    # Authentication

    @abstractmethod
    def login(self, method: AuthMethod) -> Union[AuthResponse, TokenResponse]:
        """
        Authenticate with any supported login method.

        On success the returned client token is used for all further requests.
        """
        pass

    @abstractmethod
    def auth_token(self, token: str) -> TokenResponse:
        """Authenticate with an existing token, verified via lookup-self."""
        pass

    @abstractmethod
    def auth_user_pass(self, username: str, password: str) -> AuthResponse:
        """Authenticate against the userpass backend."""
        pass

    @abstractmethod
    def auth_app_id(self, app_id: str, user_id: str) -> AuthResponse:
        """Authenticate against the legacy App-ID backend."""
        pass

    @abstractmethod
    def auth_app_role(self, role_id: str, secret_id: Optional[str] = None) -> AuthResponse:
        """Authenticate against the AppRole backend."""
        pass

    # App-ID administration

    @abstractmethod
    def register_app_id(self, app_id: str, policy: str, display_name: str) -> bool:
        """Register a new App-ID mapped to a policy."""
        pass

    @abstractmethod
    def register_user_id(self, app_id: str, user_id: str) -> bool:
        """Register a user ID for an existing App-ID."""
        pass

    # AppRole administration

    @abstractmethod
    def create_app_role(
        self,
        role: Union[AppRole, str],
        role_id: Optional[str] = None,
        policies: Optional[List[str]] = None,
    ) -> bool:
        """
        Create or update an AppRole.

        Args:
            role: The role model, or just a role name
            role_id: Custom role ID, only used with a role name
            policies: Token policies, only used with a role name

        Returns:
            True on success
        """
        pass

    @abstractmethod
    def lookup_app_role(self, role_name: str) -> AppRoleResponse:
        pass

    @abstractmethod
    def delete_app_role(self, role_name: str) -> bool:
        pass

    @abstractmethod
    def get_app_role_id(self, role_name: str) -> str:
        pass

    @abstractmethod
    def set_app_role_id(self, role_name: str, role_id: str) -> bool:
        pass

    @abstractmethod
    def create_app_role_secret(
        self,
        role_name: str,
        secret: Union[AppRoleSecret, str, None] = None,
    ) -> AppRoleSecretResponse:
        """
        Create a secret ID for an AppRole.

        Args:
            role_name: The role name
            secret: Secret model or custom secret ID; a random ID is generated if omitted
        """
        pass

    @abstractmethod
    def lookup_app_role_secret(self, role_name: str, secret_id: str) -> AppRoleSecretResponse:
        pass

    @abstractmethod
    def destroy_app_role_secret(self, role_name: str, secret_id: str) -> bool:
        pass

    @abstractmethod
    def list_app_roles(self) -> List[str]:
        pass

    @abstractmethod
    def list_app_role_secrets(self, role_name: str) -> List[str]:
        """List the accessors of all secret IDs of a role."""
        pass

    # Generic secrets

    @abstractmethod
    def read(self, key: str) -> SecretResponse:
        """Read a secret from an arbitrary path."""
        pass

    @abstractmethod
    def list(self, path: str) -> List[str]:
        """List keys below an arbitrary path."""
        pass

    @abstractmethod
    def write(
        self,
        key: str,
        data: Optional[Dict[str, Any]] = None,
        options: Optional[Dict[str, Any]] = None,
    ) -> None:
        """
        Write data to an arbitrary path.

        If options are given, the body is sent as ``{"data": ..., "options": ...}``
        as versioned engines expect; otherwise data is the body.
        """
        pass

    @abstractmethod
    def delete(self, key: str) -> None:
        """Delete an arbitrary path."""
        pass

    def read_secret(self, key: str) -> SecretResponse:
        """Read a secret from the default ``secret/`` mount."""
        return self.read(f"{PATH_SECRET}/{key}")

    def list_secrets(self, path: str) -> List[str]:
        """List secrets below a path of the default mount."""
        return self.list(f"{PATH_SECRET}/{path}")

    def write_secret(self, key: str, value: str) -> None:
        """Write a single-value secret to the default mount."""
        if not key:
            raise InvalidRequestError("Secret path must not be empty")
        self.write(f"{PATH_SECRET}/{key}", {"value": value})

    def delete_secret(self, key: str) -> None:
        """Delete a secret from the default mount."""
        if not key:
            raise InvalidRequestError("Secret path must not be empty")
        self.delete(f"{PATH_SECRET}/{key}")

    # KV v2

    @abstractmethod
    def read_secret_data(self, mount: str, key: str) -> SecretResponse:
        """Read the latest version of a KV v2 secret."""
        pass

    @abstractmethod
    def read_secret_version(self, mount: str, key: str, version: int) -> SecretResponse:
        """Read a specific version of a KV v2 secret."""
        pass

    @abstractmethod
    def write_secret_data(
        self,
        mount: str,
        key: str,
        data: Dict[str, Any],
        cas: Optional[int] = None,
    ) -> SecretVersionResponse:
        """
        Write a new version of a KV v2 secret.

        Args:
            mount: Mount path of the KV v2 engine
            key: Secret key
            data: Secret data
            cas: Check-and-set version; 0 only writes if the key does not exist

        Returns:
            Metadata of the newly created version
        """
        pass

    @abstractmethod
    def read_secret_metadata(self, mount: str, key: str) -> MetadataResponse:
        pass

    @abstractmethod
    def update_secret_metadata(
        self,
        mount: str,
        key: str,
        max_versions: Optional[int] = None,
        cas_required: Optional[bool] = None,
    ) -> None:
        pass

    @abstractmethod
    def delete_latest_secret_version(self, mount: str, key: str) -> None:
        """Soft-delete the latest version of a KV v2 secret."""
        pass

    @abstractmethod
    def delete_all_secret_versions(self, mount: str, key: str) -> None:
        """Permanently delete a KV v2 secret with all versions and metadata."""
        pass

    @abstractmethod
    def delete_secret_versions(self, mount: str, key: str, *versions: int) -> None:
        """Soft-delete the given versions."""
        pass

    @abstractmethod
    def undelete_secret_versions(self, mount: str, key: str, *versions: int) -> None:
        """Restore soft-deleted versions."""
        pass

    @abstractmethod
    def destroy_secret_versions(self, mount: str, key: str, *versions: int) -> None:
        """Permanently destroy the given versions."""
        pass

    # Leases

    @abstractmethod
    def renew(self, lease_id: str, increment: Optional[int] = None) -> SecretResponse:
        pass

    @abstractmethod
    def revoke(self, lease_id: str) -> None:
        pass

    # Tokens

    @abstractmethod
    def create_token(
        self,
        token: Token,
        orphan: bool = False,
        role: Optional[str] = None,
    ) -> AuthResponse:
        """
        Create a new token.

        Args:
            token: Token model
            orphan: Create an orphan token
            role: Create the token against a token role

        Returns:
            Authentication data of the new token
        """
        pass

    @abstractmethod
    def lookup_token(self, token: str) -> TokenResponse:
        pass

    @abstractmethod
    def create_or_update_token_role(
        self,
        role: Union[TokenRole, str],
        token_role: Optional[TokenRole] = None,
    ) -> bool:
        """
        Create or update a token role.

        Either pass a role with its name set, or a name and a role.
        """
        pass

    @abstractmethod
    def read_token_role(self, name: str) -> TokenRoleResponse:
        pass

    @abstractmethod
    def list_token_roles(self) -> List[str]:
        pass

    @abstractmethod
    def delete_token_role(self, name: str) -> bool:
        pass

    # Secrets engines

    @abstractmethod
    def read_db_credentials(self, role: str, mount: str = "database") -> CredentialsResponse:
        """Request dynamic credentials from a database secrets engine."""
        pass

    @abstractmethod
    def transit_encrypt(
        self, key_name: str, plaintext: Union[str, bytes], mount: str = "transit"
    ) -> TransitResponse:
        pass

    @abstractmethod
    def transit_decrypt(self, key_name: str, ciphertext: str, mount: str = "transit") -> TransitResponse:
        pass

    @abstractmethod
    def transit_hash(
        self,
        algorithm: str,
        input: Union[str, bytes],
        format: Optional[str] = None,
        mount: str = "transit",
    ) -> TransitResponse:
        pass
