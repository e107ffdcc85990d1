"""
HTTP Vault Connector

Connector implementation talking to the Vault REST API over HTTP(S).
"""

import base64
import logging
import ssl
import time
from typing import Any, Dict, List, Optional, Union

import httpx

from .auth import AppIdAuth, AppRoleAuth, AuthMethod, TokenAuth, UserPassAuth
from .config import ClientConfig
from .connector import VaultConnector
from .exceptions import AuthorizationRequiredError, InvalidRequestError, InvalidResponseError
from .models import AppRole, AppRoleSecret, AuthBackend, Token, TokenRole
from .responses import (
    AppRoleResponse,
    AppRoleSecretResponse,
    AuthMethodsResponse,
    AuthResponse,
    CredentialsResponse,
    HealthResponse,
    MetadataResponse,
    RawDataResponse,
    SealResponse,
    SecretListResponse,
    SecretResponse,
    SecretVersionResponse,
    TokenResponse,
    TokenRoleResponse,
    TransitResponse,
)
from .transport import RequestHelper

logger = logging.getLogger(__name__)

PATH_SEAL_STATUS = "sys/seal-status"
PATH_SEAL = "sys/seal"
PATH_UNSEAL = "sys/unseal"
PATH_HEALTH = "sys/health"
PATH_AUTH = "sys/auth"
PATH_RENEW = "sys/leases/renew"
PATH_REVOKE = "sys/leases/revoke/"
PATH_TOKEN = "auth/token"
PATH_APPROLE_ROLE = "auth/approle/role"
PATH_APPID_MAP = "auth/app-id/map"


def _require_name(value: Optional[str], what: str) -> str:
    if not value:
        raise InvalidRequestError(f"{what} must not be empty")
    return value


def _b64(value: Union[str, bytes]) -> str:
    if isinstance(value, str):
        value = value.encode("utf-8")
    return base64.b64encode(value).decode("ascii")


class HTTPVaultConnector(VaultConnector):
    """
    Vault connector using the HTTP API.

    A connector holds at most one client token. Privileged operations raise
    :class:`AuthorizationRequiredError` before sending anything if no valid
    token is present.

    Example:
        >>> with HTTPVaultConnector.builder().with_host("vault.local").build() as vault:
        ...     vault.auth_user_pass("user", "pass")
        ...     vault.read_secret("app/db").get("password")
    """

    def __init__(
        self,
        base_url: str,
        config: Optional[ClientConfig] = None,
        ssl_context: Optional[ssl.SSLContext] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        """
        Initialize the connector.

        Args:
            base_url: API base URL, e.g. ``https://127.0.0.1:8200/v1/``
            config: Optional client configuration
            ssl_context: Optional SSL context with custom trust anchors
            transport: Optional custom httpx transport
        """
        self.config = config or ClientConfig()
        self._request = RequestHelper(
            base_url,
            config=self.config,
            ssl_context=ssl_context,
            transport=transport,
        )
        self._auth: Optional[TokenAuth] = None
        self._token_expiry: float = 0

    @property
    def base_url(self) -> str:
        return self._request.base_url

    @staticmethod
    def builder():
        """Get a :class:`HTTPVaultConnectorBuilder` instance."""
        from .builder import HTTPVaultConnectorBuilder

        return HTTPVaultConnectorBuilder()

    def __repr__(self) -> str:
        return f"HTTPVaultConnector(base_url={self.base_url!r}, authorized={self.is_authorized()})"

    def reset_auth(self) -> None:
        self._auth = None
        self._token_expiry = 0

    def is_authorized(self) -> bool:
        if self._auth is None:
            return False
        return self._token_expiry == 0 or self._token_expiry >= time.time()

    def close(self) -> None:
        """Reset authorization and close the HTTP client."""
        self.reset_auth()
        self._request.close()

    def _require_auth(self) -> TokenAuth:
        if not self.is_authorized():
            raise AuthorizationRequiredError()
        return self._auth

    def _authorize(self, token: str, lease_duration: Optional[int]) -> None:
        self._auth = TokenAuth(token)
        if lease_duration and lease_duration > 0:
            self._token_expiry = time.time() + lease_duration
        else:
            self._token_expiry = 0

    # System

    def seal_status(self) -> SealResponse:
        return self._request.get(PATH_SEAL_STATUS, model=SealResponse)

    def seal(self) -> None:
        self._request.put(PATH_SEAL, auth=self._auth)

    def unseal(self, key: str, reset: bool = False) -> SealResponse:
        payload = {"key": key, "reset": reset}
        return self._request.put(PATH_UNSEAL, payload, model=SealResponse)

    def get_health(self) -> HealthResponse:
        # Force 200 for standby, sealed, uninitialized and DR secondary servers,
        # so the status is returned as payload instead of an error code.
        params = {
            "standbycode": 200,
            "sealedcode": 200,
            "uninitcode": 200,
            "performancestandbycode": 200,
            "drsecondarycode": 200,
        }
        return self._request.get(PATH_HEALTH, params=params, auth=self._auth, model=HealthResponse)

    def get_auth_backends(self) -> List[AuthBackend]:
        response = self._request.get(PATH_AUTH, auth=self._auth, model=AuthMethodsResponse)
        return [method.backend for method in response.supported_methods.values()]

    # Authentication

    def login(self, method: AuthMethod) -> Union[AuthResponse, TokenResponse]:
        """Authenticate with the given login method."""
        self.reset_auth()
        if isinstance(method, TokenAuth):
            response = self._request.get(method.login_path, auth=method, model=TokenResponse)
            ttl = response.data.ttl if response.data else None
            self._authorize(method.token, ttl)
            logger.debug("Authenticated with token")
            return response

        response = self._request.post(method.login_path, method.get_payload(), model=AuthResponse)
        if response.auth is None or not response.auth.client_token:
            raise InvalidResponseError("Response contains no authentication data")
        self._authorize(response.auth.client_token, response.auth.lease_duration)
        logger.debug(f"Authenticated against {method.backend.value} backend")
        return response

    def auth_token(self, token: str) -> TokenResponse:
        return self.login(TokenAuth(token))

    def auth_user_pass(self, username: str, password: str) -> AuthResponse:
        return self.login(UserPassAuth(username, password))

    def auth_app_id(self, app_id: str, user_id: str) -> AuthResponse:
        return self.login(AppIdAuth(app_id, user_id))

    def auth_app_role(self, role_id: str, secret_id: Optional[str] = None) -> AuthResponse:
        return self.login(AppRoleAuth(role_id, secret_id))

    # App-ID administration

    def register_app_id(self, app_id: str, policy: str, display_name: str) -> bool:
        auth = self._require_auth()
        _require_name(app_id, "App ID")
        payload = {"value": policy, "display_name": display_name}
        self._request.post(f"{PATH_APPID_MAP}/app-id/{app_id}", payload, auth=auth)
        return True

    def register_user_id(self, app_id: str, user_id: str) -> bool:
        auth = self._require_auth()
        _require_name(app_id, "App ID")
        _require_name(user_id, "User ID")
        self._request.post(f"{PATH_APPID_MAP}/user-id/{user_id}", {"value": app_id}, auth=auth)
        return True

    # AppRole administration

    def create_app_role(
        self,
        role: Union[AppRole, str],
        role_id: Optional[str] = None,
        policies: Optional[List[str]] = None,
    ) -> bool:
        auth = self._require_auth()
        if isinstance(role, str):
            role = AppRole(name=role, id=role_id, token_policies=policies)
        name = _require_name(role.name, "Role name")

        self._request.post(f"{PATH_APPROLE_ROLE}/{name}", role.to_payload(), auth=auth)
        if role.id is not None:
            self.set_app_role_id(name, role.id)
        return True

    def lookup_app_role(self, role_name: str) -> AppRoleResponse:
        auth = self._require_auth()
        _require_name(role_name, "Role name")
        return self._request.get(f"{PATH_APPROLE_ROLE}/{role_name}", auth=auth, model=AppRoleResponse)

    def delete_app_role(self, role_name: str) -> bool:
        auth = self._require_auth()
        _require_name(role_name, "Role name")
        self._request.delete(f"{PATH_APPROLE_ROLE}/{role_name}", auth=auth)
        return True

    def get_app_role_id(self, role_name: str) -> str:
        auth = self._require_auth()
        _require_name(role_name, "Role name")
        response = self._request.get(
            f"{PATH_APPROLE_ROLE}/{role_name}/role-id", auth=auth, model=RawDataResponse
        )
        if not response.data or "role_id" not in response.data:
            raise InvalidResponseError("Response contains no role ID")
        return response.data["role_id"]

    def set_app_role_id(self, role_name: str, role_id: str) -> bool:
        auth = self._require_auth()
        _require_name(role_name, "Role name")
        _require_name(role_id, "Role ID")
        self._request.post(f"{PATH_APPROLE_ROLE}/{role_name}/role-id", {"role_id": role_id}, auth=auth)
        return True

    def create_app_role_secret(
        self,
        role_name: str,
        secret: Union[AppRoleSecret, str, None] = None,
    ) -> AppRoleSecretResponse:
        auth = self._require_auth()
        _require_name(role_name, "Role name")
        if secret is None:
            secret = AppRoleSecret()
        elif isinstance(secret, str):
            secret = AppRoleSecret(id=secret)

        endpoint = "custom-secret-id" if secret.id else "secret-id"
        return self._request.post(
            f"{PATH_APPROLE_ROLE}/{role_name}/{endpoint}",
            secret.to_payload(),
            auth=auth,
            model=AppRoleSecretResponse,
        )

    def lookup_app_role_secret(self, role_name: str, secret_id: str) -> AppRoleSecretResponse:
        auth = self._require_auth()
        _require_name(role_name, "Role name")
        _require_name(secret_id, "Secret ID")
        return self._request.post(
            f"{PATH_APPROLE_ROLE}/{role_name}/secret-id/lookup",
            {"secret_id": secret_id},
            auth=auth,
            model=AppRoleSecretResponse,
        )

    def destroy_app_role_secret(self, role_name: str, secret_id: str) -> bool:
        auth = self._require_auth()
        _require_name(role_name, "Role name")
        _require_name(secret_id, "Secret ID")
        self._request.post(
            f"{PATH_APPROLE_ROLE}/{role_name}/secret-id/destroy",
            {"secret_id": secret_id},
            auth=auth,
        )
        return True

    def list_app_roles(self) -> List[str]:
        auth = self._require_auth()
        return self._request.list(PATH_APPROLE_ROLE, auth=auth, model=SecretListResponse).keys

    def list_app_role_secrets(self, role_name: str) -> List[str]:
        auth = self._require_auth()
        _require_name(role_name, "Role name")
        return self._request.list(
            f"{PATH_APPROLE_ROLE}/{role_name}/secret-id", auth=auth, model=SecretListResponse
        ).keys

    # Generic secrets

    def read(self, key: str) -> SecretResponse:
        auth = self._require_auth()
        _require_name(key, "Secret path")
        return self._request.get(key, auth=auth, model=SecretResponse)

    def list(self, path: str) -> List[str]:
        auth = self._require_auth()
        _require_name(path, "Secret path")
        return self._request.list(f"{path.rstrip('/')}/", auth=auth, model=SecretListResponse).keys

    def write(
        self,
        key: str,
        data: Optional[Dict[str, Any]] = None,
        options: Optional[Dict[str, Any]] = None,
    ) -> None:
        auth = self._require_auth()
        _require_name(key, "Secret path")

        payload = data
        if options is not None:
            payload = {"data": data, "options": options}
        self._request.post(key, payload, auth=auth)

    def delete(self, key: str) -> None:
        auth = self._require_auth()
        _require_name(key, "Secret path")
        self._request.delete(key, auth=auth)

    # KV v2

    def read_secret_data(self, mount: str, key: str) -> SecretResponse:
        auth = self._require_auth()
        _require_name(mount, "Mount path")
        _require_name(key, "Secret path")
        return self._request.get(f"{mount}/data/{key}", auth=auth, model=SecretResponse)

    def read_secret_version(self, mount: str, key: str, version: int) -> SecretResponse:
        auth = self._require_auth()
        _require_name(mount, "Mount path")
        _require_name(key, "Secret path")
        return self._request.get(
            f"{mount}/data/{key}", params={"version": version}, auth=auth, model=SecretResponse
        )

    def write_secret_data(
        self,
        mount: str,
        key: str,
        data: Dict[str, Any],
        cas: Optional[int] = None,
    ) -> SecretVersionResponse:
        auth = self._require_auth()
        _require_name(mount, "Mount path")
        _require_name(key, "Secret path")

        payload: Dict[str, Any] = {"data": data}
        if cas is not None:
            payload["options"] = {"cas": cas}
        return self._request.post(f"{mount}/data/{key}", payload, auth=auth, model=SecretVersionResponse)

    def read_secret_metadata(self, mount: str, key: str) -> MetadataResponse:
        auth = self._require_auth()
        _require_name(mount, "Mount path")
        _require_name(key, "Secret path")
        return self._request.get(f"{mount}/metadata/{key}", auth=auth, model=MetadataResponse)

    def update_secret_metadata(
        self,
        mount: str,
        key: str,
        max_versions: Optional[int] = None,
        cas_required: Optional[bool] = None,
    ) -> None:
        auth = self._require_auth()
        _require_name(mount, "Mount path")
        _require_name(key, "Secret path")
        payload: Dict[str, Any] = {}
        if max_versions is not None:
            payload["max_versions"] = max_versions
        if cas_required is not None:
            payload["cas_required"] = cas_required
        self._request.post(f"{mount}/metadata/{key}", payload, auth=auth)

    def delete_latest_secret_version(self, mount: str, key: str) -> None:
        auth = self._require_auth()
        _require_name(mount, "Mount path")
        _require_name(key, "Secret path")
        self._request.delete(f"{mount}/data/{key}", auth=auth)

    def delete_all_secret_versions(self, mount: str, key: str) -> None:
        auth = self._require_auth()
        _require_name(mount, "Mount path")
        _require_name(key, "Secret path")
        self._request.delete(f"{mount}/metadata/{key}", auth=auth)

    def delete_secret_versions(self, mount: str, key: str, *versions: int) -> None:
        self._handle_secret_versions(mount, "delete", key, versions)

    def undelete_secret_versions(self, mount: str, key: str, *versions: int) -> None:
        self._handle_secret_versions(mount, "undelete", key, versions)

    def destroy_secret_versions(self, mount: str, key: str, *versions: int) -> None:
        self._handle_secret_versions(mount, "destroy", key, versions)

    def _handle_secret_versions(self, mount: str, action: str, key: str, versions) -> None:
        auth = self._require_auth()
        _require_name(mount, "Mount path")
        _require_name(key, "Secret path")
        if not versions:
            raise InvalidRequestError("At least one version must be given")
        self._request.post(f"{mount}/{action}/{key}", {"versions": list(versions)}, auth=auth)

    # Leases

    def renew(self, lease_id: str, increment: Optional[int] = None) -> SecretResponse:
        auth = self._require_auth()
        _require_name(lease_id, "Lease ID")
        payload: Dict[str, Any] = {"lease_id": lease_id}
        if increment is not None:
            payload["increment"] = increment
        return self._request.put(PATH_RENEW, payload, auth=auth, model=SecretResponse)

    def revoke(self, lease_id: str) -> None:
        auth = self._require_auth()
        _require_name(lease_id, "Lease ID")
        self._request.put(PATH_REVOKE + lease_id, auth=auth)

    # Tokens

    def create_token(
        self,
        token: Token,
        orphan: bool = False,
        role: Optional[str] = None,
    ) -> AuthResponse:
        auth = self._require_auth()
        if token is None:
            raise InvalidRequestError("Token must be provided")
        if role is not None:
            _require_name(role, "Token role name")

        if role is not None:
            path = f"{PATH_TOKEN}/create/{role}"
        elif orphan:
            path = f"{PATH_TOKEN}/create-orphan"
        else:
            path = f"{PATH_TOKEN}/create"
        return self._request.post(path, token.to_payload(), auth=auth, model=AuthResponse)

    def lookup_token(self, token: str) -> TokenResponse:
        auth = self._require_auth()
        _require_name(token, "Token")
        return self._request.post(f"{PATH_TOKEN}/lookup", {"token": token}, auth=auth, model=TokenResponse)

    def create_or_update_token_role(
        self,
        role: Union[TokenRole, str],
        token_role: Optional[TokenRole] = None,
    ) -> bool:
        auth = self._require_auth()
        if isinstance(role, TokenRole):
            name, token_role = role.name, role
        else:
            name = role
        _require_name(name, "Token role name")
        if token_role is None:
            raise InvalidRequestError("Token role must be provided")

        self._request.post(f"{PATH_TOKEN}/roles/{name}", token_role.to_payload(), auth=auth)
        return True

    def read_token_role(self, name: str) -> TokenRoleResponse:
        auth = self._require_auth()
        _require_name(name, "Token role name")
        return self._request.get(f"{PATH_TOKEN}/roles/{name}", auth=auth, model=TokenRoleResponse)

    def list_token_roles(self) -> List[str]:
        auth = self._require_auth()
        return self._request.list(f"{PATH_TOKEN}/roles", auth=auth, model=SecretListResponse).keys

    def delete_token_role(self, name: str) -> bool:
        auth = self._require_auth()
        _require_name(name, "Token role name")
        self._request.delete(f"{PATH_TOKEN}/roles/{name}", auth=auth)
        return True

    # Secrets engines

    def read_db_credentials(self, role: str, mount: str = "database") -> CredentialsResponse:
        auth = self._require_auth()
        _require_name(role, "Role name")
        return self._request.get(f"{mount}/creds/{role}", auth=auth, model=CredentialsResponse)

    def transit_encrypt(
        self, key_name: str, plaintext: Union[str, bytes], mount: str = "transit"
    ) -> TransitResponse:
        auth = self._require_auth()
        _require_name(key_name, "Key name")
        return self._request.post(
            f"{mount}/encrypt/{key_name}",
            {"plaintext": _b64(plaintext)},
            auth=auth,
            model=TransitResponse,
        )

    def transit_decrypt(self, key_name: str, ciphertext: str, mount: str = "transit") -> TransitResponse:
        auth = self._require_auth()
        _require_name(key_name, "Key name")
        return self._request.post(
            f"{mount}/decrypt/{key_name}",
            {"ciphertext": ciphertext},
            auth=auth,
            model=TransitResponse,
        )

    def transit_hash(
        self,
        algorithm: str,
        input: Union[str, bytes],
        format: Optional[str] = None,
        mount: str = "transit",
    ) -> TransitResponse:
        auth = self._require_auth()
        _require_name(algorithm, "Hash algorithm")
        payload = {"input": _b64(input)}
        if format is not None:
            payload["format"] = format
        return self._request.post(f"{mount}/hash/{algorithm}", payload, auth=auth, model=TransitResponse)
