"""
Response models for Vault Connector.

Vault wraps most payloads in a common envelope (request ID, lease information,
warnings, ``data`` and ``auth``). Each response model types the parts of the
envelope its endpoint fills in.
"""

import base64
import binascii
import json
from datetime import datetime
from typing import Any, Dict, List, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError, field_validator, model_validator

from .exceptions import InvalidResponseError
from .models import AppRole, AppRoleSecret, AuthBackend, TokenRole, VaultModel

T = TypeVar("T")
R = TypeVar("R", bound="ResponseModel")

_TIME_ADAPTER = TypeAdapter(Optional[datetime])


def parse_time(value: Optional[str]) -> Optional[datetime]:
    """
    Parse an RFC 3339 timestamp as returned by Vault.

    Vault reports nanosecond precision, which is truncated to microseconds.
    Returns None for empty or unparseable values.
    """
    if not value:
        return None
    try:
        return _TIME_ADAPTER.validate_python(value)
    except ValidationError:
        return None


class ResponseModel(BaseModel):
    """Base class for all parsed responses."""
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    @classmethod
    def from_payload(cls: Type[R], payload: Any) -> R:
        """Validate a decoded JSON payload, raising InvalidResponseError on mismatch."""
        try:
            return cls.model_validate(payload)
        except ValidationError:
            # Validation messages echo input values, which may be secrets.
            raise InvalidResponseError("Unable to parse response payload") from None


# Embedded objects

class WrapInfo(VaultModel):
    """Response-wrapping information."""

    token: Optional[str] = None
    accessor: Optional[str] = None
    ttl: Optional[int] = None
    creation_time: Optional[str] = None
    creation_path: Optional[str] = None
    wrapped_accessor: Optional[str] = None


class AuthData(VaultModel):
    """Authentication data returned on login or token creation."""

    client_token: Optional[str] = None
    accessor: Optional[str] = None
    policies: Optional[List[str]] = None
    token_policies: Optional[List[str]] = None
    identity_policies: Optional[List[str]] = None
    metadata: Optional[Dict[str, Any]] = None
    lease_duration: Optional[int] = None
    renewable: Optional[bool] = None
    entity_id: Optional[str] = None
    token_type: Optional[str] = None
    orphan: Optional[bool] = None
    num_uses: Optional[int] = None


class TokenData(VaultModel):
    """Token properties as returned by token lookup."""

    accessor: Optional[str] = None
    creation_time: Optional[int] = None
    creation_ttl: Optional[int] = None
    display_name: Optional[str] = None
    entity_id: Optional[str] = None
    expire_time_string: Optional[str] = Field(None, alias="expire_time")
    explicit_max_ttl: Optional[int] = None
    id: Optional[str] = None
    issue_time_string: Optional[str] = Field(None, alias="issue_time")
    meta: Optional[Dict[str, Any]] = None
    num_uses: Optional[int] = None
    orphan: Optional[bool] = None
    path: Optional[str] = None
    policies: Optional[List[str]] = None
    renewable: Optional[bool] = None
    ttl: Optional[int] = None
    type: Optional[str] = None

    @property
    def expire_time(self) -> Optional[datetime]:
        return parse_time(self.expire_time_string)

    @property
    def issue_time(self) -> Optional[datetime]:
        return parse_time(self.issue_time_string)


class VersionMetadata(VaultModel):
    """Metadata of a single KV v2 secret version."""

    created_time_string: Optional[str] = Field(None, alias="created_time")
    deletion_time_string: Optional[str] = Field(None, alias="deletion_time")
    destroyed: bool = False
    version: Optional[int] = None

    @property
    def created_time(self) -> Optional[datetime]:
        return parse_time(self.created_time_string)

    @property
    def deletion_time(self) -> Optional[datetime]:
        return parse_time(self.deletion_time_string)


class SecretMetadata(VaultModel):
    """Metadata of a KV v2 secret across all versions."""

    created_time_string: Optional[str] = Field(None, alias="created_time")
    updated_time_string: Optional[str] = Field(None, alias="updated_time")
    current_version: Optional[int] = None
    max_versions: Optional[int] = None
    oldest_version: Optional[int] = None
    cas_required: Optional[bool] = None
    delete_version_after: Optional[str] = None
    custom_metadata: Optional[Dict[str, str]] = None
    versions: Dict[int, VersionMetadata] = Field(default_factory=dict)

    @property
    def created_time(self) -> Optional[datetime]:
        return parse_time(self.created_time_string)

    @property
    def updated_time(self) -> Optional[datetime]:
        return parse_time(self.updated_time_string)


class MountedAuthMethod(VaultModel):
    """An authentication backend mounted on the server."""

    type: Optional[str] = None
    description: Optional[str] = None
    config: Optional[Dict[str, str]] = None
    local: Optional[bool] = None
    seal_wrap: Optional[bool] = None
    accessor: Optional[str] = None
    external_entropy_access: Optional[bool] = None

    @field_validator("config", mode="before")
    @classmethod
    def stringify_config(cls, value: Any) -> Any:
        if isinstance(value, dict):
            return {key: str(item) for key, item in value.items()}
        return value

    @property
    def backend(self) -> AuthBackend:
        return AuthBackend.for_type(self.type)


# Response envelopes

class VaultResponse(ResponseModel):
    """Common Vault response envelope."""

    request_id: Optional[str] = None
    lease_id: Optional[str] = None
    renewable: Optional[bool] = None
    lease_duration: Optional[int] = None
    warnings: Optional[List[str]] = None
    wrap_info: Optional[WrapInfo] = None


class RawDataResponse(VaultResponse):
    """Response with untyped data."""

    data: Optional[Dict[str, Any]] = None


class ErrorResponse(ResponseModel):
    """Error payload returned with unsuccessful status codes."""

    errors: Optional[List[str]] = None


class AuthResponse(VaultResponse):
    """Response of a login or token creation."""

    auth: Optional[AuthData] = None
    data: Optional[Dict[str, Any]] = None


class TokenResponse(VaultResponse):
    """Response of a token lookup."""

    data: Optional[TokenData] = None


class TokenRoleResponse(VaultResponse):
    """Response of a token role read."""

    data: Optional[TokenRole] = None


class AppRoleResponse(VaultResponse):
    """Response of an AppRole lookup."""

    data: Optional[AppRole] = None

    @property
    def role(self) -> Optional[AppRole]:
        return self.data


class AppRoleSecretResponse(VaultResponse):
    """Response of AppRole secret ID creation or lookup."""

    data: Optional[AppRoleSecret] = None

    @property
    def secret(self) -> Optional[AppRoleSecret]:
        return self.data


class AuthMethodsResponse(VaultResponse):
    """Mounted authentication backends, keyed by mount path."""

    data: Optional[Dict[str, MountedAuthMethod]] = None

    @property
    def supported_methods(self) -> Dict[str, MountedAuthMethod]:
        return self.data or {}


class SecretResponse(VaultResponse):
    """
    Secret read response.

    KV v2 reads nest the secret as ``{"data": {...}, "metadata": {...}}``.
    That structure is unwrapped, so ``data`` always holds the secret itself
    and ``metadata`` the version information (if any).
    """

    data: Dict[str, Any] = Field(default_factory=dict)
    metadata: Optional[VersionMetadata] = None

    @model_validator(mode="before")
    @classmethod
    def unwrap_versioned_data(cls, values: Any) -> Any:
        if not isinstance(values, dict):
            return values
        data = values.get("data")
        if data is None:
            return {**values, "data": {}}
        if (
            isinstance(data, dict)
            and set(data) == {"data", "metadata"}
            and (data["data"] is None or isinstance(data["data"], dict))
        ):
            return {**values, "data": data["data"] or {}, "metadata": data["metadata"]}
        return values

    def get(self, key: str, default: Any = None) -> Any:
        """Get a single value, or default if absent."""
        return self.data.get(key, default)

    def get_value(self) -> Optional[str]:
        """Get the ``value`` entry as string, the convention for single-value secrets."""
        value = self.get("value")
        if value is None:
            return None
        return str(value)

    def get_json(self, key: str, type_: Optional[Type[T]] = None) -> Any:
        """
        Get a value holding a JSON document, parsed.

        Args:
            key: Data key
            type_: Optional target type, e.g. a pydantic model or ``List[str]``

        Returns:
            The parsed value, or None if the key is absent

        Raises:
            InvalidResponseError: If the value is no valid JSON or does not match the type
        """
        value = self.get(key)
        if value is None:
            return None
        try:
            parsed = json.loads(value) if isinstance(value, (str, bytes)) else value
            if type_ is None:
                return parsed
            return TypeAdapter(type_).validate_python(parsed)
        except (ValueError, ValidationError):
            raise InvalidResponseError("Unable to parse response payload") from None


class CredentialsResponse(SecretResponse):
    """Dynamic credentials, e.g. from a database secrets engine."""

    @property
    def username(self) -> Optional[str]:
        return self.get("username")

    @property
    def password(self) -> Optional[str]:
        return self.get("password")


class SecretListResponse(VaultResponse):
    """Response of a LIST request."""

    data: Optional[Dict[str, Any]] = None

    @property
    def keys(self) -> List[str]:
        if not self.data:
            return []
        return list(self.data.get("keys") or [])


class SecretVersionResponse(VaultResponse):
    """Version information returned on KV v2 write."""

    data: Optional[VersionMetadata] = None

    @property
    def metadata(self) -> Optional[VersionMetadata]:
        return self.data


class MetadataResponse(VaultResponse):
    """KV v2 secret metadata."""

    data: Optional[SecretMetadata] = None

    @property
    def metadata(self) -> Optional[SecretMetadata]:
        return self.data


class TransitResponse(VaultResponse):
    """Result of a transit encrypt, decrypt or hash operation."""

    data: Dict[str, Any] = Field(default_factory=dict)

    @property
    def ciphertext(self) -> Optional[str]:
        return self.data.get("ciphertext")

    @property
    def plaintext(self) -> Optional[bytes]:
        """Decrypted plaintext, base64 decoded."""
        value = self.data.get("plaintext")
        if value is None:
            return None
        try:
            return base64.b64decode(value, validate=True)
        except (binascii.Error, ValueError):
            raise InvalidResponseError("Unable to decode plaintext") from None

    @property
    def sum(self) -> Optional[str]:
        return self.data.get("sum")


class SealResponse(ResponseModel):
    """Seal status."""

    type: Optional[str] = None
    sealed: bool = False
    initialized: bool = False
    threshold: Optional[int] = Field(None, alias="t")
    number_of_shares: Optional[int] = Field(None, alias="n")
    progress: Optional[int] = None
    version: Optional[str] = None
    nonce: Optional[str] = None
    cluster_name: Optional[str] = None
    cluster_id: Optional[str] = None
    migration: Optional[bool] = None
    recovery_seal: Optional[bool] = None
    storage_type: Optional[str] = None


class HealthResponse(ResponseModel):
    """Server health status."""

    cluster_id: Optional[str] = None
    cluster_name: Optional[str] = None
    version: Optional[str] = None
    server_time_utc: Optional[int] = None
    standby: Optional[bool] = None
    sealed: Optional[bool] = None
    initialized: Optional[bool] = None
    replication_performance_mode: Optional[str] = None
    replication_dr_mode: Optional[str] = None
    performance_standby: Optional[bool] = None
