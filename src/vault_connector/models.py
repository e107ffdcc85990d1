"""
Request models for Vault Connector.

Models map 1:1 onto the JSON bodies Vault expects. Fields left as ``None`` are
omitted from the payload, so the server applies its own defaults.
"""

import json
from enum import Enum
from typing import Any, ClassVar, Dict, FrozenSet, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .exceptions import InvalidRequestError


class TokenType(str, Enum):
    """Token type enumeration."""
    DEFAULT = "default"
    BATCH = "batch"
    SERVICE = "service"
    DEFAULT_SERVICE = "default-service"
    DEFAULT_BATCH = "default-batch"


class AuthBackend(str, Enum):
    """Authentication backend types known to the connector."""
    TOKEN = "token"
    APPID = "app-id"
    APPROLE = "approle"
    USERPASS = "userpass"
    GITHUB = "github"
    JWT = "jwt"
    KUBERNETES = "kubernetes"
    LDAP = "ldap"
    CERT = "cert"
    UNKNOWN = "unknown"

    @classmethod
    def for_type(cls, type_: Optional[str]) -> "AuthBackend":
        """Map a raw backend type string, falling back to UNKNOWN."""
        try:
            return cls(type_)
        except ValueError:
            return cls.UNKNOWN


def split_cidrs(value: Any) -> Any:
    """Vault returns CIDR lists either as JSON list or comma-separated string."""
    if isinstance(value, str):
        cidrs = [cidr.strip() for cidr in value.split(",") if cidr.strip()]
        return cidrs or None
    return value


class VaultModel(BaseModel):
    """Base model for Vault JSON objects."""
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    # Fields transported in the URL rather than in the request body.
    payload_exclude: ClassVar[FrozenSet[str]] = frozenset()

    def to_payload(self) -> Dict[str, Any]:
        """Serialize to a request body, omitting unset fields."""
        return self.model_dump(
            mode="json",
            by_alias=True,
            exclude_none=True,
            exclude=set(self.payload_exclude),
        )


class Token(VaultModel):
    """Token creation request."""

    id: Optional[str] = Field(None, description="Token ID")
    type: Optional[TokenType] = Field(None, description="Token type")
    display_name: Optional[str] = Field(None, description="Display name")
    no_parent: Optional[bool] = Field(None, description="Create token without parent")
    no_default_policy: Optional[bool] = Field(None, description="Do not attach the default policy")
    ttl: Optional[int] = Field(None, description="Time-to-live in seconds")
    explicit_max_ttl: Optional[int] = Field(None, description="Hard TTL limit in seconds")
    num_uses: Optional[int] = Field(None, description="Maximum number of uses")
    policies: Optional[List[str]] = Field(None, description="Attached policies")
    meta: Optional[Dict[str, str]] = Field(None, description="Token metadata")
    renewable: Optional[bool] = Field(None, description="Whether the token is renewable")
    period: Optional[int] = Field(None, description="Renewal period in seconds")
    entity_alias: Optional[str] = Field(None, description="Entity alias to associate")

    @classmethod
    def builder(cls) -> "TokenBuilder":
        return TokenBuilder()


class TokenRole(VaultModel):
    """Token role definition."""
    payload_exclude: ClassVar[FrozenSet[str]] = frozenset({"name"})

    name: Optional[str] = Field(None, description="Role name")
    allowed_policies: Optional[List[str]] = None
    allowed_policies_glob: Optional[List[str]] = None
    disallowed_policies: Optional[List[str]] = None
    disallowed_policies_glob: Optional[List[str]] = None
    orphan: Optional[bool] = None
    renewable: Optional[bool] = None
    path_suffix: Optional[str] = None
    allowed_entity_aliases: Optional[List[str]] = None
    token_bound_cidrs: Optional[List[str]] = None
    token_explicit_max_ttl: Optional[int] = None
    token_no_default_policy: Optional[bool] = None
    token_num_uses: Optional[int] = None
    token_period: Optional[int] = None
    token_type: Optional[TokenType] = None

    @field_validator("token_bound_cidrs", mode="before")
    @classmethod
    def split_cidr_strings(cls, value: Any) -> Any:
        return split_cidrs(value)

    @classmethod
    def builder(cls) -> "TokenRoleBuilder":
        return TokenRoleBuilder()


class AppRole(VaultModel):
    """AppRole role definition."""
    payload_exclude: ClassVar[FrozenSet[str]] = frozenset({"name", "id"})

    name: Optional[str] = Field(None, alias="role_name", description="Role name")
    id: Optional[str] = Field(None, alias="role_id", description="Role ID")
    bind_secret_id: Optional[bool] = None
    secret_id_bound_cidrs: Optional[List[str]] = None
    secret_id_num_uses: Optional[int] = None
    secret_id_ttl: Optional[int] = None
    enable_local_secret_ids: Optional[bool] = None
    token_ttl: Optional[int] = None
    token_max_ttl: Optional[int] = None
    token_policies: Optional[List[str]] = None
    token_bound_cidrs: Optional[List[str]] = None
    token_explicit_max_ttl: Optional[int] = None
    token_no_default_policy: Optional[bool] = None
    token_num_uses: Optional[int] = None
    token_period: Optional[int] = None
    token_type: Optional[TokenType] = None

    # Superseded by the token_* fields on current servers.
    policies: Optional[List[str]] = None
    period: Optional[int] = None
    bound_cidr_list: Optional[List[str]] = None

    @field_validator("secret_id_bound_cidrs", "token_bound_cidrs", "bound_cidr_list", mode="before")
    @classmethod
    def split_cidr_strings(cls, value: Any) -> Any:
        return split_cidrs(value)

    @property
    def bound_cidr_list_string(self) -> str:
        return ",".join(self.bound_cidr_list or [])

    @classmethod
    def builder(cls, name: str) -> "AppRoleBuilder":
        return AppRoleBuilder(name)


class AppRoleSecret(VaultModel):
    """AppRole secret ID."""

    id: Optional[str] = Field(None, alias="secret_id")
    accessor: Optional[str] = Field(None, alias="secret_id_accessor")
    metadata: Optional[Dict[str, Any]] = None
    cidr_list: Optional[List[str]] = None
    token_bound_cidrs: Optional[List[str]] = None
    creation_time: Optional[str] = None
    expiration_time: Optional[str] = None
    last_updated_time: Optional[str] = None
    num_uses: Optional[int] = Field(None, alias="secret_id_num_uses")
    ttl: Optional[int] = Field(None, alias="secret_id_ttl")

    @field_validator("cidr_list", "token_bound_cidrs", mode="before")
    @classmethod
    def split_cidr_strings(cls, value: Any) -> Any:
        return split_cidrs(value)

    def to_payload(self) -> Dict[str, Any]:
        payload = self.model_dump(
            mode="json",
            by_alias=True,
            exclude_none=True,
            include={"id", "metadata", "cidr_list", "token_bound_cidrs", "num_uses", "ttl"},
        )
        # Vault expects metadata as a JSON-encoded string on write.
        if "metadata" in payload:
            payload["metadata"] = json.dumps(payload["metadata"])
        # Write parameters are named differently from the lookup fields.
        if "secret_id_num_uses" in payload:
            payload["num_uses"] = payload.pop("secret_id_num_uses")
        if "secret_id_ttl" in payload:
            payload["ttl"] = payload.pop("secret_id_ttl")
        return payload

    @classmethod
    def builder(cls) -> "AppRoleSecretBuilder":
        return AppRoleSecretBuilder()


class _ModelBuilder:
    """Fluent builder collecting fields for a model."""

    model: ClassVar[type]

    def __init__(self) -> None:
        self._fields: Dict[str, Any] = {}

    def _set(self, field: str, value: Any) -> "_ModelBuilder":
        self._fields[field] = value
        return self

    def _add(self, field: str, *values: Any) -> "_ModelBuilder":
        self._fields[field] = (self._fields.get(field) or []) + list(values)
        return self

    def build(self):
        return self.model(**self._fields)


class TokenBuilder(_ModelBuilder):
    """Builder for :class:`Token`."""

    model = Token

    def with_id(self, id: str) -> "TokenBuilder":
        return self._set("id", id)

    def with_type(self, type: TokenType) -> "TokenBuilder":
        return self._set("type", type)

    def with_display_name(self, display_name: str) -> "TokenBuilder":
        return self._set("display_name", display_name)

    def as_orphan(self) -> "TokenBuilder":
        return self._set("no_parent", True)

    def as_child(self) -> "TokenBuilder":
        return self._set("no_parent", False)

    def with_default_policy(self) -> "TokenBuilder":
        return self._set("no_default_policy", False)

    def without_default_policy(self) -> "TokenBuilder":
        return self._set("no_default_policy", True)

    def with_ttl(self, ttl: int) -> "TokenBuilder":
        return self._set("ttl", ttl)

    def with_explicit_max_ttl(self, ttl: int) -> "TokenBuilder":
        return self._set("explicit_max_ttl", ttl)

    def with_num_uses(self, num_uses: int) -> "TokenBuilder":
        return self._set("num_uses", num_uses)

    def with_policies(self, policies: List[str]) -> "TokenBuilder":
        return self._add("policies", *policies)

    def with_policy(self, policy: str) -> "TokenBuilder":
        return self._add("policies", policy)

    def with_meta(self, key: str, value: str) -> "TokenBuilder":
        self._fields.setdefault("meta", {})[key] = value
        return self

    def renewable(self, renewable: bool = True) -> "TokenBuilder":
        return self._set("renewable", renewable)

    def not_renewable(self) -> "TokenBuilder":
        return self._set("renewable", False)

    def with_period(self, period: int) -> "TokenBuilder":
        return self._set("period", period)

    def with_entity_alias(self, entity_alias: str) -> "TokenBuilder":
        return self._set("entity_alias", entity_alias)

    def build(self) -> Token:
        return super().build()


class TokenRoleBuilder(_ModelBuilder):
    """Builder for :class:`TokenRole`."""

    model = TokenRole

    def for_name(self, name: str) -> "TokenRoleBuilder":
        return self._set("name", name)

    def with_allowed_policies(self, policies: List[str]) -> "TokenRoleBuilder":
        return self._add("allowed_policies", *policies)

    def with_allowed_policy(self, policy: str) -> "TokenRoleBuilder":
        return self._add("allowed_policies", policy)

    def with_allowed_policies_glob(self, globs: List[str]) -> "TokenRoleBuilder":
        return self._add("allowed_policies_glob", *globs)

    def with_disallowed_policies(self, policies: List[str]) -> "TokenRoleBuilder":
        return self._add("disallowed_policies", *policies)

    def with_disallowed_policy(self, policy: str) -> "TokenRoleBuilder":
        return self._add("disallowed_policies", policy)

    def with_disallowed_policies_glob(self, globs: List[str]) -> "TokenRoleBuilder":
        return self._add("disallowed_policies_glob", *globs)

    def orphan(self, orphan: bool = True) -> "TokenRoleBuilder":
        return self._set("orphan", orphan)

    def renewable(self, renewable: bool = True) -> "TokenRoleBuilder":
        return self._set("renewable", renewable)

    def with_path_suffix(self, path_suffix: str) -> "TokenRoleBuilder":
        return self._set("path_suffix", path_suffix)

    def with_allowed_entity_aliases(self, aliases: List[str]) -> "TokenRoleBuilder":
        return self._add("allowed_entity_aliases", *aliases)

    def with_token_bound_cidr(self, cidr: str) -> "TokenRoleBuilder":
        return self._add("token_bound_cidrs", cidr)

    def with_token_bound_cidrs(self, cidrs: List[str]) -> "TokenRoleBuilder":
        return self._add("token_bound_cidrs", *cidrs)

    def with_token_explicit_max_ttl(self, ttl: int) -> "TokenRoleBuilder":
        return self._set("token_explicit_max_ttl", ttl)

    def with_token_no_default_policy(self, no_default_policy: bool = True) -> "TokenRoleBuilder":
        return self._set("token_no_default_policy", no_default_policy)

    def with_token_num_uses(self, num_uses: int) -> "TokenRoleBuilder":
        return self._set("token_num_uses", num_uses)

    def with_token_period(self, period: int) -> "TokenRoleBuilder":
        return self._set("token_period", period)

    def with_token_type(self, token_type: TokenType) -> "TokenRoleBuilder":
        return self._set("token_type", token_type)

    def build(self) -> TokenRole:
        return super().build()


class AppRoleBuilder(_ModelBuilder):
    """Builder for :class:`AppRole`."""

    model = AppRole

    def __init__(self, name: str):
        super().__init__()
        self._set("name", name)

    def with_id(self, role_id: str) -> "AppRoleBuilder":
        return self._set("id", role_id)

    def with_bind_secret_id(self, bind_secret_id: bool = True) -> "AppRoleBuilder":
        return self._set("bind_secret_id", bind_secret_id)

    def without_secret_id(self) -> "AppRoleBuilder":
        return self._set("bind_secret_id", False)

    def with_secret_id_bound_cidr(self, cidr: str) -> "AppRoleBuilder":
        return self._add("secret_id_bound_cidrs", cidr)

    def with_secret_id_bound_cidrs(self, cidrs: List[str]) -> "AppRoleBuilder":
        return self._add("secret_id_bound_cidrs", *cidrs)

    def with_secret_id_num_uses(self, num_uses: int) -> "AppRoleBuilder":
        return self._set("secret_id_num_uses", num_uses)

    def with_secret_id_ttl(self, ttl: int) -> "AppRoleBuilder":
        return self._set("secret_id_ttl", ttl)

    def with_enable_local_secret_ids(self, enable: bool = True) -> "AppRoleBuilder":
        return self._set("enable_local_secret_ids", enable)

    def with_token_ttl(self, ttl: int) -> "AppRoleBuilder":
        return self._set("token_ttl", ttl)

    def with_token_max_ttl(self, ttl: int) -> "AppRoleBuilder":
        return self._set("token_max_ttl", ttl)

    def with_token_policies(self, policies: List[str]) -> "AppRoleBuilder":
        return self._add("token_policies", *policies)

    def with_token_policy(self, policy: str) -> "AppRoleBuilder":
        return self._add("token_policies", policy)

    def with_token_bound_cidr(self, cidr: str) -> "AppRoleBuilder":
        return self._add("token_bound_cidrs", cidr)

    def with_token_bound_cidrs(self, cidrs: List[str]) -> "AppRoleBuilder":
        return self._add("token_bound_cidrs", *cidrs)

    def with_token_explicit_max_ttl(self, ttl: int) -> "AppRoleBuilder":
        return self._set("token_explicit_max_ttl", ttl)

    def with_token_no_default_policy(self, no_default_policy: bool = True) -> "AppRoleBuilder":
        return self._set("token_no_default_policy", no_default_policy)

    def with_token_num_uses(self, num_uses: int) -> "AppRoleBuilder":
        return self._set("token_num_uses", num_uses)

    def with_token_period(self, period: int) -> "AppRoleBuilder":
        return self._set("token_period", period)

    def with_token_type(self, token_type: TokenType) -> "AppRoleBuilder":
        return self._set("token_type", token_type)

    def build(self) -> AppRole:
        if not self._fields.get("name"):
            raise InvalidRequestError("Role name must not be empty")
        return super().build()


class AppRoleSecretBuilder(_ModelBuilder):
    """Builder for :class:`AppRoleSecret`."""

    model = AppRoleSecret

    def with_id(self, secret_id: str) -> "AppRoleSecretBuilder":
        return self._set("id", secret_id)

    def with_metadata(self, metadata: Dict[str, Any]) -> "AppRoleSecretBuilder":
        return self._set("metadata", dict(metadata))

    def with_cidr(self, cidr: str) -> "AppRoleSecretBuilder":
        return self._add("cidr_list", cidr)

    def with_cidr_list(self, cidrs: List[str]) -> "AppRoleSecretBuilder":
        return self._add("cidr_list", *cidrs)

    def with_token_bound_cidrs(self, cidrs: List[str]) -> "AppRoleSecretBuilder":
        return self._add("token_bound_cidrs", *cidrs)

    def with_num_uses(self, num_uses: int) -> "AppRoleSecretBuilder":
        return self._set("num_uses", num_uses)

    def with_ttl(self, ttl: int) -> "AppRoleSecretBuilder":
        return self._set("ttl", ttl)

    def build(self) -> AppRoleSecret:
        return super().build()
