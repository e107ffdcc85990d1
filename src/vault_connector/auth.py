"""
Authentication methods for Vault Connector.

Each login method knows the endpoint of its backend and the payload to post
there. A successful login yields a client token, which is then carried by
:class:`TokenAuth` on every subsequent request.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from .exceptions import InvalidRequestError
from .models import AuthBackend

TOKEN_HEADER = "X-Vault-Token"


class AuthMethod(ABC):
    """Base class for authentication methods."""

    backend: AuthBackend = AuthBackend.UNKNOWN

    def __init__(self, mount: Optional[str] = None):
        self.mount = (mount or self.backend.value).strip("/")

    @property
    def login_path(self) -> str:
        """Login endpoint relative to the API prefix."""
        return f"auth/{self.mount}/login"

    @abstractmethod
    def get_payload(self) -> Dict[str, Any]:
        """Get the login request body."""
        pass

    def __repr__(self) -> str:
        return f"{type(self).__name__}(mount={self.mount!r})"


class TokenAuth(AuthMethod):
    """Token authentication."""

    backend = AuthBackend.TOKEN

    def __init__(self, token: str):
        """
        Initialize token authentication.

        Args:
            token: The Vault token
        """
        if not token:
            raise InvalidRequestError("Token must not be empty")
        super().__init__()
        self.token = token

    @property
    def login_path(self) -> str:
        return "auth/token/lookup-self"

    def get_payload(self) -> Dict[str, Any]:
        return {}

    def get_headers(self) -> Dict[str, str]:
        """Get authentication headers."""
        return {TOKEN_HEADER: self.token}


class UserPassAuth(AuthMethod):
    """Username and password authentication."""

    backend = AuthBackend.USERPASS

    def __init__(self, username: str, password: str, mount: Optional[str] = None):
        """
        Initialize username/password authentication.

        Args:
            username: Username for authentication
            password: Password for authentication
            mount: Backend mount path (default: userpass)
        """
        super().__init__(mount)
        self.username = username
        self.password = password

    @property
    def login_path(self) -> str:
        return f"auth/{self.mount}/login/{self.username}"

    def get_payload(self) -> Dict[str, Any]:
        return {"password": self.password}


class AppRoleAuth(AuthMethod):
    """AppRole authentication."""

    backend = AuthBackend.APPROLE

    def __init__(self, role_id: str, secret_id: Optional[str] = None, mount: Optional[str] = None):
        """
        Initialize AppRole authentication.

        Args:
            role_id: The role ID
            secret_id: The secret ID, omitted for roles without bound secret ID
            mount: Backend mount path (default: approle)
        """
        super().__init__(mount)
        self.role_id = role_id
        self.secret_id = secret_id

    def get_payload(self) -> Dict[str, Any]:
        payload = {"role_id": self.role_id}
        if self.secret_id is not None:
            payload["secret_id"] = self.secret_id
        return payload


class AppIdAuth(AuthMethod):
    """App-ID authentication (legacy backend, removed from recent servers)."""

    backend = AuthBackend.APPID

    def __init__(self, app_id: str, user_id: str, mount: Optional[str] = None):
        super().__init__(mount)
        self.app_id = app_id
        self.user_id = user_id

    def get_payload(self) -> Dict[str, Any]:
        return {"app_id": self.app_id, "user_id": self.user_id}

