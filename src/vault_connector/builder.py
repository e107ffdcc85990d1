"""
Builder for HTTP Vault Connector instances.
"""

import datetime
import logging
import os
import ssl
from pathlib import Path
from typing import Optional, Union

import httpx
from cryptography import x509

from .client import HTTPVaultConnector
from .config import ClientConfig
from .exceptions import ConfigurationError, TlsError

logger = logging.getLogger(__name__)

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 8200
DEFAULT_TLS = True
DEFAULT_PREFIX = "/v1/"

ENV_VAULT_ADDR = "VAULT_ADDR"
ENV_VAULT_TOKEN = "VAULT_TOKEN"
ENV_VAULT_CACERT = "VAULT_CACERT"
ENV_VAULT_MAX_RETRIES = "VAULT_MAX_RETRIES"


class HTTPVaultConnectorBuilder:
    """
    Fluent builder for :class:`HTTPVaultConnector`.

    Example:
        >>> vault = (
        ...     HTTPVaultConnectorBuilder()
        ...     .with_host("vault.example.com")
        ...     .with_trusted_ca("/etc/ssl/vault-ca.pem")
        ...     .with_number_of_retries(3)
        ...     .build()
        ... )
    """

    def __init__(self):
        self.host = DEFAULT_HOST
        self.port: Optional[int] = DEFAULT_PORT
        self.tls = DEFAULT_TLS
        self.tls_version: Optional[ssl.TLSVersion] = None
        self.prefix = DEFAULT_PREFIX
        self.ssl_context: Optional[ssl.SSLContext] = None
        self.token: Optional[str] = None
        self.config = ClientConfig()
        self.transport: Optional[httpx.BaseTransport] = None

    def with_host(self, host: str) -> "HTTPVaultConnectorBuilder":
        """Set the host name or IP address; IPv6 addresses may be bracketed."""
        self.host = host.strip("[]")
        return self

    def with_port(self, port: Optional[int]) -> "HTTPVaultConnectorBuilder":
        """Set the port, None to omit it from the URL."""
        if port is not None and not 0 < port < 65536:
            raise ConfigurationError("Port must be between 1 and 65535")
        self.port = port
        return self

    def with_tls(
        self, enabled: bool = True, version: Optional[ssl.TLSVersion] = None
    ) -> "HTTPVaultConnectorBuilder":
        """
        Enable or disable TLS.

        Args:
            enabled: Use HTTPS
            version: Minimum TLS version
        """
        self.tls = enabled
        self.tls_version = version
        return self

    def without_tls(self) -> "HTTPVaultConnectorBuilder":
        return self.with_tls(False)

    def with_prefix(self, prefix: str) -> "HTTPVaultConnectorBuilder":
        self.prefix = "/" + prefix.strip("/") + "/"
        return self

    def with_base_url(self, base_url: Union[str, httpx.URL]) -> "HTTPVaultConnectorBuilder":
        """
        Set host, port, TLS and prefix from a URL.

        A URL without path uses the default API prefix.
        """
        try:
            url = httpx.URL(base_url)
        except (httpx.InvalidURL, TypeError):
            raise ConfigurationError("Invalid base URL") from None
        if url.scheme not in ("http", "https") or not url.host:
            raise ConfigurationError("Invalid base URL")

        self.tls = url.scheme == "https"
        self.host = url.host
        self.port = url.port
        if url.path and url.path != "/":
            self.with_prefix(url.path)
        else:
            self.prefix = DEFAULT_PREFIX
        return self

    def with_trusted_ca(self, cert_file: Union[str, Path]) -> "HTTPVaultConnectorBuilder":
        """
        Trust the CA certificate(s) in a PEM file.

        Raises:
            TlsError: If the file cannot be read or holds no valid certificate
        """
        try:
            pem = Path(cert_file).read_bytes()
        except OSError as e:
            raise TlsError("Unable to read trusted CA certificate") from e

        try:
            certificates = x509.load_pem_x509_certificates(pem)
        except ValueError:
            raise TlsError("Unable to load trusted CA certificate") from None

        now = datetime.datetime.now(datetime.timezone.utc)
        for certificate in certificates:
            if certificate.not_valid_after_utc < now:
                logger.warning("Trusted CA certificate has expired")

        try:
            self.ssl_context = ssl.create_default_context(cadata=pem.decode("ascii"))
        except (ssl.SSLError, ValueError) as e:
            raise TlsError("Unable to initialize SSL context") from e
        return self

    def with_number_of_retries(self, retries: int) -> "HTTPVaultConnectorBuilder":
        """Set the number of retries on connection errors and 5xx responses."""
        if retries < 0:
            raise ConfigurationError("Number of retries must not be negative")
        self.config = self.config.model_copy(update={"max_retries": retries})
        return self

    def with_timeout(self, timeout: Optional[float]) -> "HTTPVaultConnectorBuilder":
        """Set the request timeout in seconds, None to disable."""
        self.config = self.config.model_copy(update={"timeout": timeout})
        return self

    def with_config(self, config: ClientConfig) -> "HTTPVaultConnectorBuilder":
        self.config = config
        return self

    def with_token(self, token: str) -> "HTTPVaultConnectorBuilder":
        """Set a token to authenticate with on :meth:`build_and_auth`."""
        self.token = token
        return self

    def with_transport(self, transport: httpx.BaseTransport) -> "HTTPVaultConnectorBuilder":
        self.transport = transport
        return self

    def from_env(self) -> "HTTPVaultConnectorBuilder":
        """
        Apply settings from the environment.

        Reads ``VAULT_ADDR``, ``VAULT_TOKEN``, ``VAULT_CACERT`` and
        ``VAULT_MAX_RETRIES``; unset variables leave the current setting.

        Raises:
            ConfigurationError: If a variable holds an invalid value
            TlsError: If the CA certificate cannot be loaded
        """
        address = os.environ.get(ENV_VAULT_ADDR)
        if address:
            self.with_base_url(address)

        retries = os.environ.get(ENV_VAULT_MAX_RETRIES)
        if retries:
            try:
                self.with_number_of_retries(int(retries))
            except ValueError:
                raise ConfigurationError(f"{ENV_VAULT_MAX_RETRIES} must be an integer") from None

        ca_cert = os.environ.get(ENV_VAULT_CACERT)
        if ca_cert:
            self.with_trusted_ca(ca_cert)

        token = os.environ.get(ENV_VAULT_TOKEN)
        if token:
            self.with_token(token)
        return self

    @property
    def base_url(self) -> str:
        scheme = "https" if self.tls else "http"
        host = f"[{self.host}]" if ":" in self.host else self.host
        port = f":{self.port}" if self.port is not None else ""
        return f"{scheme}://{host}{port}{self.prefix}"

    def _build_ssl_context(self) -> Optional[ssl.SSLContext]:
        if not self.tls:
            return None
        context = self.ssl_context
        if self.tls_version is not None:
            if context is None:
                context = ssl.create_default_context()
            context.minimum_version = self.tls_version
        return context

    def build(self) -> HTTPVaultConnector:
        """Build the connector."""
        return HTTPVaultConnector(
            self.base_url,
            config=self.config,
            ssl_context=self._build_ssl_context(),
            transport=self.transport,
        )

    def build_and_auth(self) -> HTTPVaultConnector:
        """
        Build the connector and authenticate with the configured token.

        Raises:
            ConfigurationError: If no token is configured
        """
        if self.token is None:
            raise ConfigurationError("No token provided")
        connector = self.build()
        connector.auth_token(self.token)
        return connector
