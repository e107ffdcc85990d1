"""
Tests for the connector builder
"""

import datetime
import logging
import ssl

import httpx
import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.x509.oid import NameOID

from vault_connector import (
    ConfigurationError,
    HTTPVaultConnector,
    HTTPVaultConnectorBuilder,
    TlsError,
)
from vault_connector.builder import ENV_VAULT_ADDR, ENV_VAULT_CACERT, ENV_VAULT_MAX_RETRIES, ENV_VAULT_TOKEN


def _write_ca(path, not_valid_before, not_valid_after):
    """Write a self-signed CA certificate in PEM format."""
    key = ec.generate_private_key(ec.SECP256R1())
    name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, "Test Vault CA")])
    certificate = (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(not_valid_before)
        .not_valid_after(not_valid_after)
        .add_extension(x509.BasicConstraints(ca=True, path_length=None), critical=True)
        .sign(key, hashes.SHA256())
    )
    path.write_bytes(certificate.public_bytes(serialization.Encoding.PEM))
    return path


@pytest.fixture
def clean_env(monkeypatch):
    for name in (ENV_VAULT_ADDR, ENV_VAULT_TOKEN, ENV_VAULT_CACERT, ENV_VAULT_MAX_RETRIES):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestBaseUrl:
    """Base URL composition"""

    def test_defaults(self):
        assert HTTPVaultConnectorBuilder().base_url == "https://127.0.0.1:8200/v1/"

    def test_components(self):
        builder = (
            HTTPVaultConnector.builder()
            .with_host("vault.example.com")
            .with_port(8443)
            .without_tls()
            .with_prefix("v2")
        )
        assert builder.base_url == "http://vault.example.com:8443/v2/"

    def test_without_port(self):
        assert HTTPVaultConnectorBuilder().with_port(None).base_url == "https://127.0.0.1/v1/"

    def test_invalid_port(self):
        with pytest.raises(ConfigurationError):
            HTTPVaultConnectorBuilder().with_port(70000)

    def test_from_url(self):
        builder = HTTPVaultConnectorBuilder().with_base_url("http://vault.local:1234")
        assert builder.tls is False
        assert builder.host == "vault.local"
        assert builder.port == 1234
        assert builder.base_url == "http://vault.local:1234/v1/"

    def test_from_url_with_prefix(self):
        builder = HTTPVaultConnectorBuilder().with_base_url("https://vault.local/custom/v1")
        assert builder.base_url == "https://vault.local/custom/v1/"

    def test_from_url_ipv6(self):
        builder = HTTPVaultConnectorBuilder().with_base_url("http://[::1]:8200")
        assert builder.host == "::1"
        assert builder.base_url == "http://[::1]:8200/v1/"

        connector = builder.build()
        assert connector.base_url == "http://[::1]:8200/v1/"
        connector.close()

    def test_ipv6_host(self):
        assert HTTPVaultConnectorBuilder().with_host("[fd00::10]").base_url == "https://[fd00::10]:8200/v1/"
        assert HTTPVaultConnectorBuilder().with_host("fd00::10").base_url == "https://[fd00::10]:8200/v1/"

    def test_invalid_url(self):
        with pytest.raises(ConfigurationError):
            HTTPVaultConnectorBuilder().with_base_url("ftp://vault.local")

    def test_build(self):
        connector = HTTPVaultConnectorBuilder().with_host("vault.local").without_tls().build()
        assert isinstance(connector, HTTPVaultConnector)
        assert connector.base_url == "http://vault.local:8200/v1/"
        assert not connector.is_authorized()
        connector.close()


class TestSettings:
    """Retry, timeout and TLS settings"""

    def test_retries_and_timeout(self):
        builder = HTTPVaultConnectorBuilder().with_number_of_retries(3).with_timeout(2.5)
        assert builder.config.max_retries == 3
        assert builder.config.timeout == 2.5

    def test_negative_retries(self):
        with pytest.raises(ConfigurationError):
            HTTPVaultConnectorBuilder().with_number_of_retries(-1)

    def test_tls_version(self):
        builder = HTTPVaultConnectorBuilder().with_tls(version=ssl.TLSVersion.TLSv1_3)
        assert builder._build_ssl_context().minimum_version == ssl.TLSVersion.TLSv1_3

    def test_trusted_ca_missing_file(self, tmp_path):
        with pytest.raises(TlsError):
            HTTPVaultConnectorBuilder().with_trusted_ca(tmp_path / "missing.pem")

    def test_trusted_ca_invalid(self, tmp_path):
        cert_file = tmp_path / "invalid.pem"
        cert_file.write_text("-----BEGIN CERTIFICATE-----\nnot a certificate\n-----END CERTIFICATE-----\n")
        with pytest.raises(TlsError):
            HTTPVaultConnectorBuilder().with_trusted_ca(cert_file)

    def test_trusted_ca_empty(self, tmp_path):
        cert_file = tmp_path / "empty.pem"
        cert_file.write_text("")
        with pytest.raises(TlsError):
            HTTPVaultConnectorBuilder().with_trusted_ca(cert_file)

    def test_trusted_ca(self, tmp_path, caplog):
        now = datetime.datetime.now(datetime.timezone.utc)
        cert_file = _write_ca(tmp_path / "ca.pem", now - datetime.timedelta(days=1), now + datetime.timedelta(days=365))

        builder = HTTPVaultConnectorBuilder().with_trusted_ca(cert_file)
        assert isinstance(builder.ssl_context, ssl.SSLContext)
        assert builder._build_ssl_context() is builder.ssl_context
        assert "expired" not in caplog.text

        connector = builder.build()
        assert connector.base_url.startswith("https://")
        connector.close()

    def test_trusted_ca_not_used_without_tls(self, tmp_path):
        now = datetime.datetime.now(datetime.timezone.utc)
        cert_file = _write_ca(tmp_path / "ca.pem", now - datetime.timedelta(days=1), now + datetime.timedelta(days=365))
        builder = HTTPVaultConnectorBuilder().with_trusted_ca(cert_file).without_tls()
        assert builder._build_ssl_context() is None

    def test_trusted_ca_expired(self, tmp_path, caplog):
        now = datetime.datetime.now(datetime.timezone.utc)
        cert_file = _write_ca(tmp_path / "old.pem", now - datetime.timedelta(days=30), now - datetime.timedelta(days=1))

        with caplog.at_level(logging.WARNING, logger="vault_connector.builder"):
            builder = HTTPVaultConnectorBuilder().with_trusted_ca(cert_file)
        assert builder.ssl_context is not None
        assert "Trusted CA certificate has expired" in caplog.text


class TestEnvironment:
    """Settings from VAULT_* variables"""

    def test_empty_env(self, clean_env):
        builder = HTTPVaultConnectorBuilder().from_env()
        assert builder.base_url == "https://127.0.0.1:8200/v1/"
        assert builder.token is None

    def test_env(self, clean_env):
        clean_env.setenv(ENV_VAULT_ADDR, "http://vault.env:8201")
        clean_env.setenv(ENV_VAULT_MAX_RETRIES, "5")
        clean_env.setenv(ENV_VAULT_TOKEN, "env-token")

        builder = HTTPVaultConnectorBuilder().from_env()
        assert builder.base_url == "http://vault.env:8201/v1/"
        assert builder.config.max_retries == 5
        assert builder.token == "env-token"

    def test_invalid_retries(self, clean_env):
        clean_env.setenv(ENV_VAULT_MAX_RETRIES, "many")
        with pytest.raises(ConfigurationError):
            HTTPVaultConnectorBuilder().from_env()

    def test_invalid_ca(self, clean_env, tmp_path):
        clean_env.setenv(ENV_VAULT_CACERT, str(tmp_path / "missing.pem"))
        with pytest.raises(TlsError):
            HTTPVaultConnectorBuilder().from_env()

    def test_build_and_auth(self, clean_env):
        requests = []

        def handler(request):
            requests.append(request)
            return httpx.Response(200, json={"data": {"id": "env-token", "ttl": 0}})

        clean_env.setenv(ENV_VAULT_TOKEN, "env-token")
        connector = (
            HTTPVaultConnectorBuilder()
            .from_env()
            .with_transport(httpx.MockTransport(handler))
            .build_and_auth()
        )
        assert connector.is_authorized()
        assert requests[0].url.path == "/v1/auth/token/lookup-self"
        assert requests[0].headers["X-Vault-Token"] == "env-token"
        connector.close()

    def test_build_and_auth_without_token(self, clean_env):
        with pytest.raises(ConfigurationError):
            HTTPVaultConnectorBuilder().build_and_auth()
