#!/usr/bin/env python3
"""
Basic usage example for Vault Connector
"""

from vault_connector import ClientConfig, HTTPVaultConnector


def main():
    # Configure connector
    config = ClientConfig(
        timeout=30,
        max_retries=2,
        verify_ssl=True
    )

    with HTTPVaultConnector("https://localhost:8200/v1/", config=config) as vault:
        # Check server state, works unauthenticated
        health = vault.get_health()
        print(f"Vault {health.version}, sealed: {health.sealed}")

        # Authenticate with username and password
        vault.auth_user_pass("demo-user", "demo-password")

        # Write and read a secret on the default mount
        vault.write_secret("database/password", "super-secret-password")
        secret = vault.read_secret("database/password")
        print(f"Retrieved secret value: {secret.get_value()}")

        # List secrets
        keys = vault.list_secrets("database")
        print(f"Found {len(keys)} database secrets")

        # Versioned secrets
        version = vault.write_secret_data("kv", "app/config", {"debug": "false"})
        print(f"Wrote version {version.metadata.version}")


if __name__ == "__main__":
    main()
