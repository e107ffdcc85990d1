#!/usr/bin/env python3
"""
Advanced usage example for Vault Connector

Demonstrates building a connector from the environment, AppRole
administration, token creation and error handling.
"""

import logging

from vault_connector import (
    AppRole,
    AppRoleSecret,
    HTTPVaultConnectorBuilder,
    InvalidResponseError,
    PermissionDeniedError,
    Token,
)

logging.basicConfig(level=logging.INFO)


def main():
    # VAULT_ADDR, VAULT_TOKEN, VAULT_CACERT and VAULT_MAX_RETRIES are honored
    vault = HTTPVaultConnectorBuilder().from_env().build_and_auth()

    with vault:
        # Create an AppRole with a custom secret ID
        role = (
            AppRole.builder("deploy")
            .with_token_policy("deploy")
            .with_token_ttl(3600)
            .with_secret_id_num_uses(1)
            .build()
        )
        vault.create_app_role(role)
        role_id = vault.get_app_role_id("deploy")

        secret = vault.create_app_role_secret(
            "deploy",
            AppRoleSecret.builder().with_metadata({"pipeline": "nightly"}).build(),
        )
        print(f"Created secret ID with accessor {secret.secret.accessor}")

        # Create a short-lived child token
        token = (
            Token.builder()
            .with_display_name("ci")
            .with_policy("read-only")
            .with_ttl(600)
            .build()
        )
        created = vault.create_token(token)
        print(f"Created token with accessor {created.auth.accessor}")

        # Versioned secrets with check-and-set
        try:
            vault.write_secret_data("kv", "deploy/config", {"replicas": "3"}, cas=0)
        except InvalidResponseError as e:
            print(f"Write rejected: {e} {e.response}")

        # Log in as the AppRole
        try:
            vault.auth_app_role(role_id, secret.secret.id)
            print(f"Policies: {vault.lookup_app_role('deploy').role.token_policies}")
        except PermissionDeniedError:
            print("AppRole may not read its own configuration")


if __name__ == "__main__":
    main()
