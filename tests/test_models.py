"""
Tests for request models and their builders
"""

import json

import pytest

from vault_connector import AppRole, AppRoleSecret, InvalidRequestError, Token, TokenRole, TokenType


class TestToken:
    """Token model and builder"""

    def test_empty_payload(self):
        assert Token.builder().build().to_payload() == {}

    def test_builder(self):
        token = (
            Token.builder()
            .with_id("my-token")
            .with_type(TokenType.SERVICE)
            .with_display_name("ci")
            .as_orphan()
            .without_default_policy()
            .with_ttl(300)
            .with_explicit_max_ttl(600)
            .with_num_uses(4)
            .with_policies(["a", "b"])
            .with_policy("c")
            .with_meta("team", "ops")
            .with_meta("env", "prod")
            .renewable()
            .with_period(120)
            .with_entity_alias("alias")
            .build()
        )

        assert token.to_payload() == {
            "id": "my-token",
            "type": "service",
            "display_name": "ci",
            "no_parent": True,
            "no_default_policy": True,
            "ttl": 300,
            "explicit_max_ttl": 600,
            "num_uses": 4,
            "policies": ["a", "b", "c"],
            "meta": {"team": "ops", "env": "prod"},
            "renewable": True,
            "period": 120,
            "entity_alias": "alias",
        }

    def test_toggles(self):
        token = Token.builder().as_orphan().as_child().with_default_policy().not_renewable().build()
        assert token.no_parent is False
        assert token.no_default_policy is False
        assert token.renewable is False


class TestTokenRole:
    """Token role model and builder"""

    def test_name_not_in_payload(self):
        role = (
            TokenRole.builder()
            .for_name("deploy")
            .with_allowed_policy("p1")
            .with_allowed_policies(["p2"])
            .with_disallowed_policy("root")
            .orphan()
            .with_path_suffix("v1")
            .with_token_bound_cidr("10.0.0.0/8")
            .with_token_type(TokenType.BATCH)
            .build()
        )

        assert role.name == "deploy"
        payload = role.to_payload()
        assert "name" not in payload
        assert payload["allowed_policies"] == ["p1", "p2"]
        assert payload["disallowed_policies"] == ["root"]
        assert payload["orphan"] is True
        assert payload["token_bound_cidrs"] == ["10.0.0.0/8"]
        assert payload["token_type"] == "batch"

    def test_cidr_string_parsing(self):
        role = TokenRole.model_validate({"token_bound_cidrs": "10.0.0.0/8,127.0.0.1/32"})
        assert role.token_bound_cidrs == ["10.0.0.0/8", "127.0.0.1/32"]


class TestAppRole:
    """AppRole model and builder"""

    def test_builder(self):
        role = (
            AppRole.builder("web")
            .with_id("custom-role-id")
            .with_bind_secret_id()
            .with_secret_id_bound_cidr("10.0.0.0/8")
            .with_secret_id_num_uses(10)
            .with_secret_id_ttl(600)
            .with_token_policy("web")
            .with_token_policies(["db"])
            .with_token_ttl(1200)
            .with_token_max_ttl(1800)
            .build()
        )

        assert role.name == "web"
        assert role.id == "custom-role-id"
        assert role.to_payload() == {
            "bind_secret_id": True,
            "secret_id_bound_cidrs": ["10.0.0.0/8"],
            "secret_id_num_uses": 10,
            "secret_id_ttl": 600,
            "token_policies": ["web", "db"],
            "token_ttl": 1200,
            "token_max_ttl": 1800,
        }

    def test_without_secret_id(self):
        assert AppRole.builder("web").without_secret_id().build().bind_secret_id is False

    def test_empty_name(self):
        with pytest.raises(InvalidRequestError):
            AppRole.builder("").build()

    def test_parse_aliases(self):
        role = AppRole.model_validate({"role_name": "web", "role_id": "abc"})
        assert role.name == "web"
        assert role.id == "abc"


class TestAppRoleSecret:
    """AppRole secret ID model and builder"""

    def test_payload(self):
        secret = (
            AppRoleSecret.builder()
            .with_id("custom-secret")
            .with_metadata({"owner": "ci"})
            .with_cidr("10.0.0.0/8")
            .with_cidr_list(["192.168.0.0/16"])
            .with_num_uses(2)
            .with_ttl(60)
            .build()
        )

        payload = secret.to_payload()
        assert payload["secret_id"] == "custom-secret"
        assert json.loads(payload["metadata"]) == {"owner": "ci"}
        assert payload["cidr_list"] == ["10.0.0.0/8", "192.168.0.0/16"]
        assert payload["num_uses"] == 2
        assert payload["ttl"] == 60

    def test_read_only_fields_not_in_payload(self):
        secret = AppRoleSecret.model_validate({
            "secret_id_accessor": "acc",
            "creation_time": "2018-03-22T02:24:06Z",
            "secret_id_num_uses": 5,
        })
        assert secret.accessor == "acc"
        assert secret.num_uses == 5
        assert secret.to_payload() == {"num_uses": 5}

    def test_parse_cidr_string(self):
        secret = AppRoleSecret.model_validate({"cidr_list": "10.0.0.0/8,10.1.0.0/16"})
        assert secret.cidr_list == ["10.0.0.0/8", "10.1.0.0/16"]
