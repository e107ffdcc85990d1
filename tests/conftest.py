"""
Shared fixtures for Vault Connector tests
"""

import json

import httpx
import pytest

from vault_connector import ClientConfig, HTTPVaultConnector

BASE_URL = "http://vault.test:8200/v1/"
TOKEN = "s.test-root-token"


class VaultStub:
    """Records requests and answers them from a route table."""

    def __init__(self):
        self.routes = {}
        self.requests = []

    def add(self, method, path, status=200, payload=None, text=None):
        """Register the response for a method and API path."""
        self.routes[(method, path)] = (status, payload, text)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path[len("/v1/"):]
        route = self.routes.get((request.method, path))
        if route is None:
            return httpx.Response(404, json={"errors": []})

        status, payload, text = route
        if text is not None:
            return httpx.Response(status, text=text)
        if payload is None:
            return httpx.Response(status)
        return httpx.Response(status, json=payload)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]

    def last_json(self):
        return json.loads(self.last.content)


@pytest.fixture
def stub():
    return VaultStub()


@pytest.fixture
def client_config():
    return ClientConfig(timeout=5, retry_backoff_factor=0)


@pytest.fixture
def connector(stub, client_config):
    with HTTPVaultConnector(
        BASE_URL,
        config=client_config,
        transport=httpx.MockTransport(stub.handler),
    ) as connector:
        yield connector


@pytest.fixture
def authorized(stub, connector):
    """Connector logged in with a non-expiring token."""
    stub.add("GET", "auth/token/lookup-self", payload={"data": {"id": TOKEN, "ttl": 0}})
    connector.auth_token(TOKEN)
    stub.requests.clear()
    return connector
