"""
HTTP transport for Vault Connector.

Issues requests against the Vault API, retries transient failures and maps
status codes onto the exception hierarchy.
"""

import logging
import ssl
from typing import Any, Dict, Optional, Type, TypeVar, Union

import httpx
from tenacity import Retrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from .auth import TokenAuth
from .config import ClientConfig
from .exceptions import (
    InvalidResponseError,
    PermissionDeniedError,
    ConnectionError as VaultConnectionError,
)
from .responses import ErrorResponse, ResponseModel

logger = logging.getLogger(__name__)

R = TypeVar("R", bound=ResponseModel)


class _ServerError(Exception):
    """5xx response, eligible for retry."""

    def __init__(self, response: httpx.Response):
        super().__init__(response.status_code)
        self.response = response


class RequestHelper:
    """
    Thin wrapper around an ``httpx.Client`` bound to the Vault API prefix.

    Paths passed to the request methods are relative to the base URL, e.g.
    ``sys/health`` for ``https://vault:8200/v1/sys/health``.
    """

    def __init__(
        self,
        base_url: str,
        config: Optional[ClientConfig] = None,
        ssl_context: Optional[ssl.SSLContext] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        """
        Initialize the request helper.

        Args:
            base_url: API base URL including the version prefix
            config: Optional client configuration
            ssl_context: Optional SSL context, overrides the config's SSL settings
            transport: Optional custom httpx transport
        """
        self.base_url = base_url.rstrip("/") + "/"
        self.config = config or ClientConfig()

        verify: Union[bool, ssl.SSLContext] = self.config.verify_ssl
        if ssl_context is not None:
            verify = ssl_context
        elif self.config.verify_ssl and self.config.ca_bundle:
            verify = ssl.create_default_context(cafile=self.config.ca_bundle)

        self._client = httpx.Client(
            base_url=self.base_url,
            timeout=self.config.timeout,
            limits=httpx.Limits(
                max_keepalive_connections=self.config.max_connections,
                max_connections=self.config.max_connections,
            ),
            verify=verify,
            transport=transport,
        )

    def close(self) -> None:
        """Close the HTTP client."""
        self._client.close()

    def get(
        self,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        auth: Optional[TokenAuth] = None,
        model: Optional[Type[R]] = None,
    ) -> Any:
        return self.request("GET", path, params=params, auth=auth, model=model)

    def list(
        self,
        path: str,
        auth: Optional[TokenAuth] = None,
        model: Optional[Type[R]] = None,
    ) -> Any:
        """Issue a LIST request, expressed as GET with ``list=true``."""
        return self.request("GET", path, params={"list": "true"}, auth=auth, model=model)

    def post(
        self,
        path: str,
        payload: Optional[Dict[str, Any]] = None,
        auth: Optional[TokenAuth] = None,
        model: Optional[Type[R]] = None,
    ) -> Any:
        return self.request("POST", path, json=payload, auth=auth, model=model)

    def put(
        self,
        path: str,
        payload: Optional[Dict[str, Any]] = None,
        auth: Optional[TokenAuth] = None,
        model: Optional[Type[R]] = None,
    ) -> Any:
        return self.request("PUT", path, json=payload, auth=auth, model=model)

    def delete(
        self,
        path: str,
        auth: Optional[TokenAuth] = None,
        model: Optional[Type[R]] = None,
    ) -> Any:
        return self.request("DELETE", path, auth=auth, model=model)

    def request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Any] = None,
        auth: Optional[TokenAuth] = None,
        model: Optional[Type[R]] = None,
    ) -> Any:
        """
        Issue a request and decode the response.

        Args:
            method: HTTP method
            path: Path relative to the API base URL
            params: Optional query parameters
            json: Optional JSON body
            auth: Optional token to authenticate the request with
            model: Optional response model to parse the body into

        Returns:
            The parsed model if ``model`` is given, otherwise the decoded JSON
            body (None for an empty body)

        Raises:
            PermissionDeniedError: On HTTP 403
            InvalidResponseError: On any other unexpected status or payload
            ConnectionError: If the server is unreachable
        """
        headers = {"Content-Type": "application/json"}
        if auth is not None:
            headers.update(auth.get_headers())

        retrying = Retrying(
            stop=stop_after_attempt(self.config.max_retries + 1),
            wait=wait_exponential(
                multiplier=self.config.retry_backoff_factor,
                max=self.config.retry_max_delay,
            ),
            retry=retry_if_exception_type((httpx.TransportError, _ServerError)),
            reraise=True,
        )

        try:
            response = retrying(
                self._send, method, path, params=params, json=json, headers=headers
            )
        except _ServerError as e:
            response = e.response
        except httpx.RequestError as e:
            logger.error(f"{method} request failed: {type(e).__name__}")
            raise VaultConnectionError("Unable to connect to Vault server") from e

        payload = self._handle_response(response)
        if model is None:
            return payload
        if payload is None:
            raise InvalidResponseError("Response payload is empty", response.status_code)
        return model.from_payload(payload)

    def _send(self, method: str, path: str, **kwargs) -> httpx.Response:
        response = self._client.request(method, path.lstrip("/"), **kwargs)
        if self.config.log_requests:
            logger.debug(f"{method} request returned HTTP {response.status_code}")
        if 500 <= response.status_code < 600:
            raise _ServerError(response)
        return response

    def _handle_response(self, response: httpx.Response) -> Optional[Any]:
        """Handle HTTP response and raise appropriate exceptions."""
        status = response.status_code

        if status in (200, 204):
            if status == 204 or not response.content:
                return None
            try:
                return response.json()
            except ValueError:
                raise InvalidResponseError("Unable to parse response payload", status) from None

        if status == 403:
            raise PermissionDeniedError()

        try:
            errors = ErrorResponse.from_payload(response.json()).errors
        except (ValueError, InvalidResponseError):
            errors = None
        raise InvalidResponseError(
            "Invalid response code",
            status_code=status,
            response="\n".join(errors) if errors else response.text,
        )
