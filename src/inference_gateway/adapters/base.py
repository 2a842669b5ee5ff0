"""
Shared HTTP plumbing for provider adapters.
"""

import logging
from typing import Optional, Dict, Any, AsyncIterator

import httpx

from ..core.interface import AbstractProvider
from ..core.errors import (
    ProviderAuthenticationError,
    ProviderConfigError,
    TransientNetworkError,
)
from ..core.retry import RetryPolicy, retry_async
from ..models.request import InferenceRequest

logger = logging.getLogger(__name__)


class ResponseByteStream:
    """Async byte iterator over an open streaming HTTP response."""

    def __init__(self, response: httpx.Response):
        self._response = response

    @property
    def status_code(self) -> int:
        return self._response.status_code

    async def __aiter__(self) -> AsyncIterator[bytes]:
        try:
            async for chunk in self._response.aiter_bytes():
                yield chunk
        finally:
            await self._response.aclose()

    async def aclose(self) -> None:
        await self._response.aclose()


class HTTPProvider(AbstractProvider):
    """
    Base class for providers speaking JSON over HTTP.

    Owns a lazily created ``httpx.AsyncClient`` and wraps every outbound
    request in the retry policy. Subclasses supply the authentication
    headers and payload/response mapping.
    """

    credential_label = "Provider"

    def __init__(
        self,
        name: str,
        base_url: str,
        api_key: Optional[str] = None,
        timeout: float = 60.0,
        retry_policy: Optional[RetryPolicy] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the provider.

        Args:
            name: Unique name for this provider instance
            base_url: Vendor API base URL
            api_key: Default credential from configuration
            timeout: Per-request HTTP timeout in seconds
            retry_policy: Retry policy for transient failures
            transport: Optional httpx transport (used by tests)
        """
        self._name = name
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._timeout = timeout
        self._retry_policy = retry_policy or RetryPolicy()
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def name(self) -> str:
        return self._name

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def is_connected(self) -> bool:
        return self._client is not None

    async def connect(self) -> None:
        """Initialize the HTTP client."""
        if self._client is not None:
            return

        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            timeout=self._timeout,
            transport=self._transport,
        )
        logger.info(f"Connected provider {self._name} to {self._base_url}")

    async def disconnect(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None
            logger.info(f"Disconnected provider {self._name}")

    def _resolve_credential(self, request: InferenceRequest) -> str:
        """Pick the request's credential override or the configured key."""
        credential = request.credential_override or self._api_key
        if not credential:
            raise ProviderConfigError(
                f"{self.credential_label} API key is not configured",
                provider=self._name,
            )
        return credential

    def _auth_headers(self, credential: str) -> Dict[str, str]:
        return {"Authorization": f"Bearer {credential}"}

    def _check_response_errors(self, response: httpx.Response, body: Optional[str] = None) -> None:
        """Raise the gateway error matching a non-success response."""
        if response.is_success:
            return

        if body is None:
            body = response.text

        if response.status_code in (401, 403):
            raise ProviderAuthenticationError(
                f"{self.credential_label} rejected the credential ({response.status_code})",
                provider=self._name,
            )

        raise TransientNetworkError(
            f"API request failed with status {response.status_code}: {body}",
            provider=self._name,
            upstream_status=response.status_code,
            body=body,
        )

    async def _request(
        self,
        method: str,
        path: str,
        credential: str,
        **kwargs: Any,
    ) -> httpx.Response:
        """Send a request with retries on transient failures."""
        if not self._client:
            await self.connect()

        headers = {**kwargs.pop("headers", {}), **self._auth_headers(credential)}

        async def attempt() -> httpx.Response:
            try:
                response = await self._client.request(method, path, headers=headers, **kwargs)
            except httpx.RequestError as e:
                raise TransientNetworkError(
                    f"Request to {self._name} failed: {e}", provider=self._name
                ) from e
            self._check_response_errors(response)
            return response

        return await retry_async(attempt, self._retry_policy, f"{self._name} request")

    async def _open_stream(
        self,
        method: str,
        path: str,
        credential: str,
        **kwargs: Any,
    ) -> ResponseByteStream:
        """
        Open a streaming response.

        Retries cover establishing the connection only; once a success
        status is received the body is handed over unread.
        """
        if not self._client:
            await self.connect()

        headers = {**kwargs.pop("headers", {}), **self._auth_headers(credential)}

        async def attempt() -> ResponseByteStream:
            request = self._client.build_request(method, path, headers=headers, **kwargs)
            try:
                response = await self._client.send(request, stream=True)
            except httpx.RequestError as e:
                raise TransientNetworkError(
                    f"Stream request to {self._name} failed: {e}", provider=self._name
                ) from e

            if not response.is_success:
                try:
                    body = (await response.aread()).decode("utf-8", errors="replace")
                finally:
                    await response.aclose()
                self._check_response_errors(response, body)

            return ResponseByteStream(response)

        return await retry_async(attempt, self._retry_policy, f"{self._name} stream request")
