# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Async HTTP client for the remote platform API.

Requests are described by ApiRequest objects and executed by ApiClient,
which adds the API token and the authenticated user token on demand and
maps failures onto the ApiError hierarchy.

Example:
    client = ApiClient(settings.platform_api)

    request = (
        ApiRequest.builder()
        .with_type(HttpRequestType.GET)
        .with_path("/api/channel/v1/read/channel_01")
        .with_api_token(True)
        .build()
    )
    response = await client.fetch(request)
    channel = response.body["result"]["channel"]
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

import httpx

from src.core.config.settings import PlatformAPISettings
from src.infrastructure.api.exceptions import (
    HttpClientError,
    HttpServerError,
    NetworkError,
)

logger = logging.getLogger(__name__)


class HttpRequestType(str, Enum):
    """Supported HTTP methods."""

    GET = "GET"
    POST = "POST"
    PATCH = "PATCH"
    DELETE = "DELETE"


@dataclass(frozen=True)
class ApiRequest:
    """Description of one platform API call.

    Attributes:
        type: HTTP method.
        path: Path appended to the configured base URL.
        body: Optional JSON body.
        parameters: Optional query parameters.
        headers: Extra request headers.
        with_api_token: Send the bearer API token.
        with_user_token: Send the authenticated user token.
    """

    type: HttpRequestType
    path: str
    body: dict[str, Any] | None = None
    parameters: dict[str, str] = field(default_factory=dict)
    headers: dict[str, str] = field(default_factory=dict)
    with_api_token: bool = False
    with_user_token: bool = False

    @staticmethod
    def builder() -> "ApiRequestBuilder":
        """Start building a request."""
        return ApiRequestBuilder()


class ApiRequestBuilder:
    """Fluent builder for ApiRequest."""

    def __init__(self) -> None:
        self._type = HttpRequestType.GET
        self._path = ""
        self._body: dict[str, Any] | None = None
        self._parameters: dict[str, str] = {}
        self._headers: dict[str, str] = {}
        self._with_api_token = False
        self._with_user_token = False

    def with_type(self, type: HttpRequestType) -> "ApiRequestBuilder":
        self._type = type
        return self

    def with_path(self, path: str) -> "ApiRequestBuilder":
        self._path = path
        return self

    def with_body(self, body: dict[str, Any]) -> "ApiRequestBuilder":
        self._body = body
        return self

    def with_parameters(self, parameters: dict[str, str]) -> "ApiRequestBuilder":
        self._parameters = dict(parameters)
        return self

    def with_headers(self, headers: dict[str, str]) -> "ApiRequestBuilder":
        self._headers = dict(headers)
        return self

    def with_api_token(self, required: bool) -> "ApiRequestBuilder":
        self._with_api_token = required
        return self

    def with_user_token(self, required: bool) -> "ApiRequestBuilder":
        self._with_user_token = required
        return self

    def build(self) -> ApiRequest:
        if not self._path:
            raise ValueError("ApiRequest requires a path")
        return ApiRequest(
            type=self._type,
            path=self._path,
            body=self._body,
            parameters=self._parameters,
            headers=self._headers,
            with_api_token=self._with_api_token,
            with_user_token=self._with_user_token,
        )


@dataclass(frozen=True)
class ApiResponse:
    """Decoded platform API response.

    Attributes:
        status_code: HTTP status code.
        body: Decoded JSON body (empty dict for empty responses).
    """

    status_code: int
    body: dict[str, Any]


class ApiClient:
    """Async HTTP client for the platform API.

    Attributes:
        base_url: Base URL every request path is appended to.
    """

    def __init__(
        self,
        settings: PlatformAPISettings,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the API client.

        Args:
            settings: Platform API settings.
            transport: Optional transport (tests use httpx.MockTransport).
        """
        self._settings = settings
        self.base_url = settings.base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=settings.timeout,
            headers={"Content-Type": "application/json", "Accept": "application/json"},
            transport=transport,
        )

    def _get_headers(self, request: ApiRequest) -> dict[str, str]:
        headers = dict(request.headers)
        if request.with_api_token:
            headers["Authorization"] = f"Bearer {self._settings.api_key.get_secret_value()}"
        if request.with_user_token and self._settings.user_token is not None:
            headers["X-Authenticated-User-Token"] = self._settings.user_token.get_secret_value()
        return headers

    async def fetch(self, request: ApiRequest) -> ApiResponse:
        """Execute a request.

        Args:
            request: The request to execute.

        Returns:
            ApiResponse with the decoded JSON body.

        Raises:
            NetworkError: If the API cannot be reached.
            HttpClientError: On a 4xx response.
            HttpServerError: On a 5xx response.
        """
        logger.debug("API %s %s", request.type.value, request.path)

        try:
            response = await self._client.request(
                request.type.value,
                request.path,
                json=request.body,
                params=request.parameters or None,
                headers=self._get_headers(request),
            )
        except httpx.RequestError as e:
            logger.error("Platform API connection error: %s", str(e))
            raise NetworkError(
                message=f"Failed to connect to platform API: {str(e)}",
                details={"error_type": type(e).__name__, "path": request.path},
            ) from e

        if response.is_success:
            body = response.json() if response.content else {}
            return ApiResponse(status_code=response.status_code, body=body)

        error_detail = response.text
        try:
            error_data = response.json()
        except ValueError:
            error_data = None
        if isinstance(error_data, dict):
            params = error_data.get("params") or {}
            error_detail = params.get("errmsg") or error_data.get("message") or error_detail

        if response.status_code >= 500:
            raise HttpServerError(
                message=error_detail or "Platform API server error",
                status_code=response.status_code,
                response_body=response.text,
            )
        raise HttpClientError(
            message=error_detail or "Platform API rejected the request",
            status_code=response.status_code,
            response_body=response.text,
        )

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()
