# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Remote platform API client.

Usage:
    from src.infrastructure.api import ApiClient, ApiRequest, HttpRequestType

    client = ApiClient(settings.platform_api)
    response = await client.fetch(
        ApiRequest.builder().with_path("/api/content/v1/read/do_1").build()
    )
"""

from src.infrastructure.api.client import (
    ApiClient,
    ApiRequest,
    ApiRequestBuilder,
    ApiResponse,
    HttpRequestType,
)
from src.infrastructure.api.exceptions import (
    ApiError,
    HttpClientError,
    HttpError,
    HttpServerError,
    NetworkError,
)

__all__ = [
    "ApiClient",
    "ApiRequest",
    "ApiRequestBuilder",
    "ApiResponse",
    "HttpRequestType",
    "ApiError",
    "HttpError",
    "HttpClientError",
    "HttpServerError",
    "NetworkError",
]
