# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Custom exceptions for the platform API client.

This module defines the exception hierarchy for remote API calls:
- ApiError: Base exception for all API-related errors
- NetworkError: The API could not be reached
- HttpClientError: The API answered with a 4xx status
- HttpServerError: The API answered with a 5xx status
"""


class ApiError(Exception):
    """Base exception for all platform API errors.

    Attributes:
        message: Human-readable error description.
        details: Optional dictionary with additional error context.
    """

    def __init__(self, message: str, details: dict | None = None):
        """Initialize API error.

        Args:
            message: Human-readable error description.
            details: Optional dictionary with additional error context.
        """
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        """Return string representation with details if available."""
        if self.details:
            return f"{self.message} - Details: {self.details}"
        return self.message


class NetworkError(ApiError):
    """The platform API was unreachable or the transport failed."""


class HttpError(ApiError):
    """The platform API answered with a non-success status.

    Attributes:
        status_code: HTTP status code from API response.
        response_body: Raw response body if available.
    """

    def __init__(
        self,
        message: str,
        status_code: int,
        response_body: str | None = None,
        details: dict | None = None,
    ):
        """Initialize HTTP error.

        Args:
            message: Human-readable error description.
            status_code: HTTP status code from API response.
            response_body: Raw response body if available.
            details: Optional dictionary with additional error context.
        """
        self.status_code = status_code
        self.response_body = response_body
        super().__init__(message, details)

    def __str__(self) -> str:
        """Return string representation with status code."""
        base = f"[{self.status_code}] {self.message}"
        if self.details:
            base = f"{base} - Details: {self.details}"
        return base


class HttpClientError(HttpError):
    """4xx response from the platform API."""


class HttpServerError(HttpError):
    """5xx response from the platform API."""
