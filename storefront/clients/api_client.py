"""
Storefront API HTTP Client.

Used by the catalog service and the cart to talk to the storefront REST API.
Retries transient failures with exponential backoff and turns every failure
into an ApiError so callers only have one exception type to handle.
"""

from __future__ import annotations

import asyncio
import logging
import os
from dataclasses import dataclass, field, replace
from typing import Any, Awaitable, Callable, Dict, List, Optional

import httpx

logger = logging.getLogger(__name__)

NETWORK_ERROR_MESSAGE = "Network error. Please check your connection and try again."


class ApiError(Exception):
    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        code: Optional[str] = None,
        details: Any = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.code = code
        self.details = details


@dataclass
class RetryOptions:
    max_retries: int = 3
    retry_delay: float = 1.0
    retryable_statuses: List[int] = field(default_factory=lambda: [408, 429, 500, 502, 503, 504])


def get_retry_delay(attempt: int, base_delay: float) -> float:
    return base_delay * (2 ** attempt)


class ShopApiClient:
    def __init__(
        self,
        base_url: Optional[str] = None,
        retry: Optional[RetryOptions] = None,
        timeout_seconds: float = 20.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.base_url = (base_url or os.getenv("STOREFRONT_API_URL", "http://localhost:3001")).rstrip("/")
        self.retry = retry or RetryOptions()
        self.timeout_seconds = timeout_seconds
        self._transport = transport
        self._sleep = sleep

    async def request(
        self,
        method: str,
        path: str,
        json: Any = None,
        retry: Optional[Dict[str, Any]] = None,
    ) -> Any:
        options = replace(self.retry, **retry) if retry else self.retry
        url = f"{self.base_url}{path}"
        last_error: Optional[ApiError] = None

        async with httpx.AsyncClient(timeout=self.timeout_seconds, transport=self._transport) as client:
            for attempt in range(options.max_retries + 1):
                try:
                    response = await client.request(
                        method,
                        url,
                        json=json,
                        headers={"Content-Type": "application/json"},
                    )
                except httpx.HTTPError as e:
                    logger.warning("%s %s failed (attempt %d): %s", method, path, attempt + 1, e)
                    last_error = ApiError(NETWORK_ERROR_MESSAGE, 0, "NETWORK_ERROR")
                    if attempt < options.max_retries:
                        await self._sleep(get_retry_delay(attempt, options.retry_delay))
                        continue
                    raise last_error from e

                if response.is_success:
                    try:
                        return response.json() if response.content else {}
                    except ValueError as e:
                        raise ApiError("Invalid JSON in response", response.status_code, "INVALID_RESPONSE") from e

                api_error = _error_from_response(response)
                if attempt < options.max_retries and response.status_code in options.retryable_statuses:
                    logger.warning(
                        "%s %s returned %d, retrying (attempt %d)", method, path, response.status_code, attempt + 1
                    )
                    last_error = api_error
                    await self._sleep(get_retry_delay(attempt, options.retry_delay))
                    continue
                raise api_error

        raise last_error or ApiError("Request failed after retries")

    async def get(self, path: str, retry: Optional[Dict[str, Any]] = None) -> Any:
        return await self.request("GET", path, retry=retry)

    async def post(self, path: str, data: Any = None, retry: Optional[Dict[str, Any]] = None) -> Any:
        return await self.request("POST", path, json=data, retry=retry)

    async def put(self, path: str, data: Any = None, retry: Optional[Dict[str, Any]] = None) -> Any:
        return await self.request("PUT", path, json=data, retry=retry)

    async def delete(self, path: str, retry: Optional[Dict[str, Any]] = None) -> Any:
        return await self.request("DELETE", path, retry=retry)


def _error_from_response(response: httpx.Response) -> ApiError:
    try:
        body = response.json()
    except ValueError:
        body = {"error": "Request failed"}
    if not isinstance(body, dict):
        body = {}

    message = body.get("error") or body.get("message") or body.get("detail")
    if isinstance(message, dict):
        message = message.get("message") or message.get("error")
    return ApiError(
        str(message or f"HTTP {response.status_code}"),
        response.status_code,
        body.get("code"),
        body.get("details"),
    )


def get_error_message(error: BaseException) -> str:
    """User-facing message for an exception raised anywhere in the client layer."""
    if isinstance(error, ApiError):
        if error.code == "NETWORK_ERROR":
            return "Unable to connect. Please check your internet connection."
        if error.code == "VALIDATION_ERROR":
            return str(error) or "Please check your input and try again."
        if error.code == "PAYMENT_FAILED":
            return "Payment failed. Please check your payment details and try again."
        if error.code == "INSUFFICIENT_INVENTORY":
            return "Some items in your cart are no longer available."
        if error.code == "UNAUTHORIZED":
            return "Please log in to continue."
        return str(error) or "An unexpected error occurred. Please try again."

    if isinstance(error, Exception) and str(error):
        return str(error)

    return "An unexpected error occurred. Please try again."
