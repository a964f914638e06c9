"""SwitchBot cloud API client.

Async client for the SwitchBot Open API v1.1.
Handles:
- Request signing (token, timestamp, nonce, HMAC-SHA256 signature)
- Device listing and status retrieval
- Device commands
- Scene listing and execution
- Response envelope normalization
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import json
import logging
import time
import uuid
from typing import Any

import httpx

from switchbot_bridge.config import DEFAULT_BASE_URL
from switchbot_bridge.services.switchbot.models import ApiResponse, CommandRequest

logger = logging.getLogger(__name__)

API_VERSION = "v1.1"


class SwitchBotError(Exception):
    """Base class for SwitchBot errors."""

    pass


class SwitchBotTransportError(SwitchBotError):
    """Raised when a request cannot reach the API or its response cannot be decoded.

    Vendor-reported failures (statusCode != 100) are returned, not raised.
    """

    pass


def generate_nonce() -> str:
    """Generate a single-use alphanumeric nonce."""
    return uuid.uuid4().hex


def sign(token: str, secret: str, timestamp: str, nonce: str) -> str:
    """Compute the request signature.

    Returns:
        Base64 HMAC-SHA256 of token + timestamp + nonce keyed by secret.
    """
    data = f"{token}{timestamp}{nonce}".encode()
    digest = hmac.new(secret.encode(), data, hashlib.sha256).digest()
    return base64.b64encode(digest).decode()


def build_auth_headers(token: str, secret: str) -> dict[str, str]:
    """Build fresh authentication headers for one request.

    Timestamp and nonce are single-use, so headers must never be cached.
    """
    timestamp = str(int(time.time() * 1000))
    nonce = generate_nonce()
    return {
        "Authorization": token,
        "Content-Type": "application/json",
        "charset": "utf8",
        "t": timestamp,
        "sign": sign(token, secret, timestamp, nonce),
        "nonce": nonce,
    }


class SwitchBotClient:
    """Async client for the SwitchBot cloud API.

    Example:
        async with SwitchBotClient(token, secret) as client:
            response = await client.list_devices()
            if response.ok:
                for device in response.body["deviceList"]:
                    print(device["deviceName"])

    Every call returns an ApiResponse; callers branch on ``response.ok``.
    Nothing is retried here: command POSTs are not idempotent on the vendor
    side and retry policy belongs to the caller.
    """

    def __init__(
        self,
        token: str,
        secret: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 10.0,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the SwitchBot client.

        Args:
            token: Open API token
            secret: Open API client secret used to sign requests
            base_url: API base URL
            timeout: Request timeout in seconds, enforced by httpx
            http_client: Optional preconfigured httpx client (must have base_url set)
        """
        self._token = token
        self._secret = secret
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._client: httpx.AsyncClient | None = http_client

    @property
    def base_url(self) -> str:
        """Get the API base URL."""
        return self._base_url

    async def __aenter__(self) -> SwitchBotClient:
        """Async context manager entry."""
        await self.connect()
        return self

    async def __aexit__(self, *args: Any) -> None:
        """Async context manager exit."""
        await self.close()

    async def connect(self) -> None:
        """Initialize the HTTP client."""
        if self._client is not None:
            return

        self._client = httpx.AsyncClient(base_url=self._base_url, timeout=self._timeout)
        logger.debug("SwitchBot HTTP client created for %s", self._base_url)

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None
            logger.debug("SwitchBot HTTP client closed")

    async def list_devices(self) -> ApiResponse:
        """Get all physical devices and infrared remotes.

        Returns:
            ApiResponse whose body holds ``deviceList`` and ``infraredRemoteList``.
        """
        return await self._request("GET", f"/{API_VERSION}/devices")

    async def get_device_status(self, device_id: str) -> ApiResponse:
        """Get the current status of a device."""
        return await self._request("GET", f"/{API_VERSION}/devices/{device_id}/status")

    async def send_command(self, device_id: str, command: CommandRequest) -> ApiResponse:
        """Send a command to a device."""
        return await self._request(
            "POST",
            f"/{API_VERSION}/devices/{device_id}/commands",
            payload=command.to_payload(),
        )

    async def list_scenes(self) -> ApiResponse:
        """Get all manual scenes."""
        return await self._request("GET", f"/{API_VERSION}/scenes")

    async def execute_scene(self, scene_id: str) -> ApiResponse:
        """Execute a manual scene."""
        return await self._request("POST", f"/{API_VERSION}/scenes/{scene_id}/execute")

    async def _request(
        self,
        method: str,
        path: str,
        payload: dict[str, Any] | None = None,
    ) -> ApiResponse:
        """Send a signed request and normalize the response envelope.

        Raises:
            SwitchBotTransportError: On network failure or undecodable response.
        """
        if self._client is None:
            await self.connect()
        assert self._client is not None

        headers = build_auth_headers(self._token, self._secret)

        try:
            response = await self._client.request(
                method,
                path,
                headers=headers,
                json=payload if method == "POST" else None,
            )
        except httpx.RequestError as e:
            logger.error("SwitchBot %s %s failed: %s", method, path, e)
            raise SwitchBotTransportError(f"SwitchBot API request failed: {e}") from e

        try:
            data = response.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            logger.error(
                "SwitchBot %s %s returned undecodable body (HTTP %d)",
                method,
                path,
                response.status_code,
            )
            raise SwitchBotTransportError(
                f"SwitchBot API returned invalid JSON (HTTP {response.status_code})"
            ) from e

        result = self._normalize(response, data)
        if not result.ok:
            logger.debug(
                "SwitchBot %s %s returned statusCode %d: %s",
                method,
                path,
                result.status_code,
                result.message,
            )
        return result

    @staticmethod
    def _normalize(response: httpx.Response, data: Any) -> ApiResponse:
        """Build an ApiResponse, falling back to transport fields when absent."""
        if not isinstance(data, dict):
            return ApiResponse(
                status_code=response.status_code,
                message=response.reason_phrase,
                body=data,
            )

        message = data.get("message")
        body = data.get("body")
        try:
            status_code = int(data["statusCode"])
        except (KeyError, TypeError, ValueError):
            status_code = response.status_code

        return ApiResponse(
            status_code=status_code,
            message=str(message) if message else response.reason_phrase,
            body=body if body is not None else data,
        )
