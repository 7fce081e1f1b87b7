from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Optional

import httpx

from agent_portal.services.exceptions import DownstreamServiceError

logger = logging.getLogger(__name__)


def _extract_message(response: httpx.Response) -> str | None:
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        message = body.get("message") or body.get("error")
        if isinstance(message, str) and message.strip():
            return message.strip()
    return None


class BookingBackendClient:
    """Async HTTP client responsible for communicating with the booking backend."""

    def __init__(
        self,
        base_url: str | None,
        *,
        timeout: float = 10.0,
        use_mock_data: bool = True,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = str(base_url).rstrip("/") if base_url else None
        self._timeout = timeout
        self.use_mock_data = use_mock_data or not self._base_url
        self._headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None
        if not self.use_mock_data and self._base_url:
            self._client = self._build_client()

    def _build_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self._base_url,
            timeout=self._timeout,
            headers=self._headers,
            transport=self._transport,
        )

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()

    async def _ensure_client(self) -> httpx.AsyncClient:
        if self.use_mock_data or not self._base_url:
            raise RuntimeError("HTTP client requested while running in mock mode")
        if self._client is None:
            self._client = self._build_client()
        return self._client

    @staticmethod
    def _auth_headers(token: str | None) -> Dict[str, str] | None:
        return {"Authorization": f"Bearer {token}"} if token else None

    async def _request(
        self,
        method: str,
        path: str,
        *,
        token: str | None = None,
        json: Any = None,
        params: Dict[str, Any] | None = None,
    ) -> Any:
        if self.use_mock_data:
            raise RuntimeError("Real HTTP call requested while mock mode is enabled")
        client = await self._ensure_client()
        try:
            logger.debug("Sending %s %s to booking backend", method, path)
            response = await client.request(
                method,
                path,
                json=json,
                params=params,
                headers=self._auth_headers(token),
            )
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as exc:
            logger.exception("Booking backend returned error %s", exc.response.status_code)
            raise DownstreamServiceError(
                "Booking backend returned an error response",
                status_code=exc.response.status_code,
                backend_message=_extract_message(exc.response),
                cause=exc,
            ) from exc
        except httpx.RequestError as exc:
            logger.exception("Unable to reach booking backend: %s", exc)
            raise DownstreamServiceError(
                "Unable to reach booking backend", status_code=None, cause=exc
            ) from exc
        except ValueError as exc:
            logger.exception("Booking backend returned a malformed body for %s", path)
            raise DownstreamServiceError(
                "Booking backend returned a malformed response", cause=exc
            ) from exc

    async def get(
        self,
        path: str,
        params: Dict[str, Any] | None = None,
        *,
        token: str | None = None,
    ) -> Any:
        return await self._request("GET", path, params=params, token=token)

    async def post(
        self,
        path: str,
        payload: Any = None,
        *,
        token: str | None = None,
    ) -> Any:
        return await self._request("POST", path, json=payload, token=token)

    async def delete(self, path: str, *, token: str | None = None) -> Any:
        return await self._request("DELETE", path, token=token)

    async def simulate_latency(self) -> None:
        """Allow services to await for latency even when mocking responses."""

        await asyncio.sleep(0)
