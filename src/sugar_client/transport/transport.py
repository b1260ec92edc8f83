from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

import httpx

from ..config import DEFAULT_REQUEST_TIMEOUT_MS
from ..errors import ConfigurationError

logger = logging.getLogger("sugar_client")


@dataclass(frozen=True)
class TransportResponse:
    status: int
    headers: Mapping[str, str] = field(default_factory=dict)
    body: bytes = b""

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


class HttpTransport:
    """Thin wrapper around a lazily created ``httpx.AsyncClient``."""

    def __init__(
        self,
        base_url: str | None = None,
        *,
        timeout_ms: int = DEFAULT_REQUEST_TIMEOUT_MS,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url
        self._timeout_ms = timeout_ms
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def base_url(self) -> str | None:
        return self._base_url

    @base_url.setter
    def base_url(self, value: str) -> None:
        self._base_url = value
        if self._client is not None:
            self._client.base_url = httpx.URL(value)

    @property
    def is_open(self) -> bool:
        return self._client is not None and not self._client.is_closed

    # -- Lifecycle --------------------------------------------------------

    async def close(self) -> None:
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
        self._client = None

    # -- Communication ----------------------------------------------------

    async def execute(
        self,
        method: str,
        path: str,
        *,
        headers: Mapping[str, str] | None = None,
        params: Mapping[str, Any] | None = None,
        data: Mapping[str, Any] | None = None,
        content: bytes | None = None,
        files: Mapping[str, Any] | None = None,
    ) -> TransportResponse:
        client = self._get_client()
        try:
            response = await client.request(
                method,
                path,
                headers=headers,
                params=params,
                data=data,
                content=content,
                files=files,
            )
        except httpx.TransportError as e:
            raise ConnectionError(f"{method} {path} failed: {e}") from e

        return TransportResponse(
            status=response.status_code,
            headers=dict(response.headers),
            body=response.content,
        )

    async def download(
        self,
        path: str,
        destination: str | Path,
        *,
        headers: Mapping[str, str] | None = None,
    ) -> TransportResponse:
        """Stream a GET response body into *destination*.

        The file is only written for 2xx responses; for any other status the
        body is read into memory and returned so the caller can inspect it.
        The body lands in ``<destination>.part`` first and is moved onto
        *destination* once complete, so an interrupted stream leaves no file.
        """
        client = self._get_client()
        target = Path(destination)
        partial = target.with_name(target.name + ".part")
        try:
            async with client.stream("GET", path, headers=headers) as response:
                if not response.is_success:
                    body = await response.aread()
                    return TransportResponse(
                        status=response.status_code,
                        headers=dict(response.headers),
                        body=body,
                    )
                try:
                    with open(partial, "wb") as fh:
                        async for chunk in response.aiter_bytes():
                            fh.write(chunk)
                except BaseException:
                    partial.unlink(missing_ok=True)
                    raise
                partial.replace(target)
                return TransportResponse(
                    status=response.status_code,
                    headers=dict(response.headers),
                )
        except httpx.TransportError as e:
            raise ConnectionError(f"GET {path} failed: {e}") from e

    # -- Private ----------------------------------------------------------

    def _get_client(self) -> httpx.AsyncClient:
        if not self._base_url:
            raise ConfigurationError("Base URL is not set, call set_url() first")
        if self._client is None or self._client.is_closed:
            logger.debug("Opening HTTP client for %s", self._base_url)
            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                timeout=httpx.Timeout(self._timeout_ms / 1000),
                transport=self._transport,
            )
        return self._client
