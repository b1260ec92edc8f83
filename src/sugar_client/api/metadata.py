from __future__ import annotations

from typing import Any, Awaitable, Callable

from .paths import build_path

SendFn = Callable[..., Awaitable[Any]]


class MetadataAPI:
    """Server metadata and language strings."""

    def __init__(self, send: SendFn) -> None:
        self._send = send

    async def metadata(self) -> Any:
        return await self._send("GET", "metadata")

    async def lang(self, language: str = "en") -> Any:
        return await self._send("GET", build_path("lang", language))
