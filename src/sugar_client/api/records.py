from __future__ import annotations

from typing import Any, Awaitable, Callable

from .paths import build_path

SendFn = Callable[..., Awaitable[Any]]


class RecordsAPI:
    """Module records: CRUD, search and favorites."""

    def __init__(self, send: SendFn) -> None:
        self._send = send

    # ── CRUD ──────────────────────────────────────────────────────

    async def create(self, module: str, fields: dict[str, Any]) -> Any:
        return await self._send("POST", build_path(module), form=fields)

    async def retrieve(self, module: str, record: str) -> Any:
        return await self._send("GET", build_path(module, record))

    async def update(self, module: str, record: str, fields: dict[str, Any]) -> Any:
        return await self._send("PUT", build_path(module, record), json_body=fields)

    async def delete(self, module: str, record: str) -> Any:
        return await self._send("DELETE", build_path(module, record))

    # ── Queries ───────────────────────────────────────────────────

    async def search(self, module: str, params: dict[str, Any] | None = None) -> Any:
        """List records of *module*.

        Useful *params*: ``q``, ``max_num``, ``offset``, ``fields``,
        ``order_by`` (``last_name:DESC,date_modified:ASC``), ``favorites``,
        ``deleted``.
        """
        return await self._send("GET", build_path(module), params=params or None)

    # ── Favorites ─────────────────────────────────────────────────

    async def favorite(self, module: str, record: str) -> Any:
        return await self._send("PUT", build_path(module, record, "favorite"))

    async def unfavorite(self, module: str, record: str) -> Any:
        return await self._send("DELETE", build_path(module, record, "favorite"))
