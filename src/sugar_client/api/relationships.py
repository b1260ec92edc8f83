from __future__ import annotations

from typing import Any, Awaitable, Callable

from .paths import build_path

SendFn = Callable[..., Awaitable[Any]]


class RelationshipsAPI:
    """Links between records of two modules."""

    def __init__(self, send: SendFn) -> None:
        self._send = send

    async def related(self, module: str, record: str, link: str) -> Any:
        return await self._send("GET", build_path(module, record, "link", link))

    async def relate(
        self,
        module: str,
        record: str,
        link: str,
        related_record: str,
        fields: dict[str, Any] | None = None,
    ) -> Any:
        return await self._send(
            "POST",
            build_path(module, record, "link", link, related_record),
            form=fields or {},
        )

    async def unrelate(
        self, module: str, record: str, link: str, related_record: str
    ) -> Any:
        return await self._send(
            "DELETE", build_path(module, record, "link", link, related_record)
        )

    async def update_relationship(
        self,
        module: str,
        record: str,
        link: str,
        related_record: str,
        fields: dict[str, Any] | None = None,
    ) -> Any:
        return await self._send(
            "PUT",
            build_path(module, record, "link", link, related_record),
            json_body=fields or {},
        )
