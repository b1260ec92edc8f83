from __future__ import annotations

import mimetypes
from pathlib import Path
from typing import Any, Awaitable, Callable

from .paths import build_path

SendFn = Callable[..., Awaitable[Any]]
DownloadFn = Callable[[str, str | Path], Awaitable[Any]]

DEFAULT_CONTENT_TYPE = "application/octet-stream"


class FilesAPI:
    """Files attached to record fields."""

    def __init__(self, send: SendFn, download: DownloadFn) -> None:
        self._send = send
        self._download = download

    async def list(self, module: str, record: str) -> Any:
        return await self._send("GET", build_path(module, record, "file"))

    async def upload(
        self,
        module: str,
        record: str,
        field: str,
        path: str | Path,
        params: dict[str, Any] | None = None,
    ) -> Any:
        """Attach the file at *path* to *field*, replacing any existing file.

        *params* are sent as multipart fields next to the file (typically
        ``format=sugar-html-json``). A ``filename`` entry overrides the name
        the file is uploaded under and is not sent as a field.
        """
        source = Path(path)
        fields = dict(params or {})
        filename = fields.pop("filename", None) or source.name
        content_type = (
            mimetypes.guess_type(source.name)[0] or DEFAULT_CONTENT_TYPE
        )
        files = {field: (filename, source.read_bytes(), content_type)}

        return await self._send(
            "POST",
            build_path(module, record, "file", field),
            form=fields,
            files=files,
        )

    async def download(
        self, module: str, record: str, field: str, destination: str | Path
    ) -> Any:
        return await self._download(
            build_path(module, record, "file", field), destination
        )

    async def delete(self, module: str, record: str, field: str) -> Any:
        return await self._send("DELETE", build_path(module, record, "file", field))
