from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Awaitable, Callable, Mapping

from ..config import ApiErrorKind, HttpMethod
from ..errors import ApiError, UnsupportedMethodError
from ..transport.transport import HttpTransport, TransportResponse

logger = logging.getLogger("sugar_client")

TokenFn = Callable[[], str | None]
VerbFn = Callable[[str, Mapping[str, Any] | None], Awaitable[Any]]

TOKEN_HEADER = "OAuth-Token"


class RequestDispatcher:
    """Turns logical REST calls into transport requests and decodes the replies.

    Authenticated requests carry the current session token in the
    ``OAuth-Token`` header. Every failure is raised as an :class:`ApiError`;
    nothing is collapsed here.
    """

    def __init__(
        self,
        transport: HttpTransport,
        *,
        token: TokenFn,
        on_unauthorized: Callable[[], None] | None = None,
    ) -> None:
        self._transport = transport
        self._token = token
        self._on_unauthorized = on_unauthorized
        self._verbs: dict[str, VerbFn] = {
            "GET": self._get_with_query,
            "POST": self._post_json,
            "PUT": self._put_json,
            "DELETE": self._delete_json,
        }

    async def send(
        self,
        method: HttpMethod,
        path: str,
        *,
        params: Mapping[str, Any] | None = None,
        form: Mapping[str, Any] | None = None,
        json_body: Any = None,
        files: Mapping[str, Any] | None = None,
        authenticated: bool = True,
    ) -> Any:
        """Send one request and return the decoded JSON body.

        *form* is sent form-encoded (or as multipart fields when *files* is
        given), *json_body* as a raw JSON payload. An empty 2xx body decodes
        to ``None``.
        """
        headers = self._headers(authenticated)
        content: bytes | None = None
        if json_body is not None:
            content = json.dumps(json_body).encode("utf-8")
            headers["Content-Type"] = "application/json"

        logger.debug("%s %s", method, path)
        try:
            response = await self._transport.execute(
                method,
                path,
                headers=headers,
                params=params,
                data=flatten_form(form) if form is not None else None,
                content=content,
                files=files,
            )
        except ConnectionError as e:
            raise ApiError("unreachable", str(e)) from e

        self._raise_for_status(response, method, path, authenticated)
        return decode(response, method, path)

    async def download(self, path: str, destination: str | Path) -> Path:
        """Stream the body of ``GET path`` to *destination*."""
        logger.debug("GET %s -> %s", path, destination)
        try:
            response = await self._transport.download(
                path, destination, headers=self._headers(True)
            )
        except ConnectionError as e:
            raise ApiError("unreachable", str(e)) from e

        self._raise_for_status(response, "GET", path, True)
        return Path(destination)

    async def call(
        self, method: str, path: str, data: Mapping[str, Any] | None = None
    ) -> Any:
        """Generic escape hatch: GET sends *data* as query, others as JSON."""
        return await self.verb(method)(path, data)

    def verb(self, method: str) -> VerbFn:
        """Look up the sender for *method* (case-insensitive)."""
        verb = self._verbs.get(method.upper())
        if verb is None:
            raise UnsupportedMethodError(method)
        return verb

    # ── Private ───────────────────────────────────────────────────

    def _headers(self, authenticated: bool) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if authenticated:
            token = self._token()
            if token:
                headers[TOKEN_HEADER] = token
        return headers

    def _raise_for_status(
        self,
        response: TransportResponse,
        method: str,
        path: str,
        authenticated: bool,
    ) -> None:
        if response.ok:
            return

        kind = status_kind(response.status)
        if kind == "unauthorized" and authenticated and self._on_unauthorized:
            self._on_unauthorized()

        raise ApiError(
            kind,
            f"{method} {path} returned HTTP {response.status}",
            status=response.status,
            details=_error_details(response),
        )

    async def _get_with_query(self, path: str, data: Mapping[str, Any] | None) -> Any:
        return await self.send("GET", path, params=data or None)

    async def _post_json(self, path: str, data: Mapping[str, Any] | None) -> Any:
        return await self.send("POST", path, json_body=dict(data or {}))

    async def _put_json(self, path: str, data: Mapping[str, Any] | None) -> Any:
        return await self.send("PUT", path, json_body=dict(data or {}))

    async def _delete_json(self, path: str, data: Mapping[str, Any] | None) -> Any:
        return await self.send("DELETE", path, json_body=dict(data) if data else None)


def status_kind(status: int) -> ApiErrorKind:
    if status == 401:
        return "unauthorized"
    if status == 404:
        return "not_found"
    return "other"


def decode(response: TransportResponse, method: str = "", path: str = "") -> Any:
    """Decode a 2xx body as JSON. Empty bodies decode to ``None``."""
    if not response.body.strip():
        return None
    try:
        return json.loads(response.body)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ApiError(
            "other",
            f"{method} {path} returned a body that is not JSON",
            status=response.status,
            code="INVALID_RESPONSE",
        ) from e


def _error_details(response: TransportResponse) -> object:
    try:
        return json.loads(response.body) if response.body else None
    except (json.JSONDecodeError, UnicodeDecodeError):
        return response.body.decode("utf-8", errors="replace")[:200]


def flatten_form(fields: Mapping[str, Any]) -> dict[str, Any]:
    """Flatten nested mappings and lists into bracketed form keys.

    ``{"email": [{"email_address": "a@b.c"}]}`` becomes
    ``{"email[0][email_address]": "a@b.c"}``.
    """
    flat: dict[str, Any] = {}
    for key, value in fields.items():
        _flatten_into(flat, str(key), value)
    return flat


def _flatten_into(flat: dict[str, Any], key: str, value: Any) -> None:
    if isinstance(value, Mapping):
        for sub_key, sub_value in value.items():
            _flatten_into(flat, f"{key}[{sub_key}]", sub_value)
    elif isinstance(value, (list, tuple)):
        for index, item in enumerate(value):
            _flatten_into(flat, f"{key}[{index}]", item)
    else:
        flat[key] = value
