from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Awaitable, Callable, Mapping

from .api.files import FilesAPI
from .api.metadata import MetadataAPI
from .api.records import RecordsAPI
from .api.relationships import RelationshipsAPI
from .auth.session import Session
from .config import ClientOptions, Credentials, HttpMethod, RetryOptions, TokenPair
from .errors import ApiError, AuthError
from .protocol.dispatcher import RequestDispatcher
from .transport.retry import RetryStrategy
from .transport.transport import HttpTransport

logger = logging.getLogger("sugar_client")


class SugarClient:
    """Async Python client for the SugarCRM 7+ REST API."""

    def __init__(
        self,
        url: str | None = None,
        options: ClientOptions | None = None,
        *,
        transport: HttpTransport | None = None,
    ) -> None:
        self._options = options or ClientOptions()

        self._transport = transport or HttpTransport(
            url, timeout_ms=self._options.request_timeout_ms
        )
        if url is not None:
            self._transport.base_url = url

        self._dispatcher = RequestDispatcher(
            self._transport,
            token=lambda: self._session.token,
            on_unauthorized=lambda: self._session.invalidate(),
        )

        self._session = Session(
            self._dispatcher,
            credentials=Credentials(platform=self._options.platform),
            alive_ttl_ms=self._options.alive_ttl_ms,
            retry=self._create_retry_strategy(),
        )

        self._records = RecordsAPI(self.request)
        self._relationships = RelationshipsAPI(self.request)
        self._files = FilesAPI(self.request, self._download)
        self._metadata = MetadataAPI(self.request)

    # ── State ─────────────────────────────────────────────────────

    @property
    def url(self) -> str | None:
        return self._transport.base_url

    @property
    def options(self) -> ClientOptions:
        return self._options

    @property
    def session(self) -> Session:
        return self._session

    @property
    def tokens(self) -> TokenPair:
        return self._session.tokens

    @property
    def records(self) -> RecordsAPI:
        return self._records

    @property
    def relationships(self) -> RelationshipsAPI:
        return self._relationships

    @property
    def files(self) -> FilesAPI:
        return self._files

    @property
    def metadata(self) -> MetadataAPI:
        return self._metadata

    # ── Configuration ─────────────────────────────────────────────

    def set_url(self, value: str) -> SugarClient:
        self._transport.base_url = value
        return self

    def set_username(self, value: str) -> SugarClient:
        self._session.set_username(value)
        return self

    def set_password(self, value: str) -> SugarClient:
        self._session.set_password(value)
        return self

    def set_credentials(self, username: str, password: str) -> SugarClient:
        self._session.set_credentials(username, password)
        return self

    def set_platform(self, value: str) -> bool:
        return self._session.set_platform(value)

    def get_platform(self) -> str:
        return self._session.get_platform()

    def get_token(self) -> str | None:
        return self._session.token

    def set_token(self, value: str | None) -> bool:
        return self._session.set_token(value)

    def get_refresh_token(self) -> str | None:
        return self._session.refresh_token

    def set_refresh_token(self, value: str | None) -> bool:
        return self._session.set_refresh_token(value)

    # ── Lifecycle ─────────────────────────────────────────────────

    def check(self) -> bool:
        return self._session.check()

    async def connect(self, refresh: bool = False) -> bool:
        """Authenticate now. Returns False instead of raising unless
        ``raise_errors`` is set."""
        try:
            await self._session.authenticate(refresh)
        except AuthError as e:
            if self._options.raise_errors:
                raise
            logger.warning("Authentication failed: %s", e)
            return False
        return True

    async def close(self) -> None:
        await self._transport.close()

    # ── Request sending ───────────────────────────────────────────

    async def request(self, method: HttpMethod, path: str, **kwargs: Any) -> Any:
        """Send an authenticated request through the session guard.

        Keyword arguments are passed to :meth:`RequestDispatcher.send`
        (``params``, ``form``, ``json_body``, ``files``).
        """
        return await self._guarded(
            lambda: self._dispatcher.send(method, path, **kwargs)
        )

    async def call(
        self,
        path: str,
        method: str = "GET",
        data: Mapping[str, Any] | None = None,
    ) -> Any:
        """Call an arbitrary endpoint. GET sends *data* as query parameters,
        POST/PUT/DELETE as a JSON body."""
        verb = self._dispatcher.verb(method)
        return await self._guarded(lambda: verb(path, data))

    # ── Context manager ───────────────────────────────────────────

    async def __aenter__(self) -> SugarClient:
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.close()

    # ── Private ───────────────────────────────────────────────────

    async def _download(self, path: str, destination: str | Path) -> Any:
        return await self._guarded(
            lambda: self._dispatcher.download(path, destination)
        )

    async def _guarded(self, operation: Callable[[], Awaitable[Any]]) -> Any:
        try:
            await self._session.ensure_authenticated()
            result = await operation()
        except (AuthError, ApiError) as e:
            if self._options.raise_errors:
                raise
            logger.warning("Request failed: %s", e)
            return False

        if not result and not self._options.raise_errors:
            return False
        return result

    def _create_retry_strategy(self) -> RetryStrategy | None:
        if self._options.retry is False:
            return None
        opts = (
            self._options.retry
            if isinstance(self._options.retry, RetryOptions)
            else None
        )
        return RetryStrategy(opts)
