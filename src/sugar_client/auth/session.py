from __future__ import annotations

import asyncio
import dataclasses
import logging
import time
from typing import Any, Callable

from ..config import (
    DEFAULT_ALIVE_TTL_MS,
    PING_PATH,
    TOKEN_PATH,
    Credentials,
    SessionState,
    TokenPair,
)
from ..errors import ApiError, AuthError
from ..protocol.dispatcher import RequestDispatcher
from ..transport.retry import RetryStrategy

logger = logging.getLogger("sugar_client")


class Session:
    """OAuth2 session: credentials, token pair and the liveness guard.

    The session is *authenticated* whenever an access token is held. Whether
    the server still accepts that token is only learned from a probe
    (``GET ping``); a successful probe is remembered for ``alive_ttl_ms`` or
    until the dispatcher reports a 401, whichever comes first.
    """

    def __init__(
        self,
        dispatcher: RequestDispatcher,
        *,
        credentials: Credentials | None = None,
        alive_ttl_ms: int = DEFAULT_ALIVE_TTL_MS,
        retry: RetryStrategy | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._dispatcher = dispatcher
        self._credentials = credentials or Credentials()
        self._tokens = TokenPair()
        self._alive_ttl_ms = alive_ttl_ms
        self._retry = retry
        self._clock = clock
        self._alive_until: float | None = None
        self._lock = asyncio.Lock()

    # ── Credentials ───────────────────────────────────────────────

    @property
    def credentials(self) -> Credentials:
        return self._credentials

    def set_credentials(self, username: str, password: str) -> None:
        self._credentials = dataclasses.replace(
            self._credentials, username=username, password=password
        )

    def set_username(self, value: str) -> None:
        self._credentials = dataclasses.replace(self._credentials, username=value)

    def set_password(self, value: str) -> None:
        self._credentials = dataclasses.replace(self._credentials, password=value)

    def set_platform(self, value: str) -> bool:
        if not value:
            return False
        self._credentials = dataclasses.replace(self._credentials, platform=value)
        return True

    def get_platform(self) -> str:
        return self._credentials.platform

    # ── Tokens ────────────────────────────────────────────────────

    @property
    def tokens(self) -> TokenPair:
        return self._tokens

    @property
    def token(self) -> str | None:
        return self._tokens.access_token

    @property
    def refresh_token(self) -> str | None:
        return self._tokens.refresh_token

    def set_token(self, value: str | None) -> bool:
        if not value:
            return False
        self._tokens = dataclasses.replace(self._tokens, access_token=value)
        self.invalidate()
        return True

    def set_refresh_token(self, value: str | None) -> bool:
        if not value:
            return False
        self._tokens = dataclasses.replace(self._tokens, refresh_token=value)
        return True

    # ── State ─────────────────────────────────────────────────────

    @property
    def state(self) -> SessionState:
        return "authenticated" if self.check() else "unauthenticated"

    def check(self) -> bool:
        return bool(self._tokens.access_token)

    @property
    def is_alive(self) -> bool:
        """True while a previous probe is still trusted."""
        return self._alive_until is not None and self._clock() < self._alive_until

    def invalidate(self) -> None:
        """Forget the liveness memo so the next guarded call probes again."""
        self._alive_until = None

    # ── Authentication ────────────────────────────────────────────

    async def authenticate(self, use_refresh: bool = False) -> None:
        """Request a new token pair from ``oauth2/token``.

        Raises :class:`AuthError` with kind ``invalid_credentials`` when the
        server rejects the grant or answers without an access token, and
        kind ``unreachable`` when the endpoint cannot be reached.
        """
        async with self._lock:
            await self._authenticate(use_refresh)

    async def ensure_authenticated(self) -> None:
        """Make sure the session holds a token the server still accepts."""
        async with self._lock:
            if not self.check():
                await self._authenticate(False)
                return

            if self.is_alive:
                return

            await self._probe()

    # ── Private ───────────────────────────────────────────────────

    async def _probe(self) -> None:
        attempt = 0
        while True:
            try:
                await self._dispatcher.send("GET", PING_PATH)
            except ApiError as e:
                if e.kind == "unauthorized":
                    logger.info("Session token rejected, refreshing")
                    await self._authenticate(True)
                    self._mark_alive()
                    return

                delay = (
                    self._retry.delay_after(e, attempt)
                    if self._retry is not None
                    else None
                )
                if delay is None:
                    raise AuthError(
                        "unreachable",
                        f"Liveness probe failed: {e}",
                        details=e.status,
                    ) from e

                attempt += 1
                logger.warning(
                    "Liveness probe failed (%s), retry %d in %.0fms",
                    e,
                    attempt,
                    delay,
                )
                await asyncio.sleep(delay / 1000)
            else:
                self._mark_alive()
                return

    async def _authenticate(self, use_refresh: bool) -> None:
        body = self._grant(use_refresh)
        grant = body["grant_type"]

        try:
            result = await self._dispatcher.send(
                "POST", TOKEN_PATH, form=body, authenticated=False
            )
        except ApiError as e:
            if e.kind == "unreachable" or (e.status or 0) >= 500:
                raise AuthError(
                    "unreachable", f"Token endpoint unavailable: {e}"
                ) from e
            raise AuthError(
                "invalid_credentials",
                f"Token request ({grant}) was rejected: {e}",
                details=e.details,
            ) from e

        access_token = result.get("access_token") if isinstance(result, dict) else None
        if not access_token:
            raise AuthError(
                "invalid_credentials",
                f"Token response ({grant}) did not contain an access token",
            )

        self._tokens = TokenPair(
            access_token=access_token,
            refresh_token=result.get("refresh_token") or self._tokens.refresh_token,
        )
        logger.info("Authenticated with %s grant", grant)

    def _grant(self, use_refresh: bool) -> dict[str, Any]:
        cred = self._credentials
        if use_refresh:
            if not self._tokens.refresh_token:
                raise AuthError(
                    "invalid_credentials", "No refresh token available"
                )
            return {
                "grant_type": "refresh_token",
                "client_id": cred.client_id,
                "client_secret": cred.client_secret,
                "refresh_token": self._tokens.refresh_token,
            }

        return {
            "grant_type": "password",
            "client_id": cred.client_id,
            "client_secret": cred.client_secret,
            "username": cred.username or "",
            "password": cred.password or "",
            "platform": cred.platform,
        }

    def _mark_alive(self) -> None:
        self._alive_until = self._clock() + self._alive_ttl_ms / 1000
