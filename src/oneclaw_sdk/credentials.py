"""Credential store: bearer token acquisition, caching and refresh.

One store belongs to one client. Concurrent callers that find the cache empty
or expired share a single in-flight exchange: exactly one exchange request is
sent and every waiter receives its result or its error.
"""
from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Awaitable, Callable, Optional

from .models.auth import (
    AgentApiKey,
    CachedToken,
    Credential,
    PreAuthenticatedToken,
    TokenResponse,
    UserApiKey,
)
from .models.errors import NetworkError

logger = logging.getLogger(__name__)

USER_TOKEN_PATH = "/v1/auth/api-key-token"
AGENT_TOKEN_PATH = "/v1/auth/agent-token"
DEFAULT_SKEW_SECONDS = 30

# (path, json body, timeout) -> TokenResponse; raises a classified error on failure
ExchangeFn = Callable[[str, dict[str, Any], Optional[float]], Awaitable[TokenResponse]]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CredentialStore:
    """Holds the configured credential and the cached bearer token.

    Args:
        credential: The long-lived credential for this client
        exchange: Coroutine function performing the token exchange request
        clock: Returns the current aware UTC time (injectable for tests)
        skew_seconds: Refresh this many seconds before the declared expiry
    """

    def __init__(
        self,
        credential: Credential,
        exchange: ExchangeFn,
        clock: Optional[Callable[[], datetime]] = None,
        skew_seconds: int = DEFAULT_SKEW_SECONDS,
    ) -> None:
        self._credential = credential
        self._exchange = exchange
        self._clock = clock or _utcnow
        self._skew = timedelta(seconds=skew_seconds)
        self._cached: Optional[CachedToken] = None
        self._inflight: Optional[asyncio.Task[CachedToken]] = None
        self._waiters = 0
        # Bumped by unconditional invalidation so an exchange started before
        # it does not repopulate the cache.
        self._generation = 0

    @property
    def credential(self) -> Credential:
        return self._credential

    @property
    def refreshable(self) -> bool:
        """Whether invalidating and re-acquiring can yield a different token."""
        return not isinstance(self._credential, PreAuthenticatedToken)

    @property
    def cached_token(self) -> Optional[CachedToken]:
        return self._cached

    def is_expired(self, token: CachedToken) -> bool:
        if token.expires_at is None:
            return False
        return self._clock() >= token.expires_at - self._skew

    def exchange_request(self) -> tuple[str, dict[str, Any]]:
        """Return the exchange path and body for the configured credential."""
        credential = self._credential
        if isinstance(credential, AgentApiKey):
            return AGENT_TOKEN_PATH, {"agent_id": credential.agent_id, "api_key": credential.key}
        if isinstance(credential, UserApiKey):
            return USER_TOKEN_PATH, {"api_key": credential.key}
        raise TypeError(f"{type(credential).__name__} cannot be exchanged for a token")

    async def acquire_token(self, timeout: Optional[float] = None) -> str:
        """Return a usable bearer token, exchanging the credential if needed.

        Raises:
            AuthenticationError: If the exchange is rejected
            NetworkError: If the exchange request gets no response, or
                ``timeout`` elapses while waiting for a shared exchange
        """
        if isinstance(self._credential, PreAuthenticatedToken):
            return self._credential.token

        cached = self._cached
        if cached is not None and not self.is_expired(cached):
            return cached.value

        token = await self._join_exchange(timeout)
        return token.value

    def invalidate(self, rejected: Optional[str] = None) -> None:
        """Drop the cached token.

        With ``rejected``, the cache is cleared only if it still holds that
        token, so a token refreshed by a concurrent call survives. Without
        it the cache is cleared unconditionally.
        """
        if isinstance(self._credential, PreAuthenticatedToken):
            return
        if rejected is None:
            self._generation += 1
            self._cached = None
            logger.debug("Token cache cleared")
            return
        if self._cached is not None and self._cached.value == rejected:
            self._cached = None
            logger.debug("Rejected token dropped from cache")

    async def _join_exchange(self, timeout: Optional[float]) -> CachedToken:
        task = self._inflight
        if task is None:
            task = asyncio.ensure_future(self._run_exchange(timeout))
            self._inflight = task

        self._waiters += 1
        try:
            # Each waiter is bounded by its own timeout; wait_for only
            # cancels the shield, never the shared exchange.
            return await asyncio.wait_for(asyncio.shield(task), timeout)
        except asyncio.TimeoutError as exc:
            self._abandon(task)
            logger.debug("Gave up waiting for token exchange after %ss", timeout)
            raise NetworkError("Token exchange timed out", cause=exc) from exc
        except asyncio.CancelledError:
            self._abandon(task)
            raise
        finally:
            self._waiters -= 1

    def _abandon(self, task: asyncio.Task[CachedToken]) -> None:
        # Last waiter gone: nobody needs the result any more.
        if self._waiters == 1 and not task.done():
            task.cancel()
            if self._inflight is task:
                self._inflight = None

    async def _run_exchange(self, timeout: Optional[float]) -> CachedToken:
        generation = self._generation
        path, body = self.exchange_request()
        logger.info("Exchanging %s for bearer token", self._credential.kind)
        try:
            response = await self._exchange(path, body, timeout)
            expires_at = None
            if response.expires_in is not None and response.expires_in > 0:
                expires_at = self._clock() + timedelta(seconds=response.expires_in)
            token = CachedToken(
                value=response.access_token,
                expires_at=expires_at,
                refresh_token=response.refresh_token,
            )
            if generation == self._generation:
                self._cached = token
            logger.debug("Token exchange succeeded (expires_at=%s)", expires_at)
            return token
        finally:
            if self._inflight is asyncio.current_task():
                self._inflight = None
