"""
OAuth session state, single-flight token refresh, and the default refresher.

The session is shared by every authorized operation of a client, so it lives
in an explicit :class:`SessionStore` handed to request builders rather than
in a process-wide global.  Login and logout are ``set``/``clear`` on the
store; the only mutation the request pipeline itself performs is a refresh.
"""

from __future__ import annotations

import threading
from concurrent.futures import Future
from dataclasses import dataclass, replace
from typing import Any, Callable

from .config import OAUTH_TOKEN_URL
from .executor import POST, Request, RequestExecutor
from .logger import get_logger
from .parser import parse_object
from .result import APIError, Failure, Result, Success

log = get_logger(__name__)


@dataclass(frozen=True)
class Session:
    """Access token plus what is needed to renew it."""

    access_token: str
    refresh_token: str | None = None
    expires_in: int | None = None
    scope: str | None = None

    def __repr__(self) -> str:
        # Keep tokens out of logs and tracebacks
        return f"Session(scope={self.scope!r}, expires_in={self.expires_in!r})"

    @classmethod
    def from_json(cls, data: Any) -> Session | None:
        """Decode an OAuth token response; ``None`` without an access token."""
        if not isinstance(data, dict):
            return None
        access_token = data.get("access_token")
        if not isinstance(access_token, str) or not access_token:
            return None
        refresh_token = data.get("refresh_token")
        expires_in = data.get("expires_in")
        scope = data.get("scope")
        return cls(
            access_token=access_token,
            refresh_token=refresh_token if isinstance(refresh_token, str) else None,
            expires_in=expires_in if isinstance(expires_in, int) else None,
            scope=scope if isinstance(scope, str) else None,
        )


Refresher = Callable[[Session], Result[Session]]


class SessionStore:
    """
    Holds at most one :class:`Session` and serializes its refresh.

    Only one refresh runs at a time.  Operations that detect an expired token
    while a refresh is already in flight wait for it and share its outcome
    instead of issuing their own.
    """

    def __init__(self, session: Session | None = None) -> None:
        self._lock = threading.Lock()
        self._session = session
        self._inflight: Future | None = None

    def get(self) -> Session | None:
        with self._lock:
            return self._session

    @property
    def access_token(self) -> str | None:
        session = self.get()
        return session.access_token if session else None

    def set(self, session: Session) -> None:
        with self._lock:
            self._session = session

    def clear(self) -> None:
        with self._lock:
            self._session = None

    def refresh(self, refresher: Refresher, rejected_token: str) -> Result[Session]:
        """
        Replace the session whose ``rejected_token`` the API refused.

        Args:
            refresher: Capability renewing a session.
            rejected_token: Access token the failed attempt was built with.

        Returns:
            ``Success(session)`` holding the token to retry with, or a
            ``Failure`` (``no_session`` if the session was cleared,
            ``refresh_error`` if renewal failed).  If another operation
            already rotated the token, the current session is returned
            without calling ``refresher``.
        """
        with self._lock:
            current = self._session
            if current is None:
                return Failure(error=APIError.NO_SESSION)
            if current.access_token != rejected_token:
                log.debug("Token already rotated by a concurrent refresh")
                return Success(current)
            if self._inflight is not None:
                waiter, leader = self._inflight, False
            else:
                waiter, leader = Future(), True
                self._inflight = waiter

        if not leader:
            log.debug("Waiting on in-flight token refresh")
            return waiter.result()

        try:
            result = refresher(current)
        except BaseException as exc:
            with self._lock:
                self._inflight = None
            waiter.set_exception(exc)
            raise

        with self._lock:
            # A logout during the refresh wins over the renewed session
            if result.ok and self._session is current:
                self._session = result.value
            self._inflight = None
        waiter.set_result(result)
        return result


class OAuthTokenRefresher:
    """
    Renews a session with the ``refresh_token`` grant.

    Sends ``client_id``, ``client_secret``, ``grant_type=refresh_token`` and
    ``refresh_token`` as a form body to the OAuth token endpoint.
    """

    def __init__(
        self,
        executor: RequestExecutor,
        client_id: str,
        client_secret: str | None,
        token_url: str = OAUTH_TOKEN_URL,
    ) -> None:
        self.executor = executor
        self.client_id = client_id
        self.client_secret = client_secret
        self.token_url = token_url

    def __call__(self, session: Session) -> Result[Session]:
        if not session.refresh_token:
            return Failure(error=APIError.REFRESH_ERROR, context="Session has no refresh token")
        if not self.client_secret:
            return Failure(error=APIError.REFRESH_ERROR, context="Client secret is not configured")

        request = Request(
            url=self.token_url,
            method=POST,
            parameters={
                "client_id": self.client_id,
                "client_secret": self.client_secret,
                "grant_type": "refresh_token",
                "refresh_token": session.refresh_token,
            },
            parse=parse_object(Session.from_json),
        )
        _, result = self.executor.execute(request)
        if not result.ok:
            log.warning("Token refresh failed: %s", result.error)
            return Failure(error=APIError.REFRESH_ERROR, context=result)

        renewed: Session = result.value
        log.info("Access token refreshed")
        if renewed.refresh_token is None:
            renewed = replace(renewed, refresh_token=session.refresh_token)
        return Success(renewed)
