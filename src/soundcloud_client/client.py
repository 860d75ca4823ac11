"""
Client context shared by every resource operation.

Replaces process-wide state (client identifier, current session) with one
explicit object passed to request builders: it owns the transport, the
worker pool, the request executor, the session store, and the auth retry
coordinator.
"""

from __future__ import annotations

import os
from concurrent.futures import ThreadPoolExecutor
from typing import Any

from .config import CLIENT_ID_ENV, CLIENT_SECRET_ENV, MAX_WORKERS
from .executor import RequestExecutor, RequestsTransport
from .retry import AuthRetryCoordinator
from .session import OAuthTokenRefresher, Refresher, Session, SessionStore


class SoundcloudClient:
    """
    Entry point holding credentials and shared execution resources.

    Args:
        client_id: Application client identifier.  Falls back to the
            ``SOUNDCLOUD_CLIENT_ID`` environment variable.
        client_secret: Application secret, needed only to refresh tokens.
            Falls back to ``SOUNDCLOUD_CLIENT_SECRET``.
        session: Session to start logged in with.
        transport: Object with ``send(method, url, data)``; defaults to a
            :class:`RequestsTransport`.
        refresher: Token renewal capability; defaults to an
            :class:`OAuthTokenRefresher`.
        max_workers: Number of logical operations run concurrently.

    Raises:
        ValueError: If no client identifier is available.
    """

    def __init__(
        self,
        client_id: str | None = None,
        client_secret: str | None = None,
        session: Session | None = None,
        transport: Any = None,
        refresher: Refresher | None = None,
        max_workers: int = MAX_WORKERS,
    ) -> None:
        client_id = client_id or os.getenv(CLIENT_ID_ENV)
        if not client_id:
            raise ValueError(
                f"Client identifier not found. Pass client_id or set the "
                f"'{CLIENT_ID_ENV}' environment variable."
            )
        self.client_id = client_id
        self.sessions = SessionStore(session)
        self.transport = transport if transport is not None else RequestsTransport()
        self._pool = ThreadPoolExecutor(
            max_workers=max_workers,
            thread_name_prefix="soundcloud",
        )
        self.executor = RequestExecutor(self.transport, self._pool)
        self.refresher = refresher or OAuthTokenRefresher(
            self.executor,
            client_id,
            client_secret or os.getenv(CLIENT_SECRET_ENV),
        )
        self.auth = AuthRetryCoordinator(self.executor, self.sessions, self.refresher)

    # -- session ------------------------------------------------------------

    @property
    def session(self) -> Session | None:
        return self.sessions.get()

    def login(self, session: Session) -> None:
        self.sessions.set(session)

    def logout(self) -> None:
        self.sessions.clear()

    # -- request helpers ----------------------------------------------------

    def parameters(self, **extra: str) -> dict[str, str]:
        """Base query parameters (``client_id``) merged with ``extra``."""
        return {"client_id": self.client_id, **extra}

    # -- lifecycle ----------------------------------------------------------

    def close(self, wait: bool = True) -> None:
        """Wait for in-flight operations (if ``wait``) and release resources."""
        self._pool.shutdown(wait=wait)
        close = getattr(self.transport, "close", None)
        if close is not None:
            close()

    def __enter__(self) -> SoundcloudClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
