"""
Auth retry coordinator: refresh an expired token and replay a request once.

The coordinator runs an explicit state machine rather than having an
operation call itself again from its own completion handler::

    SENT ──(other outcome)──────────────────────────────► DONE
      │
      └─(auth_expired)─► AUTH_EXPIRED ─► REFRESHING ─(refresh failed)─► DONE
                                             │                     (original error)
                                             └─(refreshed)─► RETRYING ─► DONE
                                                                 (retry's own result)

RETRYING always ends in DONE, so a request is executed at most twice per
logical operation whatever the second attempt returns.
"""

from __future__ import annotations

from enum import Enum
from typing import Callable

from .executor import RawResponse, Request, RequestExecutor
from .logger import get_logger
from .result import APIError, Failure, Result
from .session import Refresher, SessionStore

log = get_logger(__name__)

# Builds the operation's descriptor from the access token to send
RequestBuilder = Callable[[str], Request]


class AuthState(Enum):
    SENT = "sent"
    AUTH_EXPIRED = "auth_expired"
    REFRESHING = "refreshing"
    RETRYING = "retrying"
    DONE = "done"


class AuthRetryCoordinator:
    """
    Executes authorized requests, recovering once from an expired token.

    Args:
        executor: Executor used for both attempts.
        sessions: Shared session store; read for the token and refreshed on
            expiry.
        refresher: Token renewal capability handed to
            :meth:`SessionStore.refresh`.
    """

    def __init__(
        self,
        executor: RequestExecutor,
        sessions: SessionStore,
        refresher: Refresher,
    ) -> None:
        self.executor = executor
        self.sessions = sessions
        self.refresher = refresher

    def run(self, build_request: RequestBuilder) -> tuple[RawResponse | None, Result]:
        """
        Drive one authorized operation to completion.

        Args:
            build_request: Rebuilds the operation's descriptor for a given
                access token; called once per attempt.

        Returns:
            Tuple of ``(raw_response, result)`` of the attempt that decides
            the outcome.  Without a session no request is sent and the
            result is ``Failure(no_session)``.  A failed refresh surfaces the
            first attempt's ``auth_expired`` failure.
        """
        token = self.sessions.access_token
        if token is None:
            log.info("Authorized operation invoked without a session")
            return None, Failure(error=APIError.NO_SESSION)

        response, result = self.executor.execute(build_request(token))
        state = AuthState.SENT

        while state is not AuthState.DONE:
            if state is AuthState.SENT:
                expired = not result.ok and result.error == APIError.AUTH_EXPIRED
                state = AuthState.AUTH_EXPIRED if expired else AuthState.DONE

            elif state is AuthState.AUTH_EXPIRED:
                state = AuthState.REFRESHING

            elif state is AuthState.REFRESHING:
                refreshed = self.sessions.refresh(self.refresher, token)
                if refreshed.ok:
                    token = refreshed.value.access_token
                    state = AuthState.RETRYING
                else:
                    log.warning("Refresh failed (%s); keeping original error", refreshed.error)
                    state = AuthState.DONE

            elif state is AuthState.RETRYING:
                response, result = self.executor.execute(build_request(token))
                state = AuthState.DONE

            log.debug("Auth retry state -> %s", state.value)

        return response, result
