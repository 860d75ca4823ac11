"""
Unit tests for src/soundcloud_client/retry.py.

Covers the auth retry state machine:
- No session: immediate no_session failure, transport never called.
- Non-auth outcomes are forwarded unchanged after a single attempt.
- Expired token + successful refresh: one replay with the new token.
- Retry-once: a second auth failure is surfaced, never retried again.
- Failed refresh: the original auth_expired failure is surfaced.
"""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from src.soundcloud_client.executor import GET, Request
from src.soundcloud_client.models import Track
from src.soundcloud_client.parser import parse_object
from src.soundcloud_client.result import APIError, Failure, Success
from src.soundcloud_client.retry import AuthRetryCoordinator
from src.soundcloud_client.session import Session, SessionStore

from .conftest import make_track

URL = "https://api.soundcloud.com/tracks/1.json"
UNAUTHORIZED = {"errors": [{"error_message": "401 - Unauthorized"}]}


def _build(token: str) -> Request:
    return Request(
        url=URL,
        method=GET,
        parameters={"oauth_token": token},
        parse=parse_object(Track.from_json),
    )


@pytest.fixture
def refresher():
    return MagicMock(return_value=Success(Session(access_token="token-2", refresh_token="refresh-2")))


@pytest.fixture
def sessions(session):
    return SessionStore(session)


@pytest.fixture
def coordinator(executor, sessions, refresher):
    return AuthRetryCoordinator(executor, sessions, refresher)


# ---------------------------------------------------------------------------
# Preconditions and pass-through
# ---------------------------------------------------------------------------

class TestNoRetryNeeded:

    def test_no_session_skips_network(self, executor, transport, refresher):
        coordinator = AuthRetryCoordinator(executor, SessionStore(), refresher)

        response, result = coordinator.run(_build)

        assert response is None
        assert result.error == APIError.NO_SESSION
        assert result.is_generic
        assert transport.calls == []
        refresher.assert_not_called()

    def test_success_forwarded(self, coordinator, transport, refresher):
        transport.queue(make_track(1))

        _, result = coordinator.run(_build)

        assert result.ok
        assert transport.query(0) == {"oauth_token": "token-1"}
        refresher.assert_not_called()

    @pytest.mark.parametrize("status", [403, 404, 500])
    def test_non_auth_http_error_not_retried(self, coordinator, transport, refresher, status):
        transport.queue({"errors": []}, status=status)

        _, result = coordinator.run(_build)

        assert result.error == APIError.HTTP_ERROR
        assert len(transport.calls) == 1
        refresher.assert_not_called()

    def test_network_error_not_retried(self, coordinator, transport, refresher):
        transport.queue_error()

        _, result = coordinator.run(_build)

        assert result.error == APIError.NETWORK_ERROR
        assert len(transport.calls) == 1
        refresher.assert_not_called()


# ---------------------------------------------------------------------------
# Refresh and replay
# ---------------------------------------------------------------------------

class TestRefreshAndRetry:

    def test_expired_token_refreshed_and_replayed(self, coordinator, transport, sessions, refresher):
        transport.queue(UNAUTHORIZED, status=401)
        transport.queue(make_track(1))

        _, result = coordinator.run(_build)

        assert result.ok
        assert result.value.identifier == 1
        assert transport.query(0)["oauth_token"] == "token-1"
        assert transport.query(1)["oauth_token"] == "token-2"
        assert sessions.access_token == "token-2"
        refresher.assert_called_once()

    def test_second_auth_failure_is_final(self, coordinator, transport, refresher):
        transport.queue(UNAUTHORIZED, status=401)
        transport.queue(UNAUTHORIZED, status=401)

        _, result = coordinator.run(_build)

        assert result.error == APIError.AUTH_EXPIRED
        assert len(transport.calls) == 2
        refresher.assert_called_once()

    def test_retry_failure_of_other_kind_is_surfaced(self, coordinator, transport):
        transport.queue(UNAUTHORIZED, status=401)
        transport.queue_error("reset by peer")

        _, result = coordinator.run(_build)

        assert result.error == APIError.NETWORK_ERROR
        assert len(transport.calls) == 2

    def test_refresh_failure_surfaces_original_error(self, executor, transport, sessions):
        refresher = MagicMock(return_value=Failure(error=APIError.REFRESH_ERROR))
        coordinator = AuthRetryCoordinator(executor, sessions, refresher)
        transport.queue(UNAUTHORIZED, status=401)

        response, result = coordinator.run(_build)

        assert result.error == APIError.AUTH_EXPIRED
        assert response.status_code == 401
        assert len(transport.calls) == 1
        assert sessions.access_token == "token-1"

    def test_logout_before_refresh_surfaces_original_error(self, executor, transport, sessions):
        def unreachable_refresher(_session):
            raise AssertionError("refresher must not run without a session")

        coordinator = AuthRetryCoordinator(executor, sessions, unreachable_refresher)
        transport.queue(UNAUTHORIZED, status=401)
        original_execute = executor.execute

        def execute_and_logout(request):
            outcome = original_execute(request)
            sessions.clear()
            return outcome

        executor.execute = execute_and_logout

        _, result = coordinator.run(_build)

        assert result.error == APIError.AUTH_EXPIRED
        assert len(transport.calls) == 1
