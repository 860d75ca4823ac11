"""
Track resource operations.

Every operation builds a descriptor and a parse strategy, runs as one
background task on the client's worker pool, and hands its response to
``completion`` exactly once.  Each returns the task's ``Future``.

Operations marked *requires a session* go through the auth retry
coordinator: without a session they complete with ``Failure(no_session)``
and send nothing.
"""

from __future__ import annotations

from concurrent.futures import Future
from typing import Callable

from .client import SoundcloudClient
from .config import LINKED_PARTITIONING, TRACKS_URL, USERS_URL
from .executor import GET, POST, PUT, Request, append_query_string
from .models import Comment, Track, User
from .parser import ParseFunction, parse_list, parse_object, parse_status_confirmation
from .responses import PaginatedAPIResponse, SimpleAPIResponse, collection_request, unwrap_page
from .search import SearchQueryOptions, search_parameters

SimpleCompletion = Callable[[SimpleAPIResponse], None]
PaginatedCompletion = Callable[[PaginatedAPIResponse], None]


# ---------------------------------------------------------------------------
# Shared task builders
# ---------------------------------------------------------------------------

def _simple(client: SoundcloudClient, request: Request, completion: SimpleCompletion) -> Future:
    def work() -> SimpleAPIResponse:
        _, result = client.executor.execute(request)
        return SimpleAPIResponse(result)

    return client.executor.submit(work, completion)


def _authorized(
    client: SoundcloudClient,
    build_request: Callable[[str], Request],
    completion: SimpleCompletion,
) -> Future:
    def work() -> SimpleAPIResponse:
        _, result = client.auth.run(build_request)
        return SimpleAPIResponse(result)

    return client.executor.submit(work, completion)


def _paginated(
    client: SoundcloudClient,
    url: str,
    parameters: dict[str, str],
    parse: ParseFunction,
    completion: PaginatedCompletion,
) -> Future:
    request = collection_request(url, parameters, parse, client.executor)

    def work() -> PaginatedAPIResponse:
        _, result = client.executor.execute(request)
        return unwrap_page(result, parse, client.executor)

    return client.executor.submit(work, completion)


# ---------------------------------------------------------------------------
# Public reads
# ---------------------------------------------------------------------------

def track(client: SoundcloudClient, identifier: int, completion: SimpleCompletion) -> Future:
    """Load the track with a specific identifier."""
    request = Request(
        url=f"{TRACKS_URL}/{identifier}.json",
        method=GET,
        parameters=client.parameters(),
        parse=parse_object(Track.from_json),
    )
    return _simple(client, request, completion)


def tracks(
    client: SoundcloudClient,
    identifiers: list[int],
    completion: SimpleCompletion,
) -> Future:
    """
    Load several tracks in one call.

    The result fails as a whole if any returned track cannot be decoded.
    """
    request = Request(
        url=TRACKS_URL,
        method=GET,
        parameters=client.parameters(ids=",".join(str(i) for i in identifiers)),
        parse=parse_list(Track.from_json),
    )
    return _simple(client, request, completion)


def search(
    client: SoundcloudClient,
    queries: list[SearchQueryOptions],
    completion: PaginatedCompletion,
) -> Future:
    """Search tracks matching every option in ``queries``; paginated."""
    parameters = search_parameters(client.parameters(**LINKED_PARTITIONING), queries)
    return _paginated(client, TRACKS_URL, parameters, parse_list(Track.from_json), completion)


def comments(client: SoundcloudClient, track_id: int, completion: PaginatedCompletion) -> Future:
    """Load the comments of a track; paginated."""
    return _paginated(
        client,
        f"{TRACKS_URL}/{track_id}/comments.json",
        client.parameters(**LINKED_PARTITIONING),
        parse_list(Comment.from_json),
        completion,
    )


def favoriters(client: SoundcloudClient, track_id: int, completion: PaginatedCompletion) -> Future:
    """Load the users who favorited a track; paginated."""
    return _paginated(
        client,
        f"{TRACKS_URL}/{track_id}/favoriters.json",
        client.parameters(**LINKED_PARTITIONING),
        parse_list(User.from_json),
        completion,
    )


# ---------------------------------------------------------------------------
# Authorized writes
# ---------------------------------------------------------------------------

def comment(
    client: SoundcloudClient,
    track_id: int,
    body: str,
    timestamp: float,
    completion: SimpleCompletion,
) -> Future:
    """
    Post a comment on a track.  *Requires a session.*

    Args:
        client: Client context.
        track_id: Track to comment on.
        body: Comment text.
        timestamp: Playback position the comment is attached to.
        completion: Receives ``SimpleAPIResponse[Comment]``.
    """
    url = f"{TRACKS_URL}/{track_id}/comments.json"

    def build_request(token: str) -> Request:
        return Request(
            url=url,
            method=POST,
            parameters=client.parameters(**{
                "comment[body]": body,
                "comment[timestamp]": str(timestamp),
                "oauth_token": token,
            }),
            parse=parse_object(Comment.from_json),
        )

    return _authorized(client, build_request, completion)


def favorite(
    client: SoundcloudClient,
    user_id: int,
    track_id: int,
    completion: SimpleCompletion,
) -> Future:
    """
    Favorite a track for the logged-in user.  *Requires a session.*

    The parameters are appended to the URL; the PUT carries no body.

    Args:
        client: Client context.
        user_id: Identifier of the logged-in user.
        track_id: Track to favorite.
        completion: Receives ``SimpleAPIResponse[bool]``.
    """
    url = f"{USERS_URL}/{user_id}/favorites/{track_id}.json"

    def build_request(token: str) -> Request:
        return Request(
            url=append_query_string(url, client.parameters(oauth_token=token)),
            method=PUT,
            parameters=None,
            parse=parse_status_confirmation,
        )

    return _authorized(client, build_request, completion)
