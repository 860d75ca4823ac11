"""
src/soundcloud_client — request pipeline for the SoundCloud JSON API.

Module layout
-------------
config.py     — endpoints, credential env vars, timeouts, auth-expiry markers
result.py     — Success / Failure result container and APIError kinds
models.py     — Track, User, Comment decoders
parser.py     — pure parse strategies (object, all-or-nothing list, envelope)
executor.py   — Request descriptor, requests transport, RequestExecutor
responses.py  — SimpleAPIResponse, PaginatedAPIResponse (advance / pages)
session.py    — Session, SessionStore (single-flight refresh), OAuth refresher
retry.py      — AuthRetryCoordinator state machine (refresh + replay once)
search.py     — SearchQueryOptions for track search
client.py     — SoundcloudClient context shared by every operation
tracks.py     — track resource operations

Public interface
----------------
Create a client (client id from SOUNDCLOUD_CLIENT_ID if omitted):
    client = SoundcloudClient(client_id="...")

Run an operation; the completion receives the response once:
    tracks.track(client, 42, completion)
    tracks.search(client, [SearchQueryOptions.query_value("ambient")], completion)

Advance a paginated response:
    response.advance(completion)
"""

from . import tracks
from .client import SoundcloudClient
from .models import Comment, Track, User
from .responses import PaginatedAPIResponse, SimpleAPIResponse
from .result import APIError, Failure, Result, Success
from .search import SearchQueryOptions
from .session import Session

__all__ = [
    # Client and operations
    "SoundcloudClient",
    "tracks",
    "SearchQueryOptions",
    "Session",
    # Responses
    "SimpleAPIResponse",
    "PaginatedAPIResponse",
    "Result",
    "Success",
    "Failure",
    "APIError",
    # Domain objects
    "Track",
    "User",
    "Comment",
]
