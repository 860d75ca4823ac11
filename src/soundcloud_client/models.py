"""
Domain objects decoded from SoundCloud JSON payloads.

Each ``from_json`` is the decoder capability of the request pipeline: a pure
function that returns a fully-populated object, or ``None`` when a required
field is missing or has the wrong type.  Partially-populated objects are
never returned.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


def _int(data: dict, key: str) -> int | None:
    value = data.get(key)
    # bool is an int subclass; a flag is never a valid identifier
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value


def _str(data: dict, key: str) -> str | None:
    value = data.get(key)
    return value if isinstance(value, str) else None


@dataclass(frozen=True)
class User:
    """A SoundCloud account, as embedded in tracks and comments."""

    identifier: int
    username: str
    full_name: str | None = None
    permalink_url: str | None = None
    avatar_url: str | None = None
    city: str | None = None
    country: str | None = None

    @classmethod
    def from_json(cls, data: Any) -> User | None:
        if not isinstance(data, dict):
            return None
        identifier = _int(data, "id")
        username = _str(data, "username")
        if identifier is None or username is None:
            return None
        return cls(
            identifier=identifier,
            username=username,
            full_name=_str(data, "full_name"),
            permalink_url=_str(data, "permalink_url"),
            avatar_url=_str(data, "avatar_url"),
            city=_str(data, "city"),
            country=_str(data, "country"),
        )


@dataclass(frozen=True)
class Track:
    """
    A SoundCloud track.

    ``identifier``, ``title`` and the embedded ``user`` are required; every
    other attribute is optional on the wire.  ``duration`` is in
    milliseconds.
    """

    identifier: int
    title: str
    user: User
    permalink_url: str | None = None
    duration: int | None = None
    genre: str | None = None
    description: str | None = None
    created_at: str | None = None
    stream_url: str | None = None
    artwork_url: str | None = None
    playback_count: int | None = None
    favoritings_count: int | None = None
    streamable: bool = False

    @classmethod
    def from_json(cls, data: Any) -> Track | None:
        if not isinstance(data, dict):
            return None
        identifier = _int(data, "id")
        title = _str(data, "title")
        user = User.from_json(data.get("user"))
        if identifier is None or title is None or user is None:
            return None
        return cls(
            identifier=identifier,
            title=title,
            user=user,
            permalink_url=_str(data, "permalink_url"),
            duration=_int(data, "duration"),
            genre=_str(data, "genre"),
            description=_str(data, "description"),
            created_at=_str(data, "created_at"),
            stream_url=_str(data, "stream_url"),
            artwork_url=_str(data, "artwork_url"),
            playback_count=_int(data, "playback_count"),
            favoritings_count=_int(data, "favoritings_count"),
            streamable=data.get("streamable") is True,
        )


@dataclass(frozen=True)
class Comment:
    """A timed comment on a track.  ``timestamp`` is in milliseconds."""

    identifier: int
    body: str
    user: User
    track_identifier: int | None = None
    timestamp: int | None = None
    created_at: str | None = None

    @classmethod
    def from_json(cls, data: Any) -> Comment | None:
        if not isinstance(data, dict):
            return None
        identifier = _int(data, "id")
        body = _str(data, "body")
        user = User.from_json(data.get("user"))
        if identifier is None or body is None or user is None:
            return None
        return cls(
            identifier=identifier,
            body=body,
            user=user,
            track_identifier=_int(data, "track_id"),
            timestamp=_int(data, "timestamp"),
            created_at=_str(data, "created_at"),
        )
