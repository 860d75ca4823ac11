"""
Track search query options.

Each option renders to one ``(parameter, value)`` pair of the
``/tracks`` search endpoint; :func:`search_parameters` merges a list of them
into the request parameters.  A later option with the same parameter
overrides an earlier one.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

# Values accepted by the "filter" parameter
FILTERS: frozenset[str] = frozenset({"all", "public", "private", "streamable", "downloadable"})

# Values accepted by the "license" parameter
LICENSES: frozenset[str] = frozenset({
    "no-rights-reserved",
    "all-rights-reserved",
    "cc-by",
    "cc-by-nc",
    "cc-by-nd",
    "cc-by-sa",
    "cc-by-nc-nd",
    "cc-by-nc-sa",
})

# Values accepted by the "types" parameter
TRACK_TYPES: frozenset[str] = frozenset({
    "original", "remix", "live", "recording", "spoken", "podcast", "demo",
    "in progress", "stem", "loop", "sound effect", "sample", "other",
})

_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _checked(kind: str, values: list[str], allowed: frozenset[str]) -> list[str]:
    unknown = [value for value in values if value not in allowed]
    if unknown:
        raise ValueError(
            f"Unknown {kind} value(s): {', '.join(unknown)}. "
            f"Expected one of: {', '.join(sorted(allowed))}."
        )
    return values


@dataclass(frozen=True)
class SearchQueryOptions:
    """One search criterion, rendered as a query parameter pair."""

    parameter: str
    value: str

    @property
    def query(self) -> tuple[str, str]:
        return self.parameter, self.value

    @classmethod
    def query_value(cls, text: str) -> SearchQueryOptions:
        return cls("q", text)

    @classmethod
    def tags(cls, tags: list[str]) -> SearchQueryOptions:
        return cls("tags", ",".join(tags))

    @classmethod
    def filter(cls, value: str) -> SearchQueryOptions:
        return cls("filter", _checked("filter", [value], FILTERS)[0])

    @classmethod
    def license(cls, value: str) -> SearchQueryOptions:
        return cls("license", _checked("license", [value], LICENSES)[0])

    @classmethod
    def bpm_from(cls, bpm: int) -> SearchQueryOptions:
        return cls("bpm[from]", str(bpm))

    @classmethod
    def bpm_to(cls, bpm: int) -> SearchQueryOptions:
        return cls("bpm[to]", str(bpm))

    @classmethod
    def duration_from(cls, milliseconds: int) -> SearchQueryOptions:
        return cls("duration[from]", str(milliseconds))

    @classmethod
    def duration_to(cls, milliseconds: int) -> SearchQueryOptions:
        return cls("duration[to]", str(milliseconds))

    @classmethod
    def created_at_from(cls, moment: datetime) -> SearchQueryOptions:
        return cls("created_at[from]", moment.strftime(_DATE_FORMAT))

    @classmethod
    def created_at_to(cls, moment: datetime) -> SearchQueryOptions:
        return cls("created_at[to]", moment.strftime(_DATE_FORMAT))

    @classmethod
    def genres(cls, genres: list[str]) -> SearchQueryOptions:
        return cls("genres", ",".join(genres))

    @classmethod
    def types(cls, types: list[str]) -> SearchQueryOptions:
        return cls("types", ",".join(_checked("type", types, TRACK_TYPES)))


def search_parameters(
    base: dict[str, str],
    queries: list[SearchQueryOptions],
) -> dict[str, str]:
    """Return ``base`` extended with every query option, in order."""
    parameters = dict(base)
    for option in queries:
        key, value = option.query
        parameters[key] = value
    return parameters
