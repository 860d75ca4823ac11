"""
Parse strategies: pure functions turning a decoded JSON payload into a Result.

No I/O occurs here; every function is a pure transformation so that the
strategies can be stored on descriptors and paginated responses and unit
tested on their own.
"""

from __future__ import annotations

import json
from typing import Any, Callable

from .result import Result, Success, decode_failure

Decoder = Callable[[Any], Any]
ParseFunction = Callable[[Any], Result]


def decode_json(body: bytes | str | None) -> Result[Any]:
    """
    Decode a raw response body into a JSON value.

    An empty body decodes to ``None`` so that endpoints answering with no
    content still reach their parse strategy.

    Args:
        body: Raw bytes or text from the transport.

    Returns:
        ``Success(value)``, or ``Failure(decode_error)`` when the body is not
        valid JSON or nests deeper than the decoder can follow.
    """
    if body is None or len(body) == 0:
        return Success(None)
    try:
        return Success(json.loads(body))
    except (json.JSONDecodeError, UnicodeDecodeError, RecursionError) as exc:
        return decode_failure(f"Invalid JSON body: {exc}")


def parse_object(decoder: Decoder) -> ParseFunction:
    """
    Build a strategy decoding a single object.

    Args:
        decoder: Domain decoder returning an object or ``None``.

    Returns:
        Function ``payload -> Result[T]``.
    """
    def parse(payload: Any) -> Result:
        value = decoder(payload)
        if value is None:
            return decode_failure("Payload does not match the expected object")
        return Success(value)

    return parse


def parse_list(decoder: Decoder) -> ParseFunction:
    """
    Build a strategy decoding a JSON array, all-or-nothing.

    The decoder is applied independently to each item; if any single item
    fails the whole list fails.  A partial list is never returned.

    Args:
        decoder: Domain decoder applied to every element.

    Returns:
        Function ``payload -> Result[list[T]]``.
    """
    def parse(payload: Any) -> Result:
        if not isinstance(payload, list):
            return decode_failure("Payload is not a list")
        items = []
        for position, raw_item in enumerate(payload):
            item = decoder(raw_item)
            if item is None:
                return decode_failure(f"Item at index {position} could not be decoded")
            items.append(item)
        return Success(items)

    return parse


def split_envelope(payload: Any) -> tuple[Any, str | None]:
    """
    Split a collection envelope into its item list and next-page locator.

    Expected payload::

        {"collection": [...], "next_href": "https://..." | null}

    A missing, ``null`` or empty ``next_href`` means there are no more pages.

    Args:
        payload: Decoded JSON body of a collection endpoint.

    Returns:
        Tuple of ``(raw_items, next_page_locator)``.  ``raw_items`` is
        ``None`` when the payload is not an envelope at all.
    """
    if not isinstance(payload, dict):
        return None, None
    next_href = payload.get("next_href")
    if not isinstance(next_href, str) or not next_href:
        next_href = None
    return payload.get("collection"), next_href


def parse_status_confirmation(payload: Any) -> Result[bool]:
    """
    Interpret a ``{"status": "200 - OK"}`` style confirmation body.

    The API answers ``"200 - OK"`` for an existing favorite and
    ``"201 - Created"`` for a new one; both count as success.

    Args:
        payload: Decoded JSON body.

    Returns:
        ``Success(True)`` or ``Failure(decode_error)``.
    """
    status = payload.get("status") if isinstance(payload, dict) else None
    if isinstance(status, str) and (" OK" in status or " Created" in status):
        return Success(True)
    return decode_failure(f"Unexpected status: {status!r}")
