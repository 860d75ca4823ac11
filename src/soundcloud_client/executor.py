"""
Request descriptors, the HTTP transport, and the Request Executor.

Design notes:
- A :class:`Request` is the immutable description of one HTTP call: url,
  method, parameters and the parse strategy for its payload.  It is consumed
  once by :meth:`RequestExecutor.execute`.
- Parameter placement is method-specific: GET and PUT append the parameters
  to the URL as a query string, POST sends them as a form-encoded body.
- The executor never mutates session state; credential-expired responses are
  only classified here (``Failure(auth_expired)``) and resolved by the auth
  retry coordinator.
"""

from __future__ import annotations

from concurrent.futures import Executor, Future
from dataclasses import dataclass, field
from typing import Any, Callable
from urllib.parse import urlencode, urlsplit, urlunsplit

import requests

from .config import AUTH_EXPIRED_MESSAGES, AUTH_EXPIRED_STATUSES, REQUEST_TIMEOUT_SECONDS
from .logger import get_logger
from .parser import ParseFunction, decode_json
from .result import APIError, Failure, Result, decode_failure

log = get_logger(__name__)

GET = "GET"
POST = "POST"
PUT = "PUT"
METHODS: frozenset[str] = frozenset({GET, POST, PUT})


# ---------------------------------------------------------------------------
# Descriptor and wire types
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Request:
    """Immutable specification of one HTTP call, before execution."""

    url: str
    method: str
    parameters: dict[str, str] | None
    parse: ParseFunction

    def __post_init__(self) -> None:
        if self.method not in METHODS:
            raise ValueError(
                f"Unsupported HTTP method '{self.method}'. "
                f"Expected one of: {', '.join(sorted(METHODS))}."
            )


@dataclass(frozen=True)
class RawResponse:
    """Status metadata and undecoded body returned by the transport."""

    status_code: int
    body: bytes = b""
    headers: dict[str, str] = field(default_factory=dict)

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code < 300


class TransportError(Exception):
    """The transport failed to produce any HTTP response."""


# ---------------------------------------------------------------------------
# Transport
# ---------------------------------------------------------------------------

class RequestsTransport:
    """
    HTTP transport backed by a shared :class:`requests.Session`.

    Timeouts are a property of the transport, not of the executor.
    """

    def __init__(
        self,
        session: requests.Session | None = None,
        timeout: float = REQUEST_TIMEOUT_SECONDS,
    ) -> None:
        self._session = session or requests.Session()
        self._session.headers["Accept"] = "application/json"
        self.timeout = timeout

    def send(
        self,
        method: str,
        url: str,
        data: dict[str, str] | None = None,
    ) -> RawResponse:
        """
        Send one HTTP request.

        Args:
            method: ``GET``, ``POST`` or ``PUT``.
            url: Full URL, query string included.
            data: Form fields for the request body, or ``None``.

        Returns:
            :class:`RawResponse` for any HTTP status, 4xx/5xx included.

        Raises:
            TransportError: On connection failure, timeout, or any other
                condition where no response was received.
        """
        try:
            response = self._session.request(method, url, data=data, timeout=self.timeout)
        except requests.RequestException as exc:
            raise TransportError(str(exc)) from exc
        return RawResponse(
            status_code=response.status_code,
            body=response.content,
            headers=dict(response.headers),
        )

    def close(self) -> None:
        self._session.close()


# ---------------------------------------------------------------------------
# Request construction
# ---------------------------------------------------------------------------

def append_query_string(url: str, parameters: dict[str, str] | None) -> str:
    """
    Append ``parameters`` to ``url`` as a query string.

    Keeps any query already present on the URL (next-page locators carry
    their own cursor parameters).

    Args:
        url: Base URL.
        parameters: Parameters to encode; ``None`` or empty leaves the URL
            unchanged.

    Returns:
        URL with the encoded parameters appended.
    """
    if not parameters:
        return url
    scheme, netloc, path, query, fragment = urlsplit(url)
    encoded = urlencode(parameters)
    query = f"{query}&{encoded}" if query else encoded
    return urlunsplit((scheme, netloc, path, query, fragment))


def build_http_call(request: Request) -> tuple[str, dict[str, str] | None]:
    """
    Place the request parameters according to its method.

    Args:
        request: Descriptor to translate.

    Returns:
        Tuple of ``(url, form_body)``.  ``form_body`` is ``None`` for GET and
        PUT, whose parameters travel in the query string.
    """
    if request.method == POST:
        return request.url, dict(request.parameters or {})
    return append_query_string(request.url, request.parameters), None


def redact_url(url: str) -> str:
    """Strip the query string (which may hold ``oauth_token``) for logging."""
    scheme, netloc, path, _, _ = urlsplit(url)
    return urlunsplit((scheme, netloc, path, "", ""))


def is_auth_expired(status_code: int, payload: Any) -> bool:
    """
    Decide whether a response signals an expired or rejected credential.

    Checks the HTTP status first, then the API's error body shapes::

        {"errors": [{"error_message": "401 - Unauthorized"}]}
        {"error": "invalid_token"}

    Args:
        status_code: HTTP status of the response.
        payload: Decoded JSON body, or ``None``.

    Returns:
        ``True`` if the credential should be refreshed.
    """
    if status_code in AUTH_EXPIRED_STATUSES:
        return True
    if not isinstance(payload, dict):
        return False

    messages: list[str] = []
    if isinstance(payload.get("error"), str):
        messages.append(payload["error"])
    errors = payload.get("errors")
    for entry in errors if isinstance(errors, list) else []:
        if isinstance(entry, dict) and isinstance(entry.get("error_message"), str):
            messages.append(entry["error_message"])

    return any(
        marker in message.lower()
        for message in messages
        for marker in AUTH_EXPIRED_MESSAGES
    )


# ---------------------------------------------------------------------------
# Execution
# ---------------------------------------------------------------------------

Completion = Callable[[Any], None]


class RequestExecutor:
    """
    Sends descriptors through the transport and parses their payloads.

    :meth:`execute` is the blocking core used inside a background task;
    :meth:`submit` schedules any unit of work on the worker pool and delivers
    its outcome to a completion callback exactly once.
    """

    def __init__(self, transport: Any, pool: Executor) -> None:
        self.transport = transport
        self.pool = pool

    def execute(self, request: Request) -> tuple[RawResponse | None, Result]:
        """
        Execute a single request and parse its payload.

        Args:
            request: Descriptor to send.

        Returns:
            Tuple of ``(raw_response, result)``.  ``raw_response`` is ``None``
            when the transport produced no response.  ``result`` is one of:

            - ``Failure(network_error)``: no response at all
            - ``Failure(auth_expired)``: credential rejected
            - ``Failure(http_error)``: any other non-2xx status
            - ``Failure(decode_error)``: payload did not match the shape
            - whatever ``request.parse`` returns otherwise
        """
        url, form_body = build_http_call(request)
        log.debug("%s %s", request.method, redact_url(url))

        try:
            response = self.transport.send(request.method, url, form_body)
        except TransportError as exc:
            log.warning("No response for %s %s: %s", request.method, redact_url(url), exc)
            return None, Failure(error=APIError.NETWORK_ERROR, context=str(exc))

        decoded = decode_json(response.body)
        payload = decoded.value if decoded.ok else None

        if is_auth_expired(response.status_code, payload):
            log.info("Credential rejected (HTTP %d) for %s", response.status_code, redact_url(url))
            return response, Failure(
                error=APIError.AUTH_EXPIRED,
                context={"status": response.status_code},
            )

        if not response.is_success:
            return response, Failure(
                error=APIError.HTTP_ERROR,
                context={"status": response.status_code, "url": redact_url(url)},
            )

        if not decoded.ok:
            return response, decoded

        try:
            return response, request.parse(payload)
        except (KeyError, TypeError, ValueError) as exc:
            return response, decode_failure(f"Parse strategy raised: {exc!r}")

    def submit(self, work: Callable[[], Any], completion: Completion) -> Future:
        """
        Run ``work`` on the worker pool and pass its return value to
        ``completion``.

        The completion runs on the worker thread.  An exception raised by
        ``work`` or by ``completion`` is logged and re-raised through the
        returned future.

        Args:
            work: Blocking callable producing the operation's outcome.
            completion: Callback invoked once with that outcome.

        Returns:
            Future resolving to ``None`` after ``completion`` has returned.
        """
        def run() -> None:
            try:
                completion(work())
            except Exception:
                log.exception("Background operation failed")
                raise

        return self.pool.submit(run)
