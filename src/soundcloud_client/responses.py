"""
Response wrappers delivered to completion callbacks.

A :class:`SimpleAPIResponse` is terminal.  A :class:`PaginatedAPIResponse` is
one immutable snapshot of a cursor-paginated collection; advancing it builds a
*new* snapshot from the stored next-page locator and page parse strategy,
leaving the current one untouched.
"""

from __future__ import annotations

from concurrent.futures import Future
from dataclasses import dataclass, field
from typing import Any, Callable, Generic, Iterator, TypeVar

from .executor import GET, Request, RequestExecutor
from .logger import get_logger
from .parser import ParseFunction, split_envelope
from .result import APIError, Failure, Result, Success

log = get_logger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class SimpleAPIResponse(Generic[T]):
    """Single result, delivered to the caller once."""

    result: Result[T]


@dataclass(frozen=True)
class PaginatedAPIResponse(Generic[T]):
    """
    Current page of a collection plus what is needed to fetch the next one.

    Attributes:
        page: ``Result[list[T]]`` for this page.  Decoding is all-or-nothing.
        next_page_locator: URL of the next page, or ``None`` on the last page.
        parse: Page parse strategy (``payload -> Result[list[T]]``), reused
            verbatim for every following page.
        executor: Request executor used by :meth:`advance`.
    """

    page: Result[list[T]]
    next_page_locator: str | None
    parse: ParseFunction = field(repr=False, compare=False)
    executor: RequestExecutor = field(repr=False, compare=False)

    @property
    def has_more_pages(self) -> bool:
        return self.next_page_locator is not None

    def next_page_request(self) -> Request:
        """
        Build the descriptor for the next page.

        Raises:
            ValueError: If this is the last page.
        """
        if self.next_page_locator is None:
            raise ValueError("No next page locator on this response.")
        return collection_request(self.next_page_locator, None, self.parse, self.executor)

    def fetch_next_page(self) -> PaginatedAPIResponse[T]:
        """
        Blocking form of :meth:`advance`.

        Returns:
            A new snapshot.  On the last page its ``page`` is
            ``Failure(no_more_pages)`` and no request is issued.
        """
        if self.next_page_locator is None:
            return PaginatedAPIResponse(
                page=Failure(error=APIError.NO_MORE_PAGES),
                next_page_locator=None,
                parse=self.parse,
                executor=self.executor,
            )
        _, result = self.executor.execute(self.next_page_request())
        return unwrap_page(result, self.parse, self.executor)

    def advance(
        self,
        completion: Callable[[PaginatedAPIResponse[T]], None],
    ) -> Future:
        """
        Fetch the next page in the background.

        ``completion`` receives the new snapshot exactly once.  Advancing the
        same snapshot concurrently is not serialized; callers request pages in
        the order their locators are discovered.

        Returns:
            Future resolving after ``completion`` has run.
        """
        return self.executor.submit(self.fetch_next_page, completion)

    def pages(self) -> Iterator[PaginatedAPIResponse[T]]:
        """
        Yield this snapshot and every following one, blocking on each fetch.

        Stops after the last page, or after the first page whose result is a
        failure.
        """
        current: PaginatedAPIResponse[T] = self
        yield current
        while current.page.ok and current.has_more_pages:
            current = current.fetch_next_page()
            yield current


# ---------------------------------------------------------------------------
# Collection descriptors
# ---------------------------------------------------------------------------

def collection_request(
    url: str,
    parameters: dict[str, str] | None,
    parse: ParseFunction,
    executor: RequestExecutor,
) -> Request:
    """
    Build a GET descriptor whose payload is a collection envelope.

    The descriptor's parse strategy splits the envelope and applies ``parse``
    to the item list, producing a :class:`PaginatedAPIResponse` that carries
    ``parse`` forward for the next page.

    Args:
        url: First-page URL, or a next-page locator.
        parameters: Query parameters (``None`` for locators, which already
            carry their cursor).
        parse: Page parse strategy, typically ``parse_list(decoder)``.
        executor: Executor stored on the produced snapshots.
    """
    def parse_envelope(payload: Any) -> Result[PaginatedAPIResponse]:
        raw_items, next_href = split_envelope(payload)
        return Success(PaginatedAPIResponse(
            page=parse(raw_items),
            next_page_locator=next_href,
            parse=parse,
            executor=executor,
        ))

    return Request(url=url, method=GET, parameters=parameters, parse=parse_envelope)


def unwrap_page(
    result: Result[PaginatedAPIResponse],
    parse: ParseFunction,
    executor: RequestExecutor,
) -> PaginatedAPIResponse:
    """
    Turn an executed collection result into a snapshot.

    A request that failed before its envelope could be parsed (network,
    HTTP or credential failure) becomes a terminal snapshot carrying that
    failure as its page.
    """
    if result.ok:
        return result.value
    log.debug("Collection request failed: %s", result.error)
    return PaginatedAPIResponse(
        page=result,
        next_page_locator=None,
        parse=parse,
        executor=executor,
    )
