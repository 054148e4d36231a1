"""
Pagination and link builder for collection responses

The query string of the incoming request is handled as an ordered list
of key-value pairs. Links are built by copying that list, applying a
few explicit set/delete operations and serializing it again, so that
any filter or custom parameter survives unchanged in every link.
"""

import math
import urllib.parse
from typing import Iterable, List, NamedTuple, Optional, Tuple

from .. import schemas


QueryItems = List[Tuple[str, str]]

PAGE_PARAMETER: str = "page"
LIMIT_PARAMETER: str = "limit"


class PageWindow(NamedTuple):
    """
    Window of the result set requested by the client

    A ``limit`` of zero disables windowing completely. The ``explicit``
    flag tells whether the client sent the ``limit`` query parameter,
    which enables the synthesis of ``previous`` and ``next`` links.
    """

    page: int
    limit: int
    explicit: bool

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit

    @classmethod
    def parse(
            cls,
            page: Optional[str],
            limit: Optional[str],
            default_limit: Optional[int] = None
    ) -> "PageWindow":
        """
        Create the page window from the raw query parameter values

        A missing, non-numeric or non-positive page resolves to the first page.
        A missing (or empty) limit uses the default limit, where ``None``
        means to return the whole collection on one implicit page.

        :param page: raw value of the ``page`` query parameter
        :param limit: raw value of the ``limit`` query parameter
        :param default_limit: page size used when no limit was given
        :return: new page window
        :raises ValueError: when the limit is not a non-negative integer
        """

        try:
            page_number = max(1, int(page)) if page else 1
        except ValueError:
            page_number = 1

        if not limit:
            return cls(page_number, default_limit or 0, False)

        try:
            size = int(limit)
        except ValueError as exc:
            raise ValueError(f"Query parameter 'limit' must be an integer, not {limit!r}") from exc
        if size < 0:
            raise ValueError(f"Query parameter 'limit' must not be negative, got {size}")
        return cls(page_number, size, True)


def count_pages(total_items: int, limit: int) -> int:
    """
    Return the number of pages, which is at least one even for empty collections
    """

    if limit <= 0:
        return 1
    return max(1, math.ceil(total_items / limit))


def set_parameter(items: Iterable[Tuple[str, str]], key: str, value: str) -> QueryItems:
    """
    Set the value of the first occurrence of the key in place, dropping any further ones

    The parameter is appended to the end if the key isn't present yet.
    """

    result = []
    found = False
    for k, v in items:
        if k != key:
            result.append((k, v))
        elif not found:
            result.append((k, value))
            found = True
    if not found:
        result.append((key, value))
    return result


def delete_parameters(items: Iterable[Tuple[str, str]], *keys: str) -> QueryItems:
    return [(k, v) for k, v in items if k not in keys]


def make_url(base_url: str, items: QueryItems) -> str:
    query = urllib.parse.urlencode(items)
    if not query:
        return base_url
    return f"{base_url}?{query}"


def make_page_link(
        base_url: str,
        query: Iterable[Tuple[str, str]],
        window: PageWindow,
        target_page: int
) -> schemas.PageLink:
    """
    Build the link to a given page of the collection

    Without explicit pagination, the collection consists of exactly one
    page, so the pagination parameters are stripped and the page is 1.
    """

    if not window.explicit:
        return schemas.PageLink(
            page=1,
            href=make_url(base_url, delete_parameters(query, PAGE_PARAMETER, LIMIT_PARAMETER))
        )

    items = set_parameter(query, PAGE_PARAMETER, str(target_page))
    items = set_parameter(items, LIMIT_PARAMETER, str(window.limit))
    return schemas.PageLink(page=target_page, href=make_url(base_url, items))


def make_self_url(base_url: str, query: Iterable[Tuple[str, str]], window: PageWindow) -> str:
    if not window.explicit:
        return make_url(base_url, list(query))
    items = set_parameter(query, PAGE_PARAMETER, str(window.page))
    items = set_parameter(items, LIMIT_PARAMETER, str(window.limit))
    return make_url(base_url, items)


def paginate(
        base_url: str,
        query: Iterable[Tuple[str, str]],
        window: PageWindow,
        total_items: int,
        current_items: int
) -> schemas.Pagination:
    """
    Create the pagination block of a collection response including its links

    A requested page beyond the last page is accepted as is: the links are
    built using the requested page and the real total number of pages.

    :param base_url: absolute collection URL without query string
    :param query: ordered key-value pairs of the original request's query string
    :param window: page window of the request
    :param total_items: number of all records matching the filter
    :param current_items: number of records actually returned for this window
    :return: pagination metadata with first, last, previous and next links
    """

    query = list(query)
    total_pages = count_pages(total_items, window.limit)

    previous_link = None
    if window.explicit and window.page > 1:
        previous_link = make_page_link(base_url, query, window, window.page - 1)
    next_link = None
    if window.explicit and window.page < total_pages:
        next_link = make_page_link(base_url, query, window, window.page + 1)

    return schemas.Pagination(
        current_page=window.page,
        current_items=current_items,
        total_pages=total_pages,
        total_items=total_items,
        links=schemas.PaginationLinks(
            first=make_page_link(base_url, query, window, 1),
            last=make_page_link(base_url, query, window, total_pages),
            previous=previous_link,
            next=next_link
        )
    )


def collection_links(base_url: str, query: Iterable[Tuple[str, str]], window: PageWindow) -> schemas.CollectionLinks:
    return schemas.CollectionLinks(
        self_=schemas.Link(href=make_self_url(base_url, query, window)),
        collection=schemas.Link(href=base_url)
    )
