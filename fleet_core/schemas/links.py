"""
Fleet core schemas for hypermedia links and pagination metadata
"""

from typing import Optional

import pydantic


class Link(pydantic.BaseModel):
    href: str


class PageLink(pydantic.BaseModel):
    page: pydantic.PositiveInt
    href: str


class ItemLinks(pydantic.BaseModel):
    model_config = pydantic.ConfigDict(populate_by_name=True)

    self_: Link = pydantic.Field(alias="self")
    collection: Link


class PaginationLinks(pydantic.BaseModel):
    """
    Navigation links of one page of a collection

    The `previous` and `next` links are only present if the
    client explicitly requested pagination using `limit`.
    """

    first: PageLink
    last: PageLink
    previous: Optional[PageLink] = None
    next: Optional[PageLink] = None


class Pagination(pydantic.BaseModel):
    model_config = pydantic.ConfigDict(populate_by_name=True)

    current_page: pydantic.PositiveInt = pydantic.Field(alias="currentPage")
    current_items: pydantic.NonNegativeInt = pydantic.Field(alias="currentItems")
    total_pages: pydantic.PositiveInt = pydantic.Field(alias="totalPages")
    total_items: pydantic.NonNegativeInt = pydantic.Field(alias="totalItems")
    links: PaginationLinks = pydantic.Field(alias="_links")
