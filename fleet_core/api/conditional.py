"""
Last-Modified helper library for the core REST API

HTTP dates carry whole seconds only. The modification timestamp of a
record is therefore truncated before it's sent to the client or compared
with the client's `If-Modified-Since` header, otherwise the sub-second
part would make every conditional request look like a modification.
"""

import enum
import logging
import datetime
import email.utils
from typing import Optional, Tuple

from fastapi import Request, Response

from . import base


logger = logging.getLogger(__name__)


@enum.unique
class Freshness(enum.Enum):
    SERVE_FULL = enum.auto()
    SERVE_NOT_MODIFIED = enum.auto()


def truncate(timestamp: datetime.datetime) -> datetime.datetime:
    """
    Return the timestamp as timezone-aware UTC datetime without sub-second precision

    Naive datetimes are assumed to be UTC already.
    """

    if timestamp.tzinfo is None:
        timestamp = timestamp.replace(tzinfo=datetime.timezone.utc)
    return timestamp.astimezone(datetime.timezone.utc).replace(microsecond=0)


def format_http_date(timestamp: datetime.datetime) -> str:
    return email.utils.format_datetime(truncate(timestamp), usegmt=True)


def parse_http_date(value: str) -> Optional[datetime.datetime]:
    """
    Parse an HTTP date header value, returning ``None`` for unparseable values
    """

    try:
        parsed = email.utils.parsedate_to_datetime(value)
    except (TypeError, ValueError, IndexError):
        return None
    if parsed is None:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=datetime.timezone.utc)
    return parsed


def evaluate(
        last_modified: Optional[datetime.datetime],
        if_modified_since: Optional[str]
) -> Tuple[Freshness, Optional[str]]:
    """
    Decide whether the full representation has to be sent to the client

    :param last_modified: modification timestamp of the record, if it's tracked
    :param if_modified_since: raw value of the client's `If-Modified-Since` header
    :return: tuple of the decision and the value of the `Last-Modified` header
        (which is ``None`` if the record has no modification timestamp)
    """

    if last_modified is None:
        return Freshness.SERVE_FULL, None

    truncated = truncate(last_modified)
    header = format_http_date(truncated)
    if not if_modified_since:
        return Freshness.SERVE_FULL, header

    client_timestamp = parse_http_date(if_modified_since)
    if client_timestamp is None:
        logger.debug(f"Ignoring unparseable 'If-Modified-Since' header value {if_modified_since!r}")
        return Freshness.SERVE_FULL, header
    if truncated <= client_timestamp:
        return Freshness.SERVE_NOT_MODIFIED, header
    return Freshness.SERVE_FULL, header


class LastModified:
    """
    Helper class to handle the `Last-Modified` and `If-Modified-Since` headers of one request
    """

    request: Request

    def __init__(self, request: Request):
        self.request = request

        for field in ["If-None-Match", "If-Match", "If-Unmodified-Since", "If-Range"]:
            if request.headers.get(field):
                logger.warning(f"'{field}' header not supported.")
                logger.debug(f"Field value: {request.headers.get(field)!r}")

    def compare(self, response: Response, last_modified: Optional[datetime.datetime]) -> bool:
        """
        Compare the record's modification timestamp with the client's cached version

        The `Last-Modified` header will be added to the response if the
        record has a modification timestamp. This method raises an exception
        to interrupt further processing if the client's version is fresh.

        :param response: Response object of the handled request
        :param last_modified: modification timestamp of the record, if available
        :return: ``True`` if the full representation should be sent
        :raises NotModified: if the user agent already has the most recent version of a resource
        """

        freshness, header = evaluate(last_modified, self.request.headers.get("If-Modified-Since"))
        if header is not None:
            response.headers["Last-Modified"] = header
        if freshness == Freshness.SERVE_NOT_MODIFIED:
            raise base.NotModified(
                self.request.url.path,
                headers={"Last-Modified": header}
            )
        return True
