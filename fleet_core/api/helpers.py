"""
Generic helper library for the core REST API
"""

import logging
import contextlib
from typing import Iterator, Optional, Union

from .base import BadRequest, InternalServerException, NotFound
from .dependency import LocalRequestData
from ..misc.logger import enforce_logger
from ..persistence import models
from ..persistence.err import InvalidRecord, MalformedIdentifier, RepositoryError


@contextlib.contextmanager
def repository_errors(
        resource: str,
        writing: bool,
        logger: Optional[logging.Logger] = None
) -> Iterator[None]:
    """
    Translate exceptions of the record repository into API exceptions

    Failures of the store are treated as server errors on read paths, but
    as bad requests on write paths, because they are usually caused by
    violated constraints there. Malformed identifiers can't address any
    record, so they are reported the same way as unknown records.

    :param resource: description of the affected resource used in error messages
    :param writing: switch whether the wrapped operation modifies records
    :param logger: optional logger that should be used for error messages
    :raises BadRequest: for invalid records and failed write operations
    :raises NotFound: for malformed identifiers
    :raises InternalServerException: for failed read operations
    """

    try:
        yield
    except InvalidRecord as exc:
        raise BadRequest("Fill in all required fields with non-empty values.", str(exc)) from exc
    except MalformedIdentifier as exc:
        raise NotFound(resource, str(exc)) from exc
    except RepositoryError as exc:
        enforce_logger(logger).error(f"Repository failure for {resource}: {exc}")
        if writing:
            raise BadRequest("The record couldn't be stored. Validation failed.", str(exc)) from exc
        raise InternalServerException("Server error: the records couldn't be loaded.", str(exc)) from exc


async def return_one(
        identifier: Union[str, int],
        local: LocalRequestData,
        logger: Optional[logging.Logger] = None
) -> models.Aircraft:
    """
    Return the aircraft that's identified by its opaque identifier

    :param identifier: identifier of the record as given in the request path
    :param local: contextual local data
    :param logger: optional logger that should be used for error messages
    :return: resulting record as SQLAlchemy model
    :raises NotFound: when the specified identifier returned no result
    """

    resource = f"Aircraft with ID {identifier!r}"
    with repository_errors(resource, False, logger):
        aircraft = local.repository.find_by_id(identifier)
    if aircraft is None:
        raise NotFound(resource)
    return aircraft
