"""
Fleet core router module for the aircraft collection

The router has no prefix on its own, since the collection path
is configurable. It's mounted by ``create_app`` below that path.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Response

from .. import conditional, helpers, pagination, representation
from ..base import BadRequest, NotFound
from ..dependency import LocalRequestData
from ... import schemas
from ...persistence import filters


logger = logging.getLogger(__name__)

router = APIRouter(
    tags=["Aircraft"]
)

COLLECTION_METHODS = "GET, POST, OPTIONS"
DETAIL_METHODS = "GET, PUT, PATCH, DELETE, OPTIONS"


@router.get(
    "",
    response_model=schemas.AircraftCollection,
    responses={500: {"model": schemas.APIError}}
)
async def get_all_aircraft(
        status: Optional[str] = None,
        airline: Optional[str] = None,
        page: Optional[str] = None,
        limit: Optional[str] = None,
        local: LocalRequestData = Depends(LocalRequestData)
):
    """
    Return a page of the aircraft collection matching the optional filters.

    The `status` filter matches exactly, while the `airline` filter
    matches any airline containing the value, ignoring the case.
    Without `limit`, the whole collection is returned on one page
    (unless a default page size has been configured). Any other query
    parameter is kept in all links of the response.

    A 400 error will be returned if `limit` is not a non-negative integer.
    """

    try:
        window = pagination.PageWindow.parse(page, limit, local.config.general.default_page_limit)
    except ValueError as exc:
        raise BadRequest("Invalid pagination parameters.", str(exc)) from exc

    query_filter = filters.normalize_filter({"status": status, "airline": airline})
    with helpers.repository_errors("aircraft collection", False, logger):
        total_items = local.repository.count(query_filter)
        records = local.repository.find(query_filter, window.skip, window.limit)

    base_url = local.base_url
    query = local.request.query_params.multi_items()
    return schemas.AircraftCollection(
        items=[representation.summarize_aircraft(record, base_url) for record in records],
        links=pagination.collection_links(base_url, query, window),
        pagination=pagination.paginate(base_url, query, window, total_items, len(records))
    )


@router.post(
    "",
    status_code=201,
    response_model=schemas.Aircraft
)
async def create_new_aircraft(
        aircraft: schemas.AircraftCreation,
        local: LocalRequestData = Depends(LocalRequestData)
):
    """
    Create a new aircraft.

    A 400 error will be returned if any required field is missing or empty.
    """

    with helpers.repository_errors("new aircraft", True, logger):
        record = local.repository.create(aircraft.model_dump(exclude_none=True))
    logger.info(f"Created new aircraft {record.id} ({record.registration!r})")
    return representation.represent_aircraft(record, local.base_url)


@router.options("", status_code=204, response_class=Response)
async def get_collection_options():
    """
    Return the allowed methods of the collection.
    """

    return Response(
        status_code=204,
        headers={"Allow": COLLECTION_METHODS, "Access-Control-Allow-Methods": COLLECTION_METHODS}
    )


@router.get(
    "/{aircraft_id}",
    response_model=schemas.Aircraft,
    responses={304: {"description": "Not Modified"}, 404: {"model": schemas.APIError}}
)
async def get_aircraft_by_id(
        aircraft_id: str,
        local: LocalRequestData = Depends(LocalRequestData)
):
    """
    Return the aircraft of a specific ID.

    The response carries the `Last-Modified` header. If the request's
    `If-Modified-Since` header is not older than that timestamp, a 304
    response with an empty body will be returned instead.

    A 404 error will be returned in case the ID is unknown or invalid.
    """

    record = await helpers.return_one(aircraft_id, local, logger)
    conditional.LastModified(local.request).compare(local.response, record.last_modified)
    return representation.represent_aircraft(record, local.base_url)


@router.put(
    "/{aircraft_id}",
    response_model=schemas.Aircraft,
    responses={404: {"model": schemas.APIError}}
)
async def update_existing_aircraft(
        aircraft_id: str,
        aircraft: schemas.AircraftUpdate,
        local: LocalRequestData = Depends(LocalRequestData)
):
    """
    Replace all fields of an existing aircraft.

    Omitted optional fields are reset to their defaults.

    A 400 error will be returned if any required field is missing or empty.
    A 404 error will be returned in case the ID is unknown or invalid.
    """

    resource = f"Aircraft with ID {aircraft_id!r}"
    with helpers.repository_errors(resource, True, logger):
        record = local.repository.replace(aircraft_id, aircraft.model_dump(exclude_none=True))
    if record is None:
        raise NotFound(resource)
    return representation.represent_aircraft(record, local.base_url)


@router.patch(
    "/{aircraft_id}",
    response_model=schemas.Aircraft,
    responses={404: {"model": schemas.APIError}}
)
async def patch_existing_aircraft(
        aircraft_id: str,
        aircraft: schemas.AircraftPatch,
        local: LocalRequestData = Depends(LocalRequestData)
):
    """
    Change only the given fields of an existing aircraft.

    A 400 error will be returned if no field is given or any given field is empty.
    A 404 error will be returned in case the ID is unknown or invalid.
    """

    changes = aircraft.model_dump(exclude_unset=True)
    if not changes:
        raise BadRequest("Give at least one field to update.", "Empty patch")

    resource = f"Aircraft with ID {aircraft_id!r}"
    with helpers.repository_errors(resource, True, logger):
        record = local.repository.patch(aircraft_id, changes)
    if record is None:
        raise NotFound(resource)
    return representation.represent_aircraft(record, local.base_url)


@router.delete(
    "/{aircraft_id}",
    status_code=204,
    response_class=Response,
    responses={404: {"model": schemas.APIError}}
)
async def delete_existing_aircraft(
        aircraft_id: str,
        local: LocalRequestData = Depends(LocalRequestData)
):
    """
    Delete an existing aircraft.

    A 404 error will be returned in case the ID is unknown or invalid.
    """

    resource = f"Aircraft with ID {aircraft_id!r}"
    with helpers.repository_errors(resource, True, logger):
        deleted = local.repository.delete(aircraft_id)
    if not deleted:
        raise NotFound(resource)
    logger.info(f"Deleted aircraft {aircraft_id}")
    return Response(status_code=204)


@router.options("/{aircraft_id}", status_code=204, response_class=Response)
async def get_detail_options(aircraft_id: str):
    """
    Return the allowed methods of a single aircraft.
    """

    return Response(
        status_code=204,
        headers={"Allow": DETAIL_METHODS, "Access-Control-Allow-Methods": DETAIL_METHODS}
    )
