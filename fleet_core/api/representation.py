"""
Mapping of persisted aircraft records to their wire representation
"""

from .. import schemas
from ..persistence import models


def item_links(aircraft: models.Aircraft, base_url: str) -> schemas.ItemLinks:
    return schemas.ItemLinks(
        self_=schemas.Link(href=f"{base_url}/{aircraft.id}"),
        collection=schemas.Link(href=base_url)
    )


def represent_aircraft(aircraft: models.Aircraft, base_url: str) -> schemas.Aircraft:
    """
    Return the full representation of a record including its `_links`

    :param aircraft: persisted record (which will not be modified)
    :param base_url: absolute URL of the collection without query string
    """

    return schemas.Aircraft(
        id=str(aircraft.id),
        model=aircraft.model,
        registration=aircraft.registration,
        airline=aircraft.airline,
        status=aircraft.status,
        homebase=aircraft.homebase,
        description=aircraft.description,
        created_at=models.as_utc(aircraft.created_at),
        updated_at=aircraft.last_modified,
        links=item_links(aircraft, base_url)
    )


def summarize_aircraft(aircraft: models.Aircraft, base_url: str) -> schemas.AircraftSummary:
    """
    Return the short representation of a record as used in collections
    """

    return schemas.AircraftSummary(
        id=str(aircraft.id),
        model=aircraft.model,
        registration=aircraft.registration,
        airline=aircraft.airline,
        status=aircraft.status,
        links=item_links(aircraft, base_url)
    )
