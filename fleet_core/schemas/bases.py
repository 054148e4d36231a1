"""
Fleet core schemas for the aircraft records

The wire shape of a record always carries `_links`, while the
persisted shape (see ``fleet_core.persistence.models``) never does.
"""

import datetime
from typing import List, Optional

import pydantic

from .links import ItemLinks, Link, Pagination


required_string = pydantic.constr(min_length=1, max_length=255)
optional_string = Optional[pydantic.constr(max_length=1024)]


class AircraftSummary(pydantic.BaseModel):
    model_config = pydantic.ConfigDict(populate_by_name=True)

    id: str
    model: str
    registration: str
    airline: str
    status: str
    links: ItemLinks = pydantic.Field(alias="_links")


class Aircraft(pydantic.BaseModel):
    model_config = pydantic.ConfigDict(populate_by_name=True)

    id: str
    model: str
    registration: str
    airline: str
    status: str
    homebase: str
    description: str
    created_at: Optional[datetime.datetime] = pydantic.Field(default=None, alias="createdAt")
    updated_at: Optional[datetime.datetime] = pydantic.Field(default=None, alias="updatedAt")
    links: ItemLinks = pydantic.Field(alias="_links")


class AircraftCreation(pydantic.BaseModel):
    model: required_string
    registration: required_string
    airline: required_string
    status: required_string
    homebase: optional_string = None
    description: optional_string = None


class AircraftUpdate(AircraftCreation):
    pass


class AircraftPatch(pydantic.BaseModel):
    model: Optional[required_string] = None
    registration: Optional[required_string] = None
    airline: Optional[required_string] = None
    status: Optional[required_string] = None
    homebase: optional_string = None
    description: optional_string = None


class CollectionLinks(pydantic.BaseModel):
    model_config = pydantic.ConfigDict(populate_by_name=True)

    self_: Link = pydantic.Field(alias="self")
    collection: Link


class AircraftCollection(pydantic.BaseModel):
    model_config = pydantic.ConfigDict(populate_by_name=True)

    items: List[AircraftSummary]
    links: CollectionLinks = pydantic.Field(alias="_links")
    pagination: Pagination


class Welcome(pydantic.BaseModel):
    message: str
