"""
Fleet core record repository

The repository is the only place where aircraft records are read from
or written to the database. Every failure of the underlying store is
rolled back and reported as ``RepositoryError``, so that callers don't
need to know anything about SQLAlchemy's exception hierarchy.
"""

import datetime
import logging
import contextlib
from typing import Any, Dict, Iterator, List, Mapping, Optional, Union

import sqlalchemy.exc
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from . import filters, models
from .err import InvalidRecord, MalformedIdentifier, RepositoryError
from ..misc.logger import enforce_logger


MAX_IDENTIFIER: int = 2**63 - 1
"""largest signed 64 bit integer, also the upper bound for offsets and limits of queries"""


class AircraftRepository:
    """
    Repository of aircraft records using a single database session
    """

    session: Session
    logger: logging.Logger

    def __init__(self, session: Session, logger: Optional[logging.Logger] = None):
        self.session = session
        self.logger = enforce_logger(logger)

    @staticmethod
    def parse_identifier(identifier: Union[str, int]) -> int:
        """
        Convert an opaque identifier into the primary key of a record

        :raises MalformedIdentifier: when the identifier can't address any record
        """

        if isinstance(identifier, int) and not isinstance(identifier, bool):
            key = identifier
        elif isinstance(identifier, str) and identifier.isascii() and identifier.isdigit():
            key = int(identifier)
        else:
            raise MalformedIdentifier(f"Invalid identifier {identifier!r}")
        if not 0 < key <= MAX_IDENTIFIER:
            raise MalformedIdentifier(f"Identifier {identifier!r} out of range")
        return key

    @contextlib.contextmanager
    def _guard(self, operation: str) -> Iterator[None]:
        try:
            yield
        except sqlalchemy.exc.SQLAlchemyError as exc:
            self.logger.warning(f"{operation} failed: {type(exc).__name__}: {exc}")
            self.session.rollback()
            raise RepositoryError(f"{operation} failed: {type(exc).__name__}") from exc

    @staticmethod
    def _touch(aircraft: models.Aircraft):
        now = models.utcnow()
        if aircraft.updated_at is not None and now <= aircraft.updated_at:
            now = aircraft.updated_at + datetime.timedelta(microseconds=1)
        aircraft.updated_at = now

    @staticmethod
    def _check_required(fields: Mapping[str, Any]):
        missing = [key for key in models.Aircraft.REQUIRED_FIELDS if not fields.get(key)]
        if missing:
            raise InvalidRecord(f"Missing or empty required fields: {', '.join(missing)}")

    def count(self, query_filter: filters.Filter) -> int:
        criteria = filters.to_criteria(models.Aircraft, query_filter)
        with self._guard("Counting aircraft"):
            return self.session.scalar(select(func.count()).select_from(models.Aircraft).where(*criteria))

    def find(self, query_filter: filters.Filter, skip: int = 0, limit: int = 0) -> List[models.Aircraft]:
        """
        Return the window of records matching the filter in insertion order

        :param query_filter: filter to be applied to the records
        :param skip: number of matching records to skip
        :param limit: maximum number of returned records (0 means unbounded)
        """

        if skip > MAX_IDENTIFIER:
            return []
        limit = min(limit, MAX_IDENTIFIER)

        criteria = filters.to_criteria(models.Aircraft, query_filter)
        statement = select(models.Aircraft).where(*criteria).order_by(models.Aircraft.id)
        if skip > 0:
            statement = statement.offset(skip)
        if limit > 0:
            statement = statement.limit(limit)
        with self._guard("Searching aircraft"):
            return list(self.session.scalars(statement))

    def find_by_id(self, identifier: Union[str, int]) -> Optional[models.Aircraft]:
        key = self.parse_identifier(identifier)
        with self._guard("Loading aircraft"):
            return self.session.get(models.Aircraft, key)

    def create(self, fields: Mapping[str, Any]) -> models.Aircraft:
        self._check_required(fields)
        values: Dict[str, Any] = {key: fields[key] for key in models.Aircraft.REQUIRED_FIELDS}
        for key, default in models.Aircraft.OPTIONAL_FIELDS.items():
            values[key] = fields.get(key) or default
        now = models.utcnow()
        aircraft = models.Aircraft(created_at=now, updated_at=now, **values)

        with self._guard("Creating aircraft"):
            self.session.add(aircraft)
            self.session.commit()
        self.logger.debug(f"Created {aircraft!r}")
        return aircraft

    def replace(self, identifier: Union[str, int], fields: Mapping[str, Any]) -> Optional[models.Aircraft]:
        """
        Replace all fields of an existing record, resetting omitted optional fields to their defaults

        :return: the updated record or ``None`` if it doesn't exist
        :raises InvalidRecord: when required fields are missing or empty
        """

        self._check_required(fields)
        aircraft = self.find_by_id(identifier)
        if aircraft is None:
            return None

        for key in models.Aircraft.REQUIRED_FIELDS:
            setattr(aircraft, key, fields[key])
        for key, default in models.Aircraft.OPTIONAL_FIELDS.items():
            setattr(aircraft, key, fields.get(key) or default)
        self._touch(aircraft)

        with self._guard("Replacing aircraft"):
            self.session.commit()
        self.logger.debug(f"Replaced {aircraft!r}")
        return aircraft

    def patch(self, identifier: Union[str, int], fields: Mapping[str, Any]) -> Optional[models.Aircraft]:
        """
        Change only the supplied fields of an existing record

        Emptying an optional field resets it to its default value.

        :return: the updated record or ``None`` if it doesn't exist
        :raises InvalidRecord: when no fields were given, a field is unknown or a required field would become empty
        """

        if not fields:
            raise InvalidRecord("No fields to update were given")
        changes = {}
        for key, value in fields.items():
            if key in models.Aircraft.OPTIONAL_FIELDS:
                changes[key] = value or models.Aircraft.OPTIONAL_FIELDS[key]
            elif key not in models.Aircraft.REQUIRED_FIELDS:
                raise InvalidRecord(f"Unknown field {key!r}")
            elif value is None or value == "":
                raise InvalidRecord(f"Field {key!r} must not be emptied")
            else:
                changes[key] = value

        aircraft = self.find_by_id(identifier)
        if aircraft is None:
            return None

        for key, value in changes.items():
            setattr(aircraft, key, value)
        self._touch(aircraft)

        with self._guard("Patching aircraft"):
            self.session.commit()
        self.logger.debug(f"Patched {aircraft!r} (fields: {', '.join(fields)})")
        return aircraft

    def delete(self, identifier: Union[str, int]) -> bool:
        aircraft = self.find_by_id(identifier)
        if aircraft is None:
            return False

        self.logger.debug(f"Deleting {aircraft!r}...")
        with self._guard("Deleting aircraft"):
            self.session.delete(aircraft)
            self.session.commit()
        return True
