"""
Fleet core API dependency library
"""

import logging
from typing import Generator, Optional

import sqlalchemy.exc
from fastapi import Depends, Request, Response
from sqlalchemy.orm import Session

from ..persistence import database
from ..persistence.repository import AircraftRepository
from ..settings import Settings


def get_session() -> Generator[Session, None, bool]:
    """
    Return a generator to handle database sessions gracefully
    """

    logger = logging.getLogger(__name__)
    session = database.get_new_session()

    try:
        yield session
        session.flush()
    except sqlalchemy.exc.DBAPIError as exc:
        details = (exc.statement or "").replace("\n", "")
        logger.exception(f"{type(exc).__name__}: {exc} @ {details!r}")
        session.rollback()
        raise
    except sqlalchemy.exc.SQLAlchemyError as exc:
        logger.exception(f"{type(exc).__name__}: {str(exc)}")
        session.rollback()
        raise
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
    return True


class LocalRequestData:
    """
    Collection of core dependencies used by all path operations

    This class stores references to various important objects that
    will almost certainly be used by request handlers (path operations).
    Note that any dependency added here will be added to the OpenAPI
    definition, if it refers to a Query, Header, Path or Cookie.
    """

    def __init__(
            self,
            request: Request,
            response: Response,
            session: Session = Depends(get_session)
    ):
        self.request = request
        self.response = response
        self.headers = request.headers
        self.session = session

        self._config: Optional[Settings] = getattr(request.app.state, "settings", None)
        self._repository: Optional[AircraftRepository] = None

    @property
    def config(self) -> Settings:
        if self._config is None:
            self._config = Settings()
        return self._config

    @property
    def repository(self) -> AircraftRepository:
        if self._repository is None:
            self._repository = AircraftRepository(self.session, logging.getLogger("fleet_core.repository"))
        return self._repository

    @property
    def base_url(self) -> str:
        """
        Absolute URL of the collection, derived from the configured public URL or the request itself
        """

        root = self.config.server.public_base_url
        if root is None:
            root = self.request.base_url
        return f"{str(root).rstrip('/')}/{self.config.general.collection_path}"
