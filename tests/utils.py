"""
Helper functions to make writing unit tests for the fleet core easier
"""

import os
import sys
import random
import string
import secrets
import datetime
import unittest
from typing import Iterable, List, Mapping, Optional, Type, Union

import httpx
import pydantic
import sqlalchemy
import sqlalchemy.orm
from fastapi.testclient import TestClient
from sqlalchemy.engine import Engine as _Engine

from fleet_core import settings as _settings
from fleet_core.api.api import create_app
from fleet_core.persistence import database, models

from . import conf


class BaseTest(unittest.TestCase):
    """
    Base class giving every test its own config file and sqlite database file

    Subclasses overwriting ``setUp`` or ``tearDown`` must call the inherited
    method first in ``setUp`` and last in ``tearDown``.
    """

    config_file: Optional[str] = None
    database_url: Optional[str] = None
    _database_file: Optional[str] = None
    _previous_config_paths: Optional[List[str]] = None

    def setUp(self) -> None:
        self.config_file = f"config_{os.getpid()}_{secrets.token_hex(8)}.json"
        self._previous_config_paths = _settings.CONFIG_PATHS
        _settings.CONFIG_PATHS = [self.config_file]

        if conf.DATABASE_URL is not None:
            self.database_url = conf.DATABASE_URL
            return

        self._database_file = conf.DATABASE_DEFAULT_FILE_FORMAT.format(
            os.getpid(),
            "".join([random.choice(string.ascii_lowercase) for _ in range(6)])
        )

        try:
            open(self._database_file, "wb").close()
            os.remove(self._database_file)
            self.database_url = conf.DATABASE_URL_FORMAT.format(self._database_file)

        except OSError as exc:
            self.database_url = conf.DATABASE_FALLBACK_URL
            self._database_file = None
            print(
                f"{exc}: using an in-memory database instead",
                file=sys.stderr
            )

    def tearDown(self) -> None:
        if self.database_url != conf.DATABASE_FALLBACK_URL and self._database_file:
            if os.path.exists(self._database_file):
                os.remove(self._database_file)

        if self.config_file and os.path.exists(self.config_file):
            os.remove(self.config_file)
        _settings.CONFIG_PATHS = self._previous_config_paths

    def write_config(self, **general) -> _settings.config.CoreConfig:
        config = _settings.get_default_core_config(self.database_url)
        config.database.debug_sql = conf.SQLALCHEMY_ECHOING
        for key, value in general.items():
            setattr(config.general, key, value)
        with open(self.config_file, "w") as f:
            f.write(config.model_dump_json())
        return config

    @staticmethod
    def get_sample_fleet() -> List[dict]:
        return [
            {"model": "A380", "registration": "A6-EDA", "airline": "Emirates", "status": "Active"},
            {"model": "A320neo", "registration": "PH-NXA", "airline": "KLM Royal Dutch Airlines", "status": "Active"},
            {"model": "A330", "registration": "PH-AOA", "airline": "KLM", "status": "Maintenance"},
            {"model": "A350", "registration": "D-AIXA", "airline": "Lufthansa", "status": "active"},
            {"model": "A321", "registration": "G-EUXC", "airline": "British Airways", "status": "Retired",
             "homebase": "London Heathrow", "description": "Retired after 20 years of service."},
            {"model": "A319", "registration": "PH-KLM", "airline": "Transavia", "status": "Active"}
        ]


class BasePersistenceTests(BaseTest):
    engine: _Engine
    session: sqlalchemy.orm.Session

    def setUp(self) -> None:
        super().setUp()
        opts = {"echo": conf.SQLALCHEMY_ECHOING}
        if self.database_url.startswith("sqlite:"):
            opts["connect_args"] = {"check_same_thread": False}
        if self.database_url == conf.DATABASE_FALLBACK_URL:
            opts["poolclass"] = sqlalchemy.pool.StaticPool
        self.engine = sqlalchemy.create_engine(self.database_url, **opts)
        self.session = sqlalchemy.orm.sessionmaker(autoflush=False, bind=self.engine)()
        models.Base.metadata.create_all(bind=self.engine)

    def tearDown(self) -> None:
        self.session.close()
        self.engine.dispose()
        super().tearDown()


class BaseAPITests(BaseTest):
    """
    Base class for tests running requests against a freshly created application
    """

    client: TestClient
    config: _settings.config.CoreConfig
    general_config: dict = {}

    def setUp(self) -> None:
        super().setUp()
        self.config = self.write_config(**self.general_config)
        database.PRINT_SQLITE_WARNING = False
        self.app = create_app(
            settings=_settings.Settings(),
            configure_logging=False
        )
        self.client = TestClient(self.app, base_url=conf.TEST_CLIENT_BASE_URL)

    def tearDown(self) -> None:
        self.client.close()
        database.get_engine().dispose()
        super().tearDown()

    @property
    def collection_url(self) -> str:
        return f"{conf.TEST_CLIENT_BASE_URL}/{self.config.general.collection_path}"

    def assertQuery(
            self,
            method: str,
            path: str,
            status_code: Union[int, Iterable[int]] = 200,
            json: Optional[Union[dict, pydantic.BaseModel]] = None,
            headers: Optional[dict] = None,
            r_none: bool = False,
            r_is_json: bool = True,
            r_headers: Optional[Union[Mapping, Iterable]] = None,
            r_schema: Optional[Type[pydantic.BaseModel]] = None,
            **kwargs
    ) -> httpx.Response:
        """
        Send a request to the app and check the basic properties of its response

        :param method: HTTP method of the request
        :param path: path of the request, optionally with a query string
        :param status_code: expected status code (or collection of allowed status codes)
        :param json: optional request body as dictionary or model
        :param headers: optional request headers
        :param r_none: expect an empty response body and skip the JSON checks
        :param r_is_json: expect a JSON response body
        :param r_headers: response headers to check, either only their names
            (any iterable) or names with their expected values (mapping)
        :param r_schema: optional model class the response body must validate against
        :param kwargs: further keyword arguments for ``TestClient.request``
        :return: the response of the app
        """

        if isinstance(json, pydantic.BaseModel):
            json = json.model_dump()
        response = self.client.request(method.upper(), path, json=json, headers=headers, **kwargs)

        if isinstance(status_code, int):
            self.assertEqual(status_code, response.status_code, response.text)
        else:
            self.assertIn(response.status_code, status_code, response.text)

        if r_headers is not None:
            for k in (r_headers.keys() if isinstance(r_headers, Mapping) else r_headers):
                self.assertIsNotNone(response.headers.get(k), response.headers)
                if isinstance(r_headers, Mapping):
                    self.assertEqual(r_headers[k], response.headers.get(k), response.headers)

        if r_none:
            self.assertEqual("", response.text)
        elif r_is_json:
            try:
                self.assertIsNotNone(response.json())
            except ValueError:
                self.fail(("No JSON content detected", response.headers, response.text))
            if r_schema is not None:
                self.assertTrue(r_schema.model_validate(response.json()), response.json())

        return response

    def make_fleet(self, fleet: Optional[List[dict]] = None) -> List[dict]:
        return [
            self.assertQuery("POST", f"/{self.config.general.collection_path}", 201, json=aircraft).json()
            for aircraft in (fleet or self.get_sample_fleet())
        ]

    def get_db_session(self) -> sqlalchemy.orm.Session:
        return database.get_new_session()

    def set_last_modified(self, aircraft_id: Union[str, int], timestamp: datetime.datetime):
        with self.get_db_session() as session:
            aircraft = session.get(models.Aircraft, int(aircraft_id))
            aircraft.updated_at = timestamp.astimezone(datetime.timezone.utc).replace(tzinfo=None)
            session.commit()
