"""
Fleet core REST API definitions

This API exposes a paginated and link-navigable collection of aircraft.
Every response of the collection embeds `_links` to the related
resources, so that clients can navigate the API without building URLs.
"""

import logging.config
import contextlib
from typing import Callable, Dict, Optional

import fastapi
from fastapi import Request, Response
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import base
from .routers import aircraft, generic
from .. import schemas, __version__
from ..persistence import database
from ..settings import Settings


DEFAULT_EXCEPTION_HANDLERS = {
    base.NotModified: base.NotModified.handle,
    StarletteHTTPException: base.APIException.handle,
    RequestValidationError: base.handle_request_validation_error,
    Exception: base.handle_generic_exception
}

LICENSE_INFO = {
    "name": "GNU General Public License v3",
    "url": "https://www.gnu.org/licenses/gpl-3.0.html"
}

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "Origin, X-Requested-With, Content-Type, Accept, Authorization",
    "Access-Control-Allow-Methods": "GET, POST, PUT, PATCH, DELETE, OPTIONS"
}

JSON_MEDIA_RANGES = ("application/json", "application/*", "*/*")


API_DOC = """Fleet core REST API definition

The API tries to always return JSON-encoded data to any kind of request,
if return data is necessary for that response. All error responses use the
schema of the `APIError`. Requests whose `Accept` header doesn't allow JSON
are rejected with `406` (Not Acceptable), except for `OPTIONS` requests.

The collection endpoint supports the query parameters `page` and `limit`.
Without `limit`, the whole (filtered) collection is returned on one page and
the `previous` and `next` links are always `null`. Any other query parameter,
especially the filters `status` (exact match) and `airline` (case-insensitive
substring match), is preserved in all links of the response.

Single resources carry the `Last-Modified` header. Send it back in the
`If-Modified-Since` header to receive `304` (Not Modified) without body
as long as the resource wasn't changed.

The following error responses are used in the API:

1. `400` (Bad Request) for missing or empty fields and invalid query parameters.
2. `404` (Not Found) whenever an ID is unknown or can't be a valid ID at all.
3. `406` (Not Acceptable) whenever the client doesn't accept JSON.
4. `500` (Internal Server Error) if the records couldn't be loaded.
"""


def accepts_json(accept: Optional[str]) -> bool:
    """
    Determine whether the value of an `Accept` header allows JSON responses (a missing header does)
    """

    if not accept:
        return True
    for media_range in accept.split(","):
        if media_range.split(";")[0].strip().lower() in JSON_MEDIA_RANGES:
            return True
    return False


def _make_app(
        title: str,
        version: str,
        description: str,
        settings: Settings,
        logger: logging.Logger,
        exception_handlers: Optional[Dict[type, Callable]] = None
) -> fastapi.FastAPI:
    @contextlib.asynccontextmanager
    async def lifespan(_: fastapi.FastAPI):
        logger.info("Starting API...")
        yield
        logger.info("Shutting down...")

    app = base.APIWithoutValidationError(
        title=title,
        version=version,
        description=description,
        license_info=LICENSE_INFO,
        responses={400: {"model": schemas.APIError}, 406: {"model": schemas.APIError}},
        lifespan=lifespan
    )
    app.state.settings = settings

    handlers = exception_handlers or DEFAULT_EXCEPTION_HANDLERS
    for exc in handlers:
        app.add_exception_handler(exc, handlers[exc])

    enforce_accept_header = settings.general.enforce_accept_header

    @app.middleware("http")
    async def add_cors_headers(request: Request, call_next) -> Response:
        accept = request.headers.get("Accept")
        if enforce_accept_header and request.method != "OPTIONS" and not accepts_json(accept):
            response = await base.APIException.handle(request, base.NotAcceptable(accept))
        else:
            response = await call_next(request)
        for key, value in CORS_HEADERS.items():
            response.headers.setdefault(key, value)
        return response

    return app


def create_app(
        settings: Optional[Settings] = None,
        configure_logging: bool = True,
        configure_database: bool = True
) -> fastapi.FastAPI:
    """
    Create a new ``FastAPI`` instance using the specified settings and switches

    This function is conveniently used to allow overwriting the settings
    before launching the application as well as to allow multiple ``FastAPI``
    instances in one program, which in turn makes unit testing much easier.

    :param settings: optional Settings instance (would be created if not present)
    :param configure_logging: switch whether to configure logging
    :param configure_database: switch whether to configure the database
    :return: new ``FastAPI`` instance
    """

    if settings is None:
        settings = Settings()

    if configure_logging:
        logging.config.dictConfig(settings.logging.model_dump())
    logger = logging.getLogger(__name__)
    logger.debug("Starting application...")

    if configure_database:
        database.init(settings.database.connection, settings.database.debug_sql)

    app = _make_app(
        title="Fleet core REST API",
        version=__version__,
        description=API_DOC,
        settings=settings,
        logger=logger
    )

    app.include_router(aircraft.router, prefix=f"/{settings.general.collection_path}")
    app.include_router(generic.router)
    return app


class APIWrapper:
    """
    Wrapper class around the FastAPI main object, accessible via the ``app`` property

    There should be only one global instance of this object, which should only
    export its functionality to hold the ``app`` property. This wrapper can be
    used to allow easy command-line usage via ``uvicorn`` calls. Example:

    .. code-block::

        uvicorn fleet_core.api.api:api.app
    """

    def __init__(self):
        self._app: Optional[fastapi.FastAPI] = None

    def get_app(self) -> fastapi.FastAPI:
        return self.app

    def set_app(self, application: fastapi.FastAPI):
        if not isinstance(application, fastapi.FastAPI):
            raise TypeError
        self._app = application

    @property
    def app(self) -> fastapi.FastAPI:
        """
        Return the ``app`` instance (or create it with default settings if it doesn't exist)
        """

        if self._app is not None:
            return self._app
        self._app = create_app()
        return self._app


api = APIWrapper()
