"""
Fleet core REST API base library
"""

import logging
from typing import Any, Dict, Optional

from fastapi import FastAPI, HTTPException, Request, Response
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.openapi.utils import get_openapi
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .. import schemas


logger = logging.getLogger(__name__)


class APIWithoutValidationError(FastAPI):
    """
    FastAPI application whose OpenAPI schema omits the 422 responses

    Validation errors are answered with 400 by ``handle_request_validation_error``.
    """

    def openapi(self) -> Dict[str, Any]:
        if not self.openapi_schema:
            self.openapi_schema = get_openapi(
                title=self.title,
                version=self.version,
                openapi_version=self.openapi_version,
                description=self.description,
                terms_of_service=self.terms_of_service,
                contact=self.contact,
                license_info=self.license_info,
                routes=self.routes,
                tags=self.openapi_tags,
                servers=self.servers,
            )
            for path, operations in self.openapi_schema.get("paths", {}).items():
                for method, metadata in operations.items():
                    metadata.get("responses", {}).pop("422", None)
        return self.openapi_schema


def make_error_response(
        request: Request,
        status_code: int,
        message: str,
        details: str = "",
        repeat: bool = False,
        headers: Optional[Dict[str, str]] = None
) -> JSONResponse:
    return JSONResponse(jsonable_encoder(schemas.APIError(
        status=status_code,
        method=request.method,
        request=request.url.path,
        repeat=repeat,
        message=message,
        details=details
    )), status_code=status_code, headers=headers)


async def handle_generic_exception(request: Request, _: Exception):
    logger.exception(f"Unhandled exception while serving {request.method} {request.url.path}")
    return make_error_response(
        request,
        500,
        "Unexpected server error. The aircraft store may be in an unknown state."
    )


async def handle_request_validation_error(request: Request, exc: RequestValidationError):
    msgs = "\n".join(["\t" + error["msg"] for error in exc.errors()])
    message = f"Invalid request data:\n{msgs}"
    logger.debug(f"Rejected invalid request '{request.method} {request.url.path}': {exc.errors()}")
    return make_error_response(request, 400, message, str(exc.errors()), repeat=False)


class APIException(HTTPException):
    """
    Exception rendered as an ``APIError`` body with its own status code
    """

    def __init__(
            self,
            status_code: int,
            detail: Optional[str],
            repeat: bool = False,
            message: Optional[str] = None,
            headers: Optional[Dict[str, Any]] = None
    ):
        super().__init__(status_code=status_code, detail=detail, headers=headers)
        self.repeat = repeat
        self.message = message

    @classmethod
    async def handle(cls, request: Request, exc: StarletteHTTPException) -> Response:
        """
        Convert any HTTP exception into an ``APIError`` response
        """

        status_code = getattr(exc, "status_code", 500)
        repeat = getattr(exc, "repeat", False)
        message = getattr(exc, "message", None) or exc.__class__.__name__

        if not isinstance(exc, StarletteHTTPException):
            logger.error(f"{type(exc).__name__} is not an HTTP exception")

        logger.debug(
            f"{type(exc).__name__}: {message} @ '{request.method} "
            f"{request.url.path}' (details: {exc.detail})"
        )
        return make_error_response(
            request,
            status_code,
            message,
            str(exc.detail or ""),
            repeat=repeat,
            headers=getattr(exc, "headers", None)
        )


class NotModified(APIException):
    """
    Exception when the user agent already has the most recent version of a resource

    Since the response must not carry a body, it uses its own handler.
    """

    def __init__(self, resource: str, headers: Optional[Dict[str, Any]] = None):
        super().__init__(
            status_code=304,
            detail=resource,
            repeat=False,
            message=f"{resource!r} was not modified.",
            headers=headers
        )

    @classmethod
    async def handle(cls, request: Request, exc: StarletteHTTPException) -> Response:
        logger.debug(f"Not modified: '{request.method} {request.url.path}'")
        return Response(status_code=304, headers=getattr(exc, "headers", None))


class BadRequest(APIException):
    """
    Exception for malformed or incomplete aircraft data and query parameters

    The message is shown to the client, so keep internals in ``detail``.
    """

    def __init__(self, message: str, detail: Optional[str] = None):
        super().__init__(
            status_code=400,
            detail=detail,
            repeat=True,
            message=message
        )


class NotFound(APIException):
    """
    Exception for aircraft (or other paths) that do not exist
    """

    def __init__(self, resource: str, detail: Optional[str] = None):
        super().__init__(
            status_code=404,
            detail=detail,
            repeat=False,
            message=f"{str(resource)!r} was not found."
        )


class NotAcceptable(APIException):
    """
    Exception when the user agent doesn't accept the JSON responses of this API
    """

    def __init__(self, accept: str):
        super().__init__(
            status_code=406,
            detail=f"Accept: {accept}",
            repeat=False,
            message="Only 'application/json' responses are available."
        )


class InternalServerException(APIException):
    """
    Exception for failures of the aircraft store or other server internals
    """

    def __init__(self, message: str, detail: Optional[str] = None, repeat: bool = False):
        super().__init__(
            status_code=500,
            detail=detail,
            repeat=repeat,
            message=message
        )
