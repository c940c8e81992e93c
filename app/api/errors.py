"""Client-facing errors and their JSON rendering.

Upstream fetch problems never show up here: the scraper absorbs them into
empty or partial results.
"""

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from typing import Optional
import logging

logger = logging.getLogger(__name__)


class APIError(Exception):
    status_code = 500
    error = "internal server error"

    def __init__(self, detail: Optional[str] = None):
        super().__init__(detail or self.error)
        self.detail = detail

    def to_dict(self) -> dict:
        body = {"error": self.error}
        if self.detail is not None:
            body["detail"] = self.detail
        return body


class InvalidParametersError(APIError):
    status_code = 400
    error = "invalid parameters"


class NoLinksFoundError(APIError):
    status_code = 404
    error = "no links found"


class InternalServerError(APIError):
    status_code = 500
    error = "internal server error"


class CategoriesFetchError(APIError):
    status_code = 500
    error = "error fetching categories"


async def api_error_handler(request: Request, exc: APIError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return await api_error_handler(request, InvalidParametersError())


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"Unhandled error on {request.url.path}: {str(exc)}")
    return await api_error_handler(request, InternalServerError(detail=str(exc)))
