# school_billing/api/errors.py - turn domain errors into the JSON error envelope
import logging

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from school_billing.core.config import settings
from school_billing.core.errors import BillingError, InternalError, ValidationError
from school_billing.schemas.common import ErrorOut

logger = logging.getLogger(__name__)

# OpenAPI documentation for the error envelope
ERROR_RESPONSES = {
    400: {"model": ErrorOut, "description": "Validation, invalid reference or overpayment"},
    404: {"model": ErrorOut, "description": "Not found"},
    409: {"model": ErrorOut, "description": "Conflict"},
}


def error_response(error: BillingError) -> JSONResponse:
    body = error.to_dict(include_details=not settings.is_production)
    return JSONResponse(status_code=error.status_code, content=jsonable_encoder({"error": body}))


async def billing_error_handler(request: Request, exc: BillingError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s %s", request.method, request.url.path, exc.code, exc.details)
    else:
        logger.info("%s %s -> %s: %s", request.method, request.url.path, exc.code, exc.message)
    return error_response(exc)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg"), "type": err.get("type")}
        for err in exc.errors()
    ]
    return error_response(ValidationError("Invalid request", details={"errors": errors}))


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return error_response(InternalError("Internal server error", details={"cause": repr(exc)}))


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(BillingError, billing_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
