# storefront/api/responses.py
from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from storefront.domain.errors import StoreError
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def envelope(data=None, message: str = "OK", status_code: int = status.HTTP_200_OK) -> dict:
    return {"status": status_code, "message": message, "data": data}


async def store_error_handler(request: Request, exc: StoreError) -> JSONResponse:
    logger.info(
        "request_rejected",
        path=request.url.path,
        reason=exc.reason,
        status_code=exc.status_code,
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=jsonable_encoder(envelope(exc.to_dict(), exc.message, exc.status_code)),
    )


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    code = 422
    return JSONResponse(
        status_code=code,
        content=jsonable_encoder(
            envelope({"reason": "ValidationError", "errors": exc.errors()}, "Invalid request body", code)
        ),
    )


def install_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StoreError, store_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
