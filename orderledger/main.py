import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from orderledger.config import Settings, get_settings
from orderledger.core.errors import OrderLedgerError
from orderledger.core.logging import setup_logging
from orderledger.database import init_db
from orderledger.routers import orders_router, products_router, purchases_router

setup_logging()
settings: Settings = get_settings()
logger = logging.getLogger(__name__)

_HTTP_ERROR_KINDS = {
    401: "unauthorized",
    403: "forbidden",
    404: "not_found",
    405: "method_not_allowed",
}


def _error_body(kind: str, message: str, details=None) -> dict:
    error = {"kind": kind, "message": message}
    if details:
        error["details"] = details
    return {"success": False, "error": error}


@asynccontextmanager
async def lifespan(_app: FastAPI):
    init_db()
    logger.info("%s started (%s).", settings.APP_NAME, settings.ENVIRONMENT)
    yield


app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)


@app.exception_handler(OrderLedgerError)
async def order_ledger_error_handler(_request: Request, exc: OrderLedgerError):
    return JSONResponse(status_code=exc.status_code, content={"success": False, "error": exc.to_dict()})


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(_request: Request, exc: RequestValidationError):
    errors = [
        {"loc": list(error.get("loc", ())), "message": error.get("msg", "")}
        for error in exc.errors()
    ]
    return JSONResponse(
        status_code=422,
        content=_error_body("validation_error", "Request validation failed.", {"errors": errors}),
    )


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(_request: Request, exc: StarletteHTTPException):
    kind = _HTTP_ERROR_KINDS.get(exc.status_code, "http_error")
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(kind, str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


app.include_router(orders_router)
app.include_router(products_router)
app.include_router(purchases_router)


__all__ = ["app"]
