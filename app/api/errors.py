# app/api/errors.py
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.domain.errors import DomainError
from app.utils.logging import get_logger

logger = get_logger(__name__)


def error_body(message: str, code: str) -> dict:
    return {"success": False, "message": message, "error": code}


async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path}: {exc.message}")
    else:
        logger.info(f"{request.method} {request.url.path} -> {exc.status_code} {exc.code}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=error_body(exc.message, exc.code))


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    #pierwszy blad wystarczy klientowi, reszta w logu
    errors = exc.errors()
    first = errors[0] if errors else {}
    field = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
    message = f"{field}: {first.get('msg', 'Nieprawidlowe dane')}" if field else first.get("msg", "Nieprawidlowe dane")
    logger.info(f"{request.method} {request.url.path} -> 400 validation: {errors}")
    return JSONResponse(status_code=400, content=error_body(message, "validation_error"))


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=500, content=error_body("Wewnetrzny blad serwera", "internal_error"))


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DomainError, domain_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
