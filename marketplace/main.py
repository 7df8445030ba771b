# marketplace/main.py
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.orm import sessionmaker
from starlette.exceptions import HTTPException as StarletteHTTPException

from marketplace.api import api_router
from marketplace.api.responses import REQUEST_ID_HEADER, error_body, new_request_id
from marketplace.data.database import SessionLocal, init_db
from marketplace.domain.errors import AppError
from marketplace.services.identity_service import IdentityResolver
from marketplace.services.settings_cache import SettingsCache
from marketplace.services.settings_service import settings_loader
from marketplace.utils.logging import get_logger, request_id_var
from marketplace.utils.settings import is_development

logger = get_logger(__name__)


def _json_error(request: Request, status_code: int, body: dict) -> JSONResponse:
    response = JSONResponse(status_code=status_code, content=body)
    request_id = getattr(request.state, "request_id", None)
    if request_id:
        response.headers[REQUEST_ID_HEADER] = request_id
    return response


async def app_error_handler(request: Request, exc: AppError):
    # szczegoly bledow 5xx tylko w trybie development
    expose = exc.status_code < 500 or is_development()
    if exc.status_code >= 500:
        logger.error(f"{type(exc).__name__}: {exc.message}", exc_info=exc.__cause__ or exc)
    else:
        logger.info(f"{type(exc).__name__} ({exc.status_code}): {exc.message}")
    body = error_body(exc.message, exc.details if expose else None)
    return _json_error(request, exc.status_code, body)


async def request_validation_handler(request: Request, exc: RequestValidationError):
    details = [{"loc": list(err["loc"]), "msg": err["msg"]} for err in exc.errors()]
    logger.info(f"Request validation failed: {details}")
    return _json_error(request, 400, error_body("Validation failed", details))


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return _json_error(request, exc.status_code, error_body(str(exc.detail)))


async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error: {exc}")
    details = {"type": type(exc).__name__, "message": str(exc)} if is_development() else None
    return _json_error(request, 500, error_body("Internal server error", details))


def create_app(session_factory: sessionmaker = SessionLocal, init_database: bool = True) -> FastAPI:

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if init_database:
            logger.info("Initializing database")
            init_db(session_factory.kw["bind"])
        yield

    app = FastAPI(
        title="Marketplace Order Service",
        version="1.0.0",
        lifespan=lifespan,
    )

    # zaleznosci z jawnym cyklem zycia, tworzone raz na aplikacje
    app.state.settings_cache = SettingsCache(loader=settings_loader(session_factory))
    app.state.identity_resolver = IdentityResolver()

    @app.middleware("http")
    async def request_context(request: Request, call_next):
        request_id = request.headers.get(REQUEST_ID_HEADER) or new_request_id()
        request.state.request_id = request_id
        token = request_id_var.set(request_id)
        try:
            response = await call_next(request)
        finally:
            request_id_var.reset(token)
        response.headers[REQUEST_ID_HEADER] = request_id
        return response

    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    app.include_router(api_router)

    return app


app = create_app()

if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000)
