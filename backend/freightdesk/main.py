"""FastAPI entrypoint for the freight back office API."""

import logging
import uuid
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import get_settings
from .database import Base, engine
from .errors import FreightDeskError
from .logging_config import setup_logging
from .routers import customers, orders, shipping_rates, transactions

settings = get_settings()
logger = logging.getLogger("freightdesk.api")


def _error_body(detail: str, request_id: Optional[str]) -> dict:
    body = {"detail": detail}
    if request_id:
        body["request_id"] = request_id
    return body


def create_app() -> FastAPI:
    setup_logging()
    app = FastAPI(title=settings.app_name, version="1.0.0")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def request_id_middleware(request: Request, call_next):
        rid = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = rid
        response = await call_next(request)
        response.headers["X-Request-ID"] = rid
        return response

    @app.exception_handler(FreightDeskError)
    async def domain_error_handler(request: Request, exc: FreightDeskError):
        rid = getattr(request.state, "request_id", None)
        return JSONResponse(status_code=exc.status_code, content=_error_body(exc.message, rid))

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        rid = getattr(request.state, "request_id", None)
        errors = exc.errors()
        detail = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
        body = _error_body(detail, rid)
        body["errors"] = [
            {"loc": list(err.get("loc", ())), "msg": err.get("msg"), "type": err.get("type")} for err in errors
        ]
        return JSONResponse(status_code=400, content=body)

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        rid = getattr(request.state, "request_id", None)
        logger.exception("unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(status_code=500, content=_error_body("Internal server error", rid))

    @app.get("/health", tags=["System"])
    def health_check():
        return {"status": "ok", "environment": settings.environment}

    app.include_router(orders.router)
    app.include_router(transactions.router)
    app.include_router(customers.router)
    app.include_router(shipping_rates.router)

    return app


app = create_app()

# Create tables on import (fast path for demo; for production prefer Alembic)
Base.metadata.create_all(bind=engine)
