from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from checkoutpets import __version__
from checkoutpets.api.routes import auth_router, pet_router, router
from checkoutpets.errors import PetAppError
from checkoutpets.infra.redis_client import create_redis
from checkoutpets.migrations import run_migrations
from checkoutpets.settings import load_settings

settings = load_settings()

# Configure logging
logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open the store handle, bring its data up to date, close it on shutdown."""

    r = create_redis(settings.redis_url)
    try:
        app.state.redis = r
        app.state.settings = settings

        applied = run_migrations(r)
        if applied:
            logger.info("Migrations applied: %s", ", ".join(applied))
        logger.info("CheckoutPets API started")
        yield
    finally:
        r.close()
        logger.info("Stop Server")


app = FastAPI(title="checkoutpets", version=__version__, lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.frontend_url],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.include_router(router)
app.include_router(auth_router)
app.include_router(pet_router)


@app.exception_handler(StarletteHTTPException)
async def _http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    detail = exc.detail
    # Starlette's own 404 for an unmatched path.
    if exc.status_code == status.HTTP_404_NOT_FOUND and detail == "Not Found":
        detail = "Route not found"
    return JSONResponse(status_code=exc.status_code, content={"error": str(detail)}, headers=exc.headers)


@app.exception_handler(PetAppError)
async def _domain_error(request: Request, exc: PetAppError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(RequestValidationError)
async def _validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    message = "Invalid request body"
    if errors:
        first = errors[0]
        field = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
        detail = " ".join(s for s in (field, first.get("msg", "")) if s)
        message = f"{message}: {detail}"
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": message})


@app.exception_handler(Exception)
async def _unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content={"error": "Internal server error"})
