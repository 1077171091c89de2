"""
FastAPI Application Entrypoint.

Sets up CORS, includes all routers, seeds the transactions table on first
startup and pre-computes the unfiltered statistics and filter options.

Run locally with `python -m app.main` or `uvicorn app.main:app`.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.core.config import get_settings
from app.core.database import init_db, SessionLocal
from app.core.exceptions import FilterValidationError, StoreUnavailable, TransactionNotFound
from app.api import health_router, transactions_router
from app.services.seed_data import load_records, seed_database
from app.services.transaction_service import get_transaction_service

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifecycle: init DB, seed and warm caches on startup."""
    logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION} ({settings.STORE_BACKEND} store)")

    if settings.STORE_BACKEND == "sql":
        init_db()
        logger.info("Database tables initialized")

        if settings.SEED_ON_STARTUP:
            db = SessionLocal()
            try:
                seed_database(db, load_records(settings.DATASET_CSV_PATH, settings.SEED_ROW_COUNT))
            finally:
                db.close()

    service = get_transaction_service()
    if settings.WARM_CACHE_ON_STARTUP:
        service.aggregator.warm()

    yield

    logger.info("Shutting down...")


# Create FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description=(
        "Paginated, filterable and sortable access to retail transactions "
        "with summary statistics for the sales dashboard."
    ),
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(FilterValidationError)
async def validation_error_handler(request: Request, exc: FilterValidationError):
    return JSONResponse(status_code=400, content={"success": False, "message": exc.reason})


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    """Malformed typed parameters (e.g. page=abc) use the same 400 envelope."""
    errors = exc.errors()
    if not errors:
        return JSONResponse(status_code=400, content={"success": False, "message": "Invalid request"})
    error = errors[0]
    name = error["loc"][-1] if error.get("loc") else "request"
    return JSONResponse(status_code=400, content={"success": False, "message": f"Invalid {name}: {error['msg']}"})


@app.exception_handler(TransactionNotFound)
async def not_found_handler(request: Request, exc: TransactionNotFound):
    return JSONResponse(status_code=404, content={"success": False, "message": "Transaction not found"})


@app.exception_handler(StoreUnavailable)
async def store_unavailable_handler(request: Request, exc: StoreUnavailable):
    return JSONResponse(
        status_code=503,
        content={"success": False, "message": "Transaction data is temporarily unavailable"},
    )


# Include all routers under /api
app.include_router(health_router, prefix=settings.API_PREFIX)
app.include_router(transactions_router, prefix=settings.API_PREFIX)


@app.get("/")
async def root():
    """Root endpoint with API info."""
    return {
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "docs": "/docs",
        "health": f"{settings.API_PREFIX}/health",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("app.main:app", host="0.0.0.0", port=8000, reload=settings.DEBUG)
