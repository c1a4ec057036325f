"""
FastAPI application entry point for the Finance Tracker backend.

This module creates the FastAPI app instance and registers all routers.
"""

import logging
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware

from finance_tracker.config import settings
from finance_tracker.routes.auth import router as auth_router
from finance_tracker.routes.bank_accounts import router as bank_accounts_router
from finance_tracker.routes.budgets import router as budgets_router
from finance_tracker.routes.categories import router as categories_router
from finance_tracker.routes.dashboard import router as dashboard_router
from finance_tracker.routes.health import router as health_router
from finance_tracker.routes.settings import router as settings_router
from finance_tracker.routes.tags import router as tags_router
from finance_tracker.routes.transactions import router as transactions_router
from finance_tracker.utils.logging import LOG_FORMAT, resolve_level

# Configure logging
logging.basicConfig(
    level=resolve_level(settings.LOG_LEVEL),
    format=LOG_FORMAT
)

logger = logging.getLogger(__name__)


def _get_cors_origins() -> list[str]:
    """
    Get allowed CORS origins based on environment.

    - ENVIRONMENT=production: CORS_ALLOWED_ORIGINS (none allowed when unset)
    - Any other environment: all origins, for local front-end development

    Returns:
        List of allowed origin URLs, or ["*"] outside production.
    """
    if settings.is_production():
        origins = settings.CORS_ALLOWED_ORIGINS
        if origins:
            logger.info(f"CORS configured for production with {len(origins)} allowed origins")
        else:
            logger.warning(
                "CORS_ALLOWED_ORIGINS not set in production. "
                "No web origins allowed."
            )
        return origins

    logger.info(f"CORS configured for {settings.ENVIRONMENT}: allowing all origins")
    return ["*"]


# Create FastAPI app
app = FastAPI(
    title="Finance Tracker API",
    description="Backend service for tracking transactions, budgets and dashboard statistics",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc"
)


def _jsonable_errors(exc: RequestValidationError) -> list:
    # ctx may hold the raw exception object (e.g. from model validators)
    return [
        {key: value for key, value in error.items() if key != "ctx"}
        for error in exc.errors()
    ]


# Custom validation error handler to log detailed errors
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Log validation errors and return them as {"error", "details"}."""
    logger.error(
        f"Validation error on {request.method} {request.url.path}: {exc.errors()}"
    )

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "error": "validation_error",
            "details": _jsonable_errors(exc),
        }
    )


# Configure CORS with environment-based origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=_get_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register routers
app.include_router(health_router)
app.include_router(auth_router)
app.include_router(bank_accounts_router)
app.include_router(budgets_router)
app.include_router(categories_router)
app.include_router(dashboard_router)
app.include_router(settings_router)
app.include_router(tags_router)
app.include_router(transactions_router)

logger.info("FastAPI app initialized successfully")


def run() -> None:
    """Start a local development server (finance-tracker-api)."""
    import uvicorn

    uvicorn.run(
        "finance_tracker.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.is_development(),
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    run()
