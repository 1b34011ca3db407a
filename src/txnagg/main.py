import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError

from txnagg import __version__
from txnagg.api.middleware.error_handler import (
    handle_generic_error,
    handle_transaction_error,
    handle_validation_error,
)
from txnagg.api.middleware.logging import RequestLoggingMiddleware
from txnagg.api.v1 import router as v1_router
from txnagg.api.v1.health import router as health_router
from txnagg.categorization.engine import build_categorizer
from txnagg.config import settings
from txnagg.core.exceptions import TransactionAggregationError
from txnagg.core.logging_config import setup_logging
from txnagg.db.session import AsyncSessionLocal, create_tables
from txnagg.services.reconciliation import ReconciliationWorker
from txnagg.services.seeding import seed_default_categories

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    setup_logging(settings.log_level, json_format=settings.log_json)

    if settings.db_create_tables:
        await create_tables()
    if settings.auto_seed:
        await seed_default_categories(AsyncSessionLocal)

    worker = None
    if settings.reconciliation_enabled:
        categorizer = build_categorizer(
            settings.categorizer, AsyncSessionLocal, refresh_seconds=settings.rule_cache_seconds
        )
        worker = ReconciliationWorker(
            AsyncSessionLocal,
            categorizer,
            interval=settings.reconciliation_interval_seconds,
            retry_interval=settings.reconciliation_retry_seconds,
            startup_delay=settings.reconciliation_startup_delay_seconds,
            batch_size=settings.reconciliation_batch_size,
        )
        worker.start()
    app.state.reconciliation_worker = worker

    yield

    # Shutdown
    if worker is not None:
        await worker.stop(timeout=30)


def create_app() -> FastAPI:
    app = FastAPI(
        title="Transaction Aggregation API",
        description="Categorized transaction queries and summaries",
        version=__version__,
        debug=settings.debug,
        lifespan=lifespan,
    )

    app.add_middleware(RequestLoggingMiddleware)

    # Register exception handlers (order matters - most specific first)
    app.add_exception_handler(TransactionAggregationError, handle_transaction_error)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(Exception, handle_generic_error)

    app.include_router(health_router)
    app.include_router(v1_router)

    return app


app = create_app()
