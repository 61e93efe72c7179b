"""
FastAPI entrypoint for the ExpenseTracker bot backend.
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from expensebot.api.router import api_router
from expensebot.core.config import settings
from expensebot.core.exceptions import (
    InsufficientParticipants, InvalidAmount, InvalidPeriod, MalformedBudgetRecord, StoreUnavailable
)
from expensebot.core.utils import format_error
from expensebot.db.init_db import init_db
from expensebot.db.session import create_store

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Own the spreadsheet store handle for the lifetime of the app."""
    store = create_store()
    await store.connect()
    app.state.store = store
    try:
        await init_db(store)
        logger.info(f"{settings.APP_NAME} ready")
        yield
    finally:
        await store.close()


app = FastAPI(
    title="ExpenseTracker Bot API",
    description="Backend API for shared expense tracking on a spreadsheet",
    version="1.0.0",
    lifespan=lifespan
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(InvalidAmount)
@app.exception_handler(InsufficientParticipants)
@app.exception_handler(InvalidPeriod)
async def bad_request_handler(request: Request, exc: Exception):
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=format_error(str(exc)))


@app.exception_handler(MalformedBudgetRecord)
async def malformed_budget_handler(request: Request, exc: MalformedBudgetRecord):
    logger.error(f"Malformed budget record: {exc}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=format_error("Stored budget could not be read", str(exc))
    )


@app.exception_handler(StoreUnavailable)
async def store_unavailable_handler(request: Request, exc: StoreUnavailable):
    logger.error(f"Spreadsheet store unavailable: {exc}")
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content=format_error("Expense store is unavailable", str(exc))
    )


# Include API routes
app.include_router(api_router, prefix="/api")


@app.get("/")
async def root():
    """Health check endpoint."""
    return {"message": "ExpenseTracker Bot API is running"}


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}
