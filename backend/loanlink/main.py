"""LoanLink API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map LoanLinkError → structured JSON responses
    - CORS configured from settings (not hardcoded), credentials allowed for the session cookie
    - Store handle and checkout client created once in the lifespan, released on shutdown,
      and reached through app.state (no lazily-connected module global)
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse

from loanlink.api.error_handlers import register_error_handlers
from loanlink.api.routes import (
    applications, auth, health, loans, notifications, payments, users,
)
from loanlink.config import get_settings
from loanlink.infrastructure.checkout_client import CheckoutClient
from loanlink.infrastructure.document_store import ResourceStore
from loanlink.infrastructure.observability import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    app.state.store = ResourceStore.connect(settings)
    app.state.checkout = CheckoutClient.from_settings(settings)
    logger.info("LoanLink API started")
    try:
        yield
    finally:
        await app.state.checkout.aclose()
        await app.state.store.close()
        logger.info("LoanLink API shut down")


app = FastAPI(title="LoanLink API", version="1.0.0", lifespan=lifespan)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)

app.include_router(health.router)
app.include_router(auth.router)
app.include_router(users.router)
app.include_router(loans.router)
app.include_router(applications.router)
app.include_router(payments.router)
app.include_router(notifications.router)


@app.get("/", response_class=PlainTextResponse)
async def root():
    return "LoanLink Server is Running"
