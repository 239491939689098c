"""Dependencies — FastAPI providers for the store handle, codec and managers.

Invariants:
    - The store handle comes from app.state (set by the lifespan), never from a module global
    - Managers are cheap per-request objects wrapping the shared store

Design Decisions:
    - Every provider is a plain function so tests can swap it via app.dependency_overrides
"""

from datetime import timedelta
from functools import lru_cache

from fastapi import Depends, Request

from loanlink.config import Settings, get_settings
from loanlink.core.session_tokens import SessionTokenCodec
from loanlink.infrastructure.checkout_client import CheckoutClient
from loanlink.infrastructure.document_store import ResourceStore
from loanlink.services.application_lifecycle import ApplicationLifecycle
from loanlink.services.loan_catalog import LoanCatalog
from loanlink.services.notification_fanout import NotificationFanout
from loanlink.services.payment_linker import PaymentLinker
from loanlink.services.user_directory import UserDirectory


def get_store(request: Request) -> ResourceStore:
    store = getattr(request.app.state, "store", None)
    if store is None:
        raise RuntimeError("Resource store not initialized")
    return store


def get_checkout_client(request: Request) -> CheckoutClient | None:
    return getattr(request.app.state, "checkout", None)


@lru_cache
def _codec(secret: str, ttl_days: int) -> SessionTokenCodec:
    return SessionTokenCodec(secret, ttl=timedelta(days=ttl_days))


def get_token_codec(settings: Settings = Depends(get_settings)) -> SessionTokenCodec:
    return _codec(settings.session_secret, settings.session_ttl_days)


def get_fanout(store: ResourceStore = Depends(get_store)) -> NotificationFanout:
    return NotificationFanout(store)


def get_user_directory(store: ResourceStore = Depends(get_store)) -> UserDirectory:
    return UserDirectory(store)


def get_loan_catalog(
    store: ResourceStore = Depends(get_store),
    fanout: NotificationFanout = Depends(get_fanout),
    users: UserDirectory = Depends(get_user_directory),
) -> LoanCatalog:
    return LoanCatalog(store, fanout, users)


def get_lifecycle(
    store: ResourceStore = Depends(get_store),
    fanout: NotificationFanout = Depends(get_fanout),
) -> ApplicationLifecycle:
    return ApplicationLifecycle(store, fanout)


def get_payment_linker(
    store: ResourceStore = Depends(get_store),
    checkout: CheckoutClient | None = Depends(get_checkout_client),
) -> PaymentLinker:
    return PaymentLinker(store, checkout)
