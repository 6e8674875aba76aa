"""Checkout-session logging context.

Every record logged through ``get_session_logger`` carries the checkout
session ID and the listing it is booking, so one renter's path from date
selection through submit can be followed across the resolvers, the step
gate and the collaborators, even when several sessions submit concurrently.

Usage:
    from booking_engine.logging_context import get_session_logger, set_session_id

    set_session_id("CHK-abc123", listing_id="L-100")
    logger = get_session_logger(__name__)
    logger.info("Submitting reservation")  # record.session_id, record.listing_id
"""

import logging
from contextvars import ContextVar
from typing import Optional

NO_SESSION = "NO_SESSION"
NO_LISTING = "-"

_session_id: ContextVar[str] = ContextVar("session_id", default=NO_SESSION)
_listing_id: ContextVar[str] = ContextVar("listing_id", default=NO_LISTING)


def set_session_id(session_id: str, listing_id: Optional[str] = None) -> None:
    """Bind the checkout session (and optionally its listing) to the current async context."""
    _session_id.set(session_id)
    if listing_id is not None:
        _listing_id.set(listing_id)


def get_session_id() -> str:
    return _session_id.get()


def get_listing_id() -> str:
    return _listing_id.get()


class SessionContextFilter(logging.Filter):
    """Stamps session_id and listing_id onto each record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.session_id = get_session_id()  # type: ignore[attr-defined]
        record.listing_id = get_listing_id()  # type: ignore[attr-defined]
        return True


def get_session_logger(name: str) -> logging.Logger:
    """Module logger with ``SessionContextFilter`` attached once.

    Formatters can use ``%(session_id)s`` and ``%(listing_id)s``.
    """
    logger = logging.getLogger(name)
    if not any(isinstance(f, SessionContextFilter) for f in logger.filters):
        logger.addFilter(SessionContextFilter())
    return logger
