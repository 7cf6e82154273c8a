"""
Pharmacy Ledger — FastAPI Application.

This is the entry point for the application.
All routers are registered here.
"""

from fastapi import FastAPI

from pharmacy_ledger.config import get_settings
from pharmacy_ledger.logging_config import configure_logging
from pharmacy_ledger.api.health import router as health_router
from pharmacy_ledger.api.transactions import router as transactions_router
from pharmacy_ledger.api.funding import router as funding_router

settings = get_settings()

configure_logging()

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description=(
        "Double-entry transaction integrity and funding lineage "
        "for the pharmacy back office"
    ),
)

# Register routers
app.include_router(health_router)
app.include_router(transactions_router)
app.include_router(funding_router)
