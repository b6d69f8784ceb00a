"""
LedgerPOS - Application Entry Point
=====================================
FastAPI app initialization, middleware, and router registration.
"""

import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from config import settings
from config.database import SessionLocal, Base, engine
from common.exceptions import LedgerError, status_for

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL, logging.INFO),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger("ledgerpos.api")


# ==========================================
# Import ALL models so Base can see them
# ==========================================
from modules.catalog.models import Product  # noqa: F401
from modules.customer.models import Customer  # noqa: F401
from modules.cart.models import Cart, CartItem  # noqa: F401
from modules.sales.models import Transaction, TransactionLine  # noqa: F401
from modules.cash.models import CashTransfer  # noqa: F401

# ==========================================
# Import routers
# ==========================================
from modules.catalog.routes import router as catalog_router
from modules.cart.routes import router as cart_router
from modules.sales.routes import router as sales_router
from modules.customer.routes import router as customer_router
from modules.cash.routes import router as cash_router
from modules.stats.routes import router as stats_router
from modules.admin.routes import router as system_router


@asynccontextmanager
async def lifespan(app):
    # Auto-create any missing tables (safe for existing tables)
    Base.metadata.create_all(bind=engine)

    if settings.SEED_DEMO_DATA:
        from common.demo_data import seed_demo_data
        db = SessionLocal()
        try:
            seed_demo_data(db)
        finally:
            db.close()

    logger.info(f"LedgerPOS started (database: {engine.url.get_backend_name()})")
    yield
    logger.info("LedgerPOS stopped")


# ==========================================
# Create App
# ==========================================
app = FastAPI(
    title="LedgerPOS",
    description="Point-of-sale ledger: checkout, customer balances, cash transfers, statistics",
    version="1.0.0",
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url=None,
    lifespan=lifespan,
)


# ==========================================
# Exception handler: business errors → JSON
# ==========================================
async def ledger_exception_handler(request: Request, exc: LedgerError):
    return JSONResponse(
        {"detail": {"error": type(exc).__name__, "message": exc.message}},
        status_code=status_for(exc),
    )

app.add_exception_handler(LedgerError, ledger_exception_handler)


# ==========================================
# Middleware: Request timing log
# ==========================================
@app.middleware("http")
async def request_log_middleware(request: Request, call_next):
    start = time.perf_counter()
    response = await call_next(request)
    elapsed_ms = (time.perf_counter() - start) * 1000
    logger.debug(f"{request.method} {request.url.path} -> {response.status_code} ({elapsed_ms:.1f} ms)")
    return response


# ==========================================
# Routers
# ==========================================
app.include_router(catalog_router)
app.include_router(cart_router)
app.include_router(sales_router)
app.include_router(customer_router)
app.include_router(cash_router)
app.include_router(stats_router)
app.include_router(system_router)


@app.get("/health")
async def health():
    return {"status": "ok"}
