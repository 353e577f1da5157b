"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from homeledger.config import settings
from homeledger.db.session import init_db
from homeledger.api.routes import cashflow, debts, overview, planner, renewals, savings

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize database on startup."""
    init_db()
    logger.info("Household Ledger API started")
    yield


app = FastAPI(
    title="Household Ledger API",
    description="Track household debts, savings and cashflow, and project payoff and growth",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS middleware for frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(debts.router, prefix="/api/debts", tags=["debts"])
app.include_router(savings.router, prefix="/api/savings", tags=["savings"])
app.include_router(cashflow.router, prefix="/api/cashflow", tags=["cashflow"])
app.include_router(renewals.router, prefix="/api/renewals", tags=["renewals"])
app.include_router(overview.router, prefix="/api/overview", tags=["overview"])
app.include_router(planner.router, prefix="/api/planner", tags=["planner"])


@app.get("/")
async def root():
    """Health check endpoint."""
    return {"status": "ok", "message": "Household Ledger API"}


@app.get("/health")
async def health():
    """Health check for monitoring."""
    return {"status": "healthy"}
