"""Cottage Bookings: FastAPI application entry point."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from cottagebook.api.v1.auth import router as auth_router
from cottagebook.api.v1.bookings import router as bookings_router
from cottagebook.api.v1.cancellations import router as cancellations_router
from cottagebook.api.v1.recommendations import router as recommendations_router
from cottagebook.api.v1.subscribers import router as subscribers_router
from cottagebook.api.v1.tasks import router as tasks_router
from cottagebook.config import settings

# Configure root logger so all cottagebook.* loggers output to stderr.
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Dispose pooled connections on shutdown."""
    yield
    from cottagebook.database import engine

    await engine.dispose()


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description=f"Booking requests, approvals and availability for {settings.property_name}.",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routers
app.include_router(auth_router)
app.include_router(bookings_router)
app.include_router(cancellations_router)
app.include_router(recommendations_router)
app.include_router(subscribers_router)
app.include_router(tasks_router)


@app.get("/health", tags=["health"])
async def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "healthy", "service": settings.app_name}


@app.get("/", tags=["root"])
async def root() -> dict[str, str]:
    return {
        "service": settings.app_name,
        "version": settings.app_version,
        "docs": "/docs",
    }
