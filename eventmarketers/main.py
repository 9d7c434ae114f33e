"""
Main FastAPI application for the EventMarketers core.
Serves moderation, mobile sync, entitlement, usage, health and metrics.
"""
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from eventmarketers.core.config import settings
from eventmarketers.core.errors import (
    DomainError,
    domain_error_handler,
    request_validation_handler,
    unhandled_exception_handler,
)
from eventmarketers.core.logging import configure_logging
from eventmarketers.core.middleware import RequestIdMiddleware
from eventmarketers.api.routes import content, content_sync, health, subscriptions, usage
from eventmarketers.utils.metrics import router as metrics_router


configure_logging(settings)

app = FastAPI(
    title="EventMarketers Core API",
    description="Moderation, mobile catalog sync, entitlements and usage ledger",
    version="1.0.0",
)

app.add_exception_handler(DomainError, domain_error_handler)
app.add_exception_handler(RequestValidationError, request_validation_handler)
app.add_exception_handler(Exception, unhandled_exception_handler)

app.add_middleware(RequestIdMiddleware, header_name=settings.request_id_header)

# CORS
origins = [o.strip() for o in settings.cors_origins.split(",") if o.strip()]
if not origins:
    origins = ["http://localhost:3000", "http://127.0.0.1:3000"]
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routers
app.include_router(health.router, tags=["health"])
app.include_router(content.router)
app.include_router(content_sync.router)
app.include_router(subscriptions.router)
app.include_router(usage.router)
app.include_router(metrics_router)
