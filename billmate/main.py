from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from billmate.core.config import settings
from billmate.core.database import async_session_maker
from billmate.core.logging_config import setup_logging
from billmate.db.init_db import init_db
from billmate.api.v1.api import api_router
from billmate.services.alerts.badge_refresher import AlertBadgeRefresher


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    await init_db()

    refresher = AlertBadgeRefresher(async_session_maker)
    app.state.badge_refresher = refresher
    if settings.ALERT_BADGE_REFRESH_ENABLED:
        refresher.start()
    try:
        yield
    finally:
        await refresher.stop()


# Create FastAPI app
app_config = {
    "title": "BillMate POS",
    "description": "Point-of-sale backend: catalog, billing, khata, expenses and smart alerts",
    "version": "1.0.0",
    "lifespan": lifespan,
}

app = FastAPI(**app_config)

# Add middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=settings.ALLOWED_METHODS,
    allow_headers=settings.ALLOWED_HEADERS,
)

# Include routers
app.include_router(api_router, prefix="/api/v1")

@app.get("/")
async def root():
    return {
        "message": "🧾 Welcome to BillMate POS!",
        "status": "active",
        "version": app_config["version"],
        "docs": "/docs"
    }

@app.get("/health")
async def health_check():
    refresher = getattr(app.state, "badge_refresher", None)
    return {
        "status": "healthy",
        "environment": settings.ENVIRONMENT,
        "components": {
            "database": "connected",
            "alert_badge_refresher": "running" if refresher and refresher.is_running else "stopped",
        }
    }
