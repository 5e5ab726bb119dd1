import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from tenant_iam.config import settings
from tenant_iam.database import Base, engine
from tenant_iam.exception_handlers import register_exception_handlers
from tenant_iam.middleware.logging import StructuredLoggingMiddleware, setup_logging
from tenant_iam.routes import auth, health, permissions, roles, tenants, user

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Tasks to run at application startup and shutdown."""
    logger.info("Starting up the application...")
    if settings.debug:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database tables created (if not existing).")
    yield
    logger.info("Shutting down the application...")
    await engine.dispose()


def create_app() -> FastAPI:
    """Create the FastAPI application."""
    setup_logging(settings.log_level, json_format=settings.log_format == "json")

    app = FastAPI(
        title=settings.app_name,
        description="Multi-tenant identity and access management API",
        debug=settings.debug,
        version=settings.app_version,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(StructuredLoggingMiddleware)

    register_exception_handlers(app)

    app.include_router(auth.router, prefix=f"{API_PREFIX}/auth", tags=["Auth"])
    app.include_router(user.router, prefix=f"{API_PREFIX}/users", tags=["Users"])
    app.include_router(roles.router, prefix=f"{API_PREFIX}/roles", tags=["Roles"])
    app.include_router(tenants.router, prefix=f"{API_PREFIX}/tenants")
    app.include_router(permissions.router, prefix=f"{API_PREFIX}/permissions", tags=["Permissions"])
    app.include_router(health.router)

    if settings.debug:
        logger.info(f"Running in {settings.environment} mode")
        logging.getLogger("sqlalchemy.engine").setLevel(logging.INFO)

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=settings.debug)
