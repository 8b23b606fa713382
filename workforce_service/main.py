from fastapi import FastAPI
from contextlib import asynccontextmanager
from .api.routes import auth_router, roles_router, employees_router, access_router
from .core.config import settings
from .core.database import init_db, close_db
from .services.role_service import initialize_default_roles
from .services.auth_service import auth_service
from shared.logging_config import (
    setup_service_logging,
    log_service_startup,
    log_service_ready,
    log_dependency_status,
    log_service_shutdown,
)
from shared.error_handlers import register_error_handlers

logger = setup_service_logging(settings.service_name, settings.log_level, suppress_warnings=True)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup and shutdown events"""
    # Startup
    log_service_startup(logger, settings.service_name, settings.service_port, settings.service_version)

    await init_db()
    await initialize_default_roles()
    log_dependency_status(logger, "Database", "ok")

    admin = await auth_service.ensure_bootstrap_admin()
    if admin is None:
        logger.info("No bootstrap admin configured")

    log_service_ready(logger, settings.service_name)

    yield

    # Shutdown
    log_service_shutdown(logger, settings.service_name)
    await close_db()


app = FastAPI(
    title="Workforce Access Service",
    version=settings.service_version,
    lifespan=lifespan,
)

register_error_handlers(app)

app.include_router(auth_router)
app.include_router(roles_router)
app.include_router(employees_router)
app.include_router(access_router)


@app.get("/health")
async def health_check():
    return {"status": "ok", "service": settings.service_name}
