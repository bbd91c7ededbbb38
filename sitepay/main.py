from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

import sitepay.models  # noqa: F401  registers tables on Base.metadata
from sitepay.api.errors import register_error_handlers
from sitepay.api.routes import health
from sitepay.core.config import settings
from sitepay.core.logging import configure_logging, get_logger
from sitepay.core.monitoring import configure_error_monitoring
from sitepay.core.observability import configure_observability
from sitepay.db.session import Base, engine
from sitepay.domains.employees.router import router as employee_router
from sitepay.domains.payroll.router import router as payroll_router
from sitepay.domains.sites.router import router as site_router

configure_logging(settings.log_level)
configure_observability()
configure_error_monitoring()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    if settings.auto_create_schema:
        Base.metadata.create_all(bind=engine)
    logger.info("startup_complete", env=settings.env)
    yield


app = FastAPI(title=settings.app_name, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list or ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
register_error_handlers(app)

app.include_router(health.router)
app.include_router(employee_router)
app.include_router(site_router)
app.include_router(payroll_router)


@app.get("/")
def root() -> dict[str, str]:
    return {"message": "Site payroll API running", "environment": settings.env}
