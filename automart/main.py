# automart/main.py
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.openapi.utils import get_openapi
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from automart.core.config import settings
from automart.core.db import Base, engine
from automart.core.logging import configure_logging
from automart.core.rate_limit import InMemoryRateLimitStore

configure_logging(settings.LOG_LEVEL)
logger = logging.getLogger("automart.main")

app = FastAPI(title="AutoMart API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-RateLimit-Limit", "X-RateLimit-Remaining", "X-RateLimit-Reset", "Retry-After"],
)

app.state.rate_limit_store = InMemoryRateLimitStore()


from automart.models.user import User  # noqa: E402,F401
from automart.models.showroom import Showroom  # noqa: E402,F401
from automart.models.car import Car  # noqa: E402,F401
from automart.models.message import Message  # noqa: E402,F401
from automart.models.favorite import Favorite  # noqa: E402,F401
from automart.models.subscription import Subscription  # noqa: E402,F401

Base.metadata.create_all(bind=engine)
logger.debug("tables: %s", list(Base.metadata.tables.keys()))

backend = engine.url.get_backend_name()
try:
    with engine.connect() as conn:
        if backend == "sqlite":
            rows = conn.execute(text("PRAGMA database_list;")).all()
            logger.info("SQLite connected %s", rows)
        elif backend == "postgresql":
            ver = conn.execute(text("select version()")).scalar_one()
            logger.info("PostgreSQL connected: %s", ver)
        else:
            logger.info("DB backend detected: %s", backend)
except SQLAlchemyError:
    logger.exception("DB connection failed")


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    logger.exception("database error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": "database_error"})


from automart.routers.health import router as health_router  # noqa: E402
from automart.routers.auth import router as auth_router  # noqa: E402
from automart.routers.users import router as users_router  # noqa: E402
from automart.routers.admin import router as admin_router  # noqa: E402
from automart.routers.showrooms import router as showrooms_router  # noqa: E402
from automart.routers.cars import router as cars_router  # noqa: E402
from automart.routers.messages import router as messages_router  # noqa: E402
from automart.routers.favorites import router as favorites_router  # noqa: E402
from automart.routers.subscriptions import router as subscriptions_router  # noqa: E402

routers = [
    health_router,
    auth_router,
    users_router,
    admin_router,
    showrooms_router,
    cars_router,
    messages_router,
    favorites_router,
    subscriptions_router,
]

for r in routers:
    app.include_router(r)

for r in app.routes:
    logger.debug("route %s %s", getattr(r, "methods", None), getattr(r, "path", None))


def custom_openapi():
    if app.openapi_schema:
        return app.openapi_schema
    schema = get_openapi(
        title=app.title,
        version="1.0.0",
        description="AutoMart API",
        routes=app.routes,
    )
    comps = schema.setdefault("components", {})
    schemes = comps.setdefault("securitySchemes", {})
    for key in list(schemes.keys()):
        if schemes[key].get("type") == "http" and key != "BearerAuth":
            schemes.pop(key, None)
    schemes["BearerAuth"] = {"type": "http", "scheme": "bearer", "bearerFormat": "JWT"}
    for path_item in schema.get("paths", {}).values():
        for op in list(path_item.values()):
            if isinstance(op, dict):
                op["security"] = [{"BearerAuth": []}]
    schema["security"] = [{"BearerAuth": []}]
    app.openapi_schema = schema
    return app.openapi_schema

app.openapi = custom_openapi
