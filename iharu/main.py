"""i-Haru Server - FastAPI Application Entry Point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from iharu.config import settings
from iharu.database import init_db

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize database on startup."""
    init_db()
    logger.info("%s %s started (timezone %s)", settings.app_name, settings.app_version, settings.timezone)
    yield


app = FastAPI(
    title="i-Haru",
    description="Family schedule, preparation & message coordination server",
    version=settings.app_version,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# --- Register API routers ---
from iharu.api.auth import router as auth_router  # noqa: E402
from iharu.api.family import router as family_router  # noqa: E402
from iharu.api.schedules import router as schedules_router  # noqa: E402
from iharu.api.preparations import router as preparations_router  # noqa: E402
from iharu.api.messages import router as messages_router  # noqa: E402
from iharu.api.sync import router as sync_router  # noqa: E402
from iharu.api.system import router as system_router  # noqa: E402

API_PREFIX = "/api/v1"

app.include_router(auth_router, prefix=API_PREFIX)
app.include_router(family_router, prefix=API_PREFIX)
app.include_router(schedules_router, prefix=API_PREFIX)
app.include_router(preparations_router, prefix=API_PREFIX)
app.include_router(messages_router, prefix=API_PREFIX)
app.include_router(sync_router, prefix=API_PREFIX)
app.include_router(system_router, prefix=API_PREFIX)


@app.get("/")
def root():
    """Health check / server info."""
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "status": "running",
    }


@app.get("/api/v1/health")
def health():
    return {"status": "ok"}


@app.get("/api/v1/version")
def version():
    """Polling clients reload when this changes."""
    return {"version": settings.app_version}


def run():
    import uvicorn

    uvicorn.run("iharu.main:app", host=settings.host, port=settings.port, reload=settings.debug)


if __name__ == "__main__":
    run()
