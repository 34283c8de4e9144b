"""Swimmeret FastAPI application assembly.

Wires routers, error handlers, lifespan management (schema creation and
demo seeding), and CORS middleware.
Run: uvicorn swimmeret.main:app --reload
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from swimmeret.config import get_settings
from swimmeret.errors import register_error_handlers
from swimmeret.pools.router import lab_router, pools_router
from swimmeret.stability.router import guardrails_router, stability_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: create tables and seed demo data when empty.

    Production deployments run alembic migrations; create_all is a no-op
    against an already migrated database.
    """
    from swimmeret.db.base import Base
    from swimmeret.db.engine import engine, get_db
    from swimmeret.db.seed import seed_demo_data

    Base.metadata.create_all(engine)

    if get_settings().seed_demo:
        with get_db() as db:
            if seed_demo_data(db):
                db.commit()

    logger.info("Swimmeret API started")
    yield
    engine.dispose()


app = FastAPI(title="Swimmeret Stability Pools", version="0.1.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)

# Register routers
app.include_router(stability_router)
app.include_router(guardrails_router)
app.include_router(pools_router)
app.include_router(lab_router)


@app.get("/health")
def health_check():
    """Health check endpoint for monitoring and load balancer probes."""
    return {"status": "healthy"}
