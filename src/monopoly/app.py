from contextlib import asynccontextmanager
from typing import Optional
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api import router
from .config import Settings
from .db import Gateway, create_engine
from .errors import register_error_handlers
from .schema import setup_database

logger = logging.getLogger(__name__)


async def startup(gateway: Gateway) -> None:
    """Connect, then rebuild the schema. Either failure stops the service."""
    try:
        await gateway.connect()
    except Exception as e:
        logger.error(f"Database connection error: {e}")
        raise
    await setup_database(gateway)


def create_app(settings: Optional[Settings] = None, gateway: Optional[Gateway] = None) -> FastAPI:
    """Build the service around ``gateway``, or a gateway made from ``settings``."""
    if settings is None:
        settings = Settings.from_env()
    if gateway is None:
        gateway = Gateway(create_engine(settings))

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Starting up application")
        try:
            await startup(app.state.gateway)
        except Exception as e:
            logger.error(f"Error during startup: {e}")
            await app.state.gateway.close()
            raise

        settings = app.state.settings
        logger.info(f"Monopoly service listening at http://{settings.host}:{settings.port}")
        try:
            yield
        finally:
            logger.info("Shutting down application")
            await app.state.gateway.close()

    app = FastAPI(title="Monopoly service", lifespan=lifespan)
    app.state.settings = settings
    app.state.gateway = gateway

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_error_handlers(app)
    app.include_router(router)
    return app
