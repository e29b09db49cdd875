import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from pricelist.application.use_cases.price_imports import recover_interrupted_imports
from pricelist.config import get_settings
from pricelist.infrastructure.database import (
    SessionLocal,
    engine,
    initialize_database,
)
from pricelist.interfaces.api.routes import register_routes

logger = logging.getLogger(__name__)


def _recover_interrupted_imports() -> None:
    session = SessionLocal()
    try:
        recovered = recover_interrupted_imports(session)
    finally:
        session.close()
    if recovered:
        logger.warning("Closed %s price imports interrupted by a restart", recovered)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create the schema, close out interrupted imports and release the engine on exit."""

    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    initialize_database()
    if settings.recover_interrupted_imports:
        _recover_interrupted_imports()
    yield
    engine.dispose()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""

    settings = get_settings()
    app = FastAPI(title="Price list imports", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_routes(app)
    return app


app = create_app()
