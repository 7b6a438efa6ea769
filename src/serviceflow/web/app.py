"""
ServiceFlow Web API - FastAPI application.

Authentication is Supabase Auth; every route receives the session
explicitly through dependencies in serviceflow.web.auth.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from onboarding.api import router as onboarding_router
from onboarding.portfolio import PortfolioLimitError
from onboarding.state import TransitionError
from onboarding.store import PersistenceError
from serviceflow import __version__
from serviceflow.config import settings
from serviceflow.web.admin_routes import router as admin_router
from serviceflow.web.creator_routes import router as creator_router
from serviceflow.web.influencer_routes import router as influencer_router

logger = logging.getLogger(__name__)


async def persistence_error_handler(request: Request, exc: PersistenceError) -> JSONResponse:
    """Platform failures: generic message, UI stays usable."""
    return JSONResponse(status_code=502, content={"detail": exc.message})


async def transition_error_handler(request: Request, exc: TransitionError) -> JSONResponse:
    return JSONResponse(status_code=409, content={"detail": str(exc)})


async def portfolio_limit_handler(request: Request, exc: PortfolioLimitError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"detail": str(exc)})


def create_app() -> FastAPI:
    """Build the API with all routers registered under /api."""
    app = FastAPI(title="ServiceFlow", version=__version__)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(PersistenceError, persistence_error_handler)
    app.add_exception_handler(TransitionError, transition_error_handler)
    app.add_exception_handler(PortfolioLimitError, portfolio_limit_handler)

    app.include_router(onboarding_router, prefix="/api")
    app.include_router(creator_router, prefix="/api")
    app.include_router(influencer_router, prefix="/api")
    app.include_router(admin_router, prefix="/api")

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy", "version": __version__}

    logger.info(f"ServiceFlow API {__version__} ready ({settings.serviceflow_env})")
    return app


app = create_app()
