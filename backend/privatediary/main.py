from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
from typing import Optional

from privatediary.core.config import Settings, settings as default_settings
from privatediary.core.logging_config import configure_logging
from privatediary.api.api import build_api_router
from privatediary.api.errors import EXCEPTION_HANDLERS
from privatediary.node import DiaryNode


def create_app(
    settings: Optional[Settings] = None,
    node: Optional[DiaryNode] = None,
    run_background_jobs: bool = True
) -> FastAPI:
    """Build the FastAPI app for one node"""
    settings = settings or default_settings
    configure_logging(settings.LOG_LEVEL)
    node = node or DiaryNode(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Startup
        await node.start(run_jobs=run_background_jobs)

        yield

        # Shutdown
        await node.stop()

    app = FastAPI(
        title=f"{settings.APP_NAME} ({node.role.value})",
        description="Private diary backend with replicated primary/secondary nodes",
        version=settings.VERSION,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc"
    )
    app.state.node = node

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.BACKEND_CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"]
    )

    # Add exception handlers
    for exc_class, handler in EXCEPTION_HANDLERS.items():
        app.add_exception_handler(exc_class, handler)

    # Include API routes
    app.include_router(build_api_router(node.role, settings.API_PREFIX))

    @app.get("/")
    async def root():
        return {
            "message": settings.APP_NAME,
            "version": settings.VERSION,
            "role": node.role.value,
            "status": "operational",
            "docs_url": "/docs"
        }

    return app
