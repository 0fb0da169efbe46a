"""
Run: uvicorn prompthub.main:create_app --factory --reload --port 5000
"""
import logging

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from prompthub.api.ai import router as ai_router
from prompthub.api.prompts import router as prompt_router
from prompthub.core.config import Settings
from prompthub.core.errors import PromptHubError
from prompthub.core.logging import setup_logging
from prompthub.db.init_db import init_db, seed_providers
from prompthub.db.session import make_engine, make_session_factory
from prompthub.services.dispatcher import DispatchCoordinator
from prompthub.services.prompt_tools import PromptTools
from prompthub.services.provider_registry import ProviderRegistry
from prompthub.services.providers import build_adapter_registry
from prompthub.services.record_store import RecordStore
from prompthub.services.version_store import VersionStore

logger = logging.getLogger(__name__)


def create_app(settings: Settings = None, engine=None, http_client=None) -> FastAPI:
    settings = settings or Settings()
    if settings.configure_logging:
        setup_logging(settings.log_level)

    # 1. Storage
    engine = engine or make_engine(settings.database_url, settings.database_echo)
    init_db(engine)
    store = RecordStore(make_session_factory(engine))
    if settings.seed_default_providers:
        seed_providers(store)

    # 2. Services, built once and shared by every request
    adapters = build_adapter_registry(settings, http_client=http_client)
    provider_registry = ProviderRegistry(store)

    app = FastAPI(title=settings.app_name)
    app.state.settings = settings
    app.state.store = store
    app.state.version_store = VersionStore(store, settings.version_allocation_retries)
    app.state.adapters = adapters
    app.state.provider_registry = provider_registry
    app.state.dispatcher = DispatchCoordinator(provider_registry, adapters, settings.dispatch_max_workers)
    app.state.prompt_tools = PromptTools(adapters)

    # --- CORS CONFIGURATION ---
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # --- ERROR HANDLING ---
    @app.exception_handler(PromptHubError)
    async def handle_prompthub_error(request: Request, exc: PromptHubError):
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=400,
            content={"success": False, "error": "Invalid request", "details": jsonable_encoder(exc.errors())},
        )

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(status_code=500, content={"success": False, "error": "Internal server error"})

    app.include_router(prompt_router)
    app.include_router(ai_router)

    @app.get("/api/hello")
    def hello():
        return {"message": "Hello, backend is connected successfully"}

    logger.info("%s ready", settings.app_name)
    return app
