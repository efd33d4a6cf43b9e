"""
MediClear - FastAPI Application

Medical report simplification service. Turns medical reports into
plain-language summaries and translates them on request.

IMPORTANT: This is NOT a diagnostic tool.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.config import settings
from app.api.routes import router
from app.api.middleware import (
    RequestLoggingMiddleware,
    ErrorHandlingMiddleware,
    setup_exception_handlers,
    setup_rate_limiting
)
from app.core.llm_engine import get_llm_engine
from app.utils.logger import get_logger, configure_logging

logger = get_logger("main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Handles startup and shutdown events.
    """
    configure_logging(
        log_level=settings.log_level,
        json_format=not settings.debug
    )

    logger.info(
        "Starting MediClear",
        version=settings.app_version,
        debug=settings.debug
    )

    # Create the client up front so a missing key shows in the startup log
    engine = get_llm_engine()
    if not engine.is_configured:
        logger.error("Starting without a Gemini API key, analysis requests will return 503")

    logger.info("Application ready", **engine.get_status())

    yield

    logger.info("Shutting down MediClear")


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        Configured FastAPI instance
    """
    app = FastAPI(
        title=settings.app_name,
        description="""
## MediClear - Medical Report Simplification

Paste a medical report or upload a photo of it to receive a plain-language
summary, key takeaways and a glossary of terms. Reports can then be shown
in other languages.

### ⚠️ Important Disclaimer

**This is NOT a diagnostic tool.** Explanations are AI-generated and do not
replace professional medical advice.

### API Endpoints

| Endpoint | Method | Description |
|----------|--------|-------------|
| `/analyze` | POST | Simplify report text or a base64 image |
| `/analyze-image` | POST | Simplify an uploaded image |
| `/reports/{id}` | GET | Currently displayed report |
| `/reports/{id}/language` | PUT | Change report language |
| `/reports/{id}` | DELETE | Discard report |
| `/translate` | POST | Translate a report |
| `/languages` | GET | Available languages |
| `/health` | GET | Health check |
        """,
        version=settings.app_version,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc" if settings.debug else None,
    )

    # Setup middleware (order matters - last added is outermost)
    app.add_middleware(ErrorHandlingMiddleware)
    app.add_middleware(RequestLoggingMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    setup_exception_handlers(app)
    setup_rate_limiting(app)

    app.include_router(router, tags=["API"])

    return app


# Create app instance
app = create_app()


# Run with: uvicorn app.main:app --reload
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug
    )
