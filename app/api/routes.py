"""
API routes for MediClear.

Defines all REST API endpoints for the report simplification service.
"""

import base64

from fastapi import APIRouter, Depends, File, Request, Response, UploadFile
from slowapi.util import get_remote_address

from app.api.middleware import limiter
from app.config import settings
from app.core.errors import InputValidationError, SessionNotFoundError
from app.core.llm_engine import LLMEngine, get_llm_engine
from app.models.schemas import (
    AnalyzeRequest,
    ErrorResponse,
    HealthResponse,
    LanguageSelection,
    LanguagesResponse,
    ReportView,
    SimplifiedReport,
    TranslateRequest
)
from app.services.report_analyzer import ReportAnalyzer, get_report_analyzer
from app.services.report_session import (
    ReportSession,
    ReportSessionManager,
    get_session_manager
)
from app.services.report_translator import ReportTranslator, get_report_translator
from app.utils.file_validators import file_validator
from app.utils.logger import get_logger

logger = get_logger("routes")

router = APIRouter()

RATE_LIMIT = f"{settings.rate_limit_per_minute}/minute"

ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Invalid input"},
    502: {"model": ErrorResponse, "description": "Model call failed"},
    503: {"model": ErrorResponse, "description": "Model not configured"}
}


def to_view(session: ReportSession) -> ReportView:
    """Build the API view of a report session."""
    return ReportView(
        session_id=session.session_id,
        language=session.language,
        state=session.state,
        translation_failed=session.translation_failed,
        report=session.current
    )


def resolve_language(language: str) -> str:
    """Match a requested language against the configured list."""
    wanted = language.strip().casefold()
    for candidate in settings.languages:
        if candidate.casefold() == wanted:
            return candidate
    raise InputValidationError(
        f"Unsupported language: {language}. Choose one of: {', '.join(settings.languages)}",
        error_code="UNSUPPORTED_LANGUAGE"
    )


# =============================================================================
# System
# =============================================================================

@router.get(
    "/health",
    response_model=HealthResponse,
    tags=["System"],
    summary="Health check endpoint"
)
async def health_check(engine: LLMEngine = Depends(get_llm_engine)):
    """
    Check if the service is running.

    Reports whether the model client is configured; a missing API key
    does not make the service unhealthy, but every analysis will fail
    with 503 until it is set.
    """
    return HealthResponse(
        status="healthy",
        version=settings.app_version,
        llm_configured=engine.is_configured
    )


@router.get(
    "/languages",
    response_model=LanguagesResponse,
    tags=["System"],
    summary="Languages a report can be shown in"
)
async def list_languages():
    """List the base language and the languages offered for translation."""
    return LanguagesResponse(
        base_language=settings.base_language,
        languages=settings.languages
    )


# =============================================================================
# Analysis
# =============================================================================

@router.post(
    "/analyze",
    response_model=ReportView,
    tags=["Analysis"],
    summary="Simplify a pasted report or a base64 image",
    responses=ERROR_RESPONSES
)
@limiter.limit(RATE_LIMIT)
async def analyze_report(
    request: Request,
    body: AnalyzeRequest,
    analyzer: ReportAnalyzer = Depends(get_report_analyzer),
    sessions: ReportSessionManager = Depends(get_session_manager)
):
    """
    Analyze a medical report and start a report session.

    Provide exactly one of `text` or `image`. `image` may be a data URI
    (`data:image/png;base64,...`) or bare base64.

    Returns the simplified report in the base language together with the
    session ID used to change its language.
    """
    report = await analyzer.analyze(text=body.text, image=body.image)
    session = sessions.create(report)

    logger.info(
        "Report analysis served",
        session_id=session.session_id,
        client_ip=get_remote_address(request)
    )
    return to_view(session)


@router.post(
    "/analyze-image",
    response_model=ReportView,
    tags=["Analysis"],
    summary="Simplify an uploaded report image",
    responses=ERROR_RESPONSES
)
@limiter.limit(RATE_LIMIT)
async def analyze_uploaded_image(
    request: Request,
    file: UploadFile = File(..., description="Photo or scan of the report"),
    analyzer: ReportAnalyzer = Depends(get_report_analyzer),
    sessions: ReportSessionManager = Depends(get_session_manager)
):
    """
    Upload a report image and analyze it.

    Supports PNG, JPEG and WEBP files.
    """
    content = await file.read()
    mime_type = file_validator.validate_image(content, file.filename or "")

    data_uri = f"data:{mime_type};base64,{base64.b64encode(content).decode('ascii')}"
    report = await analyzer.analyze(image=data_uri)
    session = sessions.create(report)

    logger.info(
        "Image analysis served",
        session_id=session.session_id,
        filename=file.filename,
        mime_type=mime_type
    )
    return to_view(session)


# =============================================================================
# Report Sessions
# =============================================================================

@router.get(
    "/reports/{session_id}",
    response_model=ReportView,
    tags=["Reports"],
    summary="Get the currently displayed report",
    responses={404: {"model": ErrorResponse, "description": "Session not found"}}
)
async def get_report(
    session_id: str,
    sessions: ReportSessionManager = Depends(get_session_manager)
):
    """Return the report of a session in its current language."""
    return to_view(sessions.require(session_id))


@router.put(
    "/reports/{session_id}/language",
    response_model=ReportView,
    tags=["Reports"],
    summary="Change the language of a displayed report",
    responses={
        400: {"model": ErrorResponse, "description": "Unsupported language"},
        404: {"model": ErrorResponse, "description": "Session not found"}
    }
)
@limiter.limit(RATE_LIMIT)
async def select_report_language(
    request: Request,
    session_id: str,
    body: LanguageSelection,
    sessions: ReportSessionManager = Depends(get_session_manager)
):
    """
    Show the report in another language.

    Selecting the base language returns the original report without
    calling the model. If translation fails, the original report is
    returned with `translation_failed: true` and the base language.
    """
    language = resolve_language(body.language)
    session = await sessions.select_language(session_id, language)
    return to_view(session)


@router.delete(
    "/reports/{session_id}",
    status_code=204,
    tags=["Reports"],
    summary="Discard a report session"
)
async def discard_report(
    session_id: str,
    sessions: ReportSessionManager = Depends(get_session_manager)
):
    """Forget a report, e.g. when the user starts a new analysis."""
    if not sessions.discard(session_id):
        raise SessionNotFoundError("Report not found.")
    return Response(status_code=204)


# =============================================================================
# Translation
# =============================================================================

@router.post(
    "/translate",
    response_model=SimplifiedReport,
    tags=["Translation"],
    summary="Translate a report",
    responses=ERROR_RESPONSES
)
@limiter.limit(RATE_LIMIT)
async def translate_report(
    request: Request,
    body: TranslateRequest,
    translator: ReportTranslator = Depends(get_report_translator)
):
    """
    Translate a report into another language without a session.

    Unlike the session endpoint, failures are returned as errors.
    """
    return await translator.translate(body.report, body.target_language)
