"""
Report sessions for MediClear.

A session holds one analyzed report for as long as it is displayed:
the original (base language) report, the report currently shown and
the language it is shown in. Selecting the base language swaps back to
the original without a remote call; a failed translation falls back to
the original as well.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Optional
from uuid import uuid4

from app.config import settings
from app.core.errors import SessionNotFoundError
from app.models.schemas import SimplifiedReport, TranslationState
from app.services.report_translator import ReportTranslator, get_report_translator
from app.utils.logger import get_logger

logger = get_logger("report_session")


@dataclass
class ReportSession:
    """Display state of one analyzed report."""

    session_id: str
    original: SimplifiedReport
    current: SimplifiedReport
    language: str
    state: TranslationState = TranslationState.BASE
    translation_failed: bool = False
    created_at: datetime = field(default_factory=datetime.utcnow)

    # language -> translated report, only filled when caching is enabled
    translations: Dict[str, SimplifiedReport] = field(default_factory=dict)

    def show_original(self, base_language: str) -> None:
        self.current = self.original
        self.language = base_language
        self.state = TranslationState.BASE


class ReportSessionManager:
    """
    Keeps report sessions in memory and drives their language changes.

    Calls for the same session are not serialized; when two language
    changes overlap, whichever finishes last wins.
    """

    def __init__(
        self,
        translator: Optional[ReportTranslator] = None,
        base_language: Optional[str] = None,
        cache_translations: Optional[bool] = None
    ):
        self._translator = translator
        self.base_language = base_language or settings.base_language
        self.cache_translations = (
            settings.translation_cache_enabled
            if cache_translations is None
            else cache_translations
        )
        self._sessions: Dict[str, ReportSession] = {}

    @property
    def translator(self) -> ReportTranslator:
        if self._translator is None:
            self._translator = get_report_translator()
        return self._translator

    def is_base_language(self, language: str) -> bool:
        return language.strip().casefold() == self.base_language.casefold()

    def create(self, report: SimplifiedReport) -> ReportSession:
        """
        Start a session for a freshly analyzed report.

        Args:
            report: Report in the base language

        Returns:
            New ReportSession showing the report
        """
        session = ReportSession(
            session_id=str(uuid4()),
            original=report,
            current=report,
            language=self.base_language
        )
        self._sessions[session.session_id] = session

        logger.info("Report session created", session_id=session.session_id)
        return session

    def get(self, session_id: str) -> Optional[ReportSession]:
        """Get a session by ID."""
        return self._sessions.get(session_id)

    def require(self, session_id: str) -> ReportSession:
        """
        Get a session by ID or fail.

        Raises:
            SessionNotFoundError: If the session does not exist
        """
        session = self.get(session_id)
        if session is None:
            raise SessionNotFoundError(
                "Report not found. Please analyze the report again."
            )
        return session

    def discard(self, session_id: str) -> bool:
        """Drop a session. Returns False if it did not exist."""
        removed = self._sessions.pop(session_id, None) is not None
        if removed:
            logger.info("Report session discarded", session_id=session_id)
        return removed

    async def select_language(self, session_id: str, language: str) -> ReportSession:
        """
        Show a session's report in another language.

        Translation always starts from the original report. Any error
        from the translator leaves the session on the original report in
        the base language with translation_failed set.

        Args:
            session_id: Session to update
            language: Language name

        Returns:
            The updated session

        Raises:
            SessionNotFoundError: If the session does not exist
        """
        session = self.require(session_id)
        session.translation_failed = False

        if self.is_base_language(language):
            session.show_original(self.base_language)
            logger.info("Showing original report", session_id=session_id)
            return session

        language = language.strip()
        cached = session.translations.get(language) if self.cache_translations else None
        if cached is not None:
            session.current = cached
            session.language = language
            session.state = TranslationState.TRANSLATED
            logger.info("Showing cached translation", session_id=session_id, language=language)
            return session

        session.state = TranslationState.TRANSLATING
        try:
            translated = await self.translator.translate(session.original, language)
        except Exception as e:
            logger.warning(
                "Translation failed, showing original report",
                session_id=session_id,
                language=language,
                error_type=type(e).__name__,
                error=str(e)
            )
            session.show_original(self.base_language)
            session.translation_failed = True
            return session

        session.current = translated
        session.language = language
        session.state = TranslationState.TRANSLATED
        if self.cache_translations:
            session.translations[language] = translated

        return session


_manager_instance: Optional[ReportSessionManager] = None


def get_session_manager() -> ReportSessionManager:
    """Get or create singleton session manager."""
    global _manager_instance
    if _manager_instance is None:
        _manager_instance = ReportSessionManager()
    return _manager_instance
