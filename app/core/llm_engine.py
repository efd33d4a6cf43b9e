"""
MediClear - LLM Engine

Owns the process-wide Gemini client and the single structured-output
call both report operations are built on.

IMPORTANT: This module does not provide medical diagnoses.
All outputs require review by qualified healthcare professionals.
"""

from typing import Optional, Dict, Any, List

from google import genai
from google.genai import types

from app.config import settings
from app.core.errors import ConfigurationError
from app.utils.logger import get_logger

logger = get_logger("llm_engine")

JSON_MIME_TYPE = "application/json"


class LLMEngine:
    """
    Gemini integration for medical report simplification.

    The client is created once, from the configured API key. A missing
    key leaves the engine unconfigured: it is logged at startup and every
    call raises ConfigurationError, so callers can detect it.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None
    ):
        """
        Initialize the engine.

        Args:
            api_key: Gemini API key (defaults to settings.gemini_api_key)
            model: Model identifier (defaults to settings.gemini_model)
        """
        self.client: Optional[genai.Client] = None
        self.model = model or settings.gemini_model
        self._initialize_client(settings.gemini_api_key if api_key is None else api_key)

    def _initialize_client(self, api_key: str) -> None:
        """Create the Gemini client if a key is available."""
        if not api_key:
            logger.error(
                "Gemini API key is missing, report analysis is unavailable",
                setting="GEMINI_API_KEY"
            )
            return

        self.client = genai.Client(api_key=api_key)
        logger.info("Gemini client initialized", model=self.model)

    @property
    def is_configured(self) -> bool:
        """Whether a client is available."""
        return self.client is not None

    def require_client(self) -> genai.Client:
        """
        Return the client or fail with a configuration error.

        Raises:
            ConfigurationError: If no API key was configured
        """
        if self.client is None:
            raise ConfigurationError(
                "The report service is not configured. Please contact the administrator."
            )
        return self.client

    async def generate_structured(
        self,
        parts: List[types.Part],
        response_schema: types.Schema,
        system_instruction: Optional[str] = None
    ) -> Optional[str]:
        """
        Request JSON output conforming to a schema.

        Args:
            parts: Ordered content parts of the user turn
            response_schema: Schema the output must follow
            system_instruction: Optional system prompt

        Returns:
            The textual payload of the response, or None if the model sent none

        Raises:
            ConfigurationError: If no API key was configured
        """
        client = self.require_client()

        config = types.GenerateContentConfig(
            system_instruction=system_instruction,
            response_mime_type=JSON_MIME_TYPE,
            response_schema=response_schema,
        )

        response = await client.aio.models.generate_content(
            model=self.model,
            contents=types.Content(role="user", parts=parts),
            config=config,
        )

        text = response.text
        logger.info(
            "Structured generation completed",
            model=self.model,
            parts=len(parts),
            response_length=len(text) if text else 0
        )
        return text

    def get_status(self) -> Dict[str, Any]:
        """Get engine status information."""
        return {
            "provider": "gemini",
            "model": self.model,
            "configured": self.is_configured
        }


# Module-level singleton
_engine_instance: Optional[LLMEngine] = None


def get_llm_engine() -> LLMEngine:
    """Get or create singleton engine instance."""
    global _engine_instance
    if _engine_instance is None:
        _engine_instance = LLMEngine()
    return _engine_instance
