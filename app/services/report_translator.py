"""
Report translator service for MediClear.

Re-requests an existing SimplifiedReport in another language, keeping
the field structure intact.
"""

import json
from typing import Optional

from google.genai import types

from app.core.errors import InputValidationError, TranslationFailedError
from app.core.llm_engine import LLMEngine, get_llm_engine
from app.core.report_schema import REPORT_RESPONSE_SCHEMA, decode_report
from app.models.schemas import SimplifiedReport
from app.utils.logger import get_logger

logger = get_logger("report_translator")

TRANSLATION_PROMPT = """
You are a medical translation assistant.
Translate the following simplified medical report into {language}.

- Keep the medical meaning accurate.
- Translate every text value, including glossary terms and definitions.
- Keep the SAME JSON structure as the input.
- Do not add or remove any fields.

Input JSON:
{report_json}
""".strip()


class ReportTranslator:
    """
    Translates a whole report in one request.

    The report is embedded as JSON and the model answers under the same
    response schema as analysis. An empty answer raises
    TranslationFailedError; other failures propagate unchanged.
    """

    def __init__(self, engine: Optional[LLMEngine] = None):
        self.engine = engine or get_llm_engine()

    def build_prompt(self, report: SimplifiedReport, target_language: str) -> str:
        """Embed the serialized report in the translation instruction."""
        report_json = json.dumps(
            report.model_dump(by_alias=True),
            indent=2,
            ensure_ascii=False
        )
        return TRANSLATION_PROMPT.format(language=target_language, report_json=report_json)

    async def translate(
        self,
        report: SimplifiedReport,
        target_language: str
    ) -> SimplifiedReport:
        """
        Translate a report into another language.

        Args:
            report: Report to translate
            target_language: Language name, e.g. "Hindi"

        Returns:
            New SimplifiedReport in the target language

        Raises:
            InputValidationError: If the target language is blank
            ConfigurationError: If the model client is not configured
            TranslationFailedError: If the model returned an empty response
            ReportDecodeError: If the response does not match the report schema
        """
        language = target_language.strip() if target_language else ""
        if not language:
            raise InputValidationError("Please choose a language to translate into.")

        logger.info("Translating report", language=language)

        payload = await self.engine.generate_structured(
            parts=[types.Part.from_text(text=self.build_prompt(report, language))],
            response_schema=REPORT_RESPONSE_SCHEMA
        )
        if not payload:
            logger.warning("Empty translation response", language=language)
            raise TranslationFailedError("Translation failed: empty response.")

        translated = decode_report(payload)
        logger.info(
            "Report translated",
            language=language,
            key_point_count=len(translated.key_points),
            glossary_terms=len(translated.glossary)
        )
        return translated


_translator_instance: Optional[ReportTranslator] = None


def get_report_translator() -> ReportTranslator:
    """Get or create singleton translator instance."""
    global _translator_instance
    if _translator_instance is None:
        _translator_instance = ReportTranslator()
    return _translator_instance
