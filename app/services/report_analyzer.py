"""
Report analyzer service for MediClear.

Turns a pasted report or a photo of one into a SimplifiedReport.
"""

import time
from typing import List, Optional, Tuple

from google.genai import types

from app.config import settings
from app.core.errors import AnalysisFailedError, InputValidationError, ReportDecodeError
from app.core.image_processor import ImageProcessor, image_processor
from app.core.llm_engine import LLMEngine, get_llm_engine
from app.core.report_schema import REPORT_RESPONSE_SCHEMA, decode_report
from app.models.schemas import SimplifiedReport
from app.utils.logger import get_logger

logger = get_logger("report_analyzer")

ANALYSIS_FAILED_MESSAGE = (
    "Failed to analyze the report. Please try again or check your input."
)

SYSTEM_INSTRUCTION = """
You are an empathetic, professional medical assistant who helps patients understand their medical reports.
Read the medical text or the image of a report and rewrite it in clear, simple, plain English
that a layperson can follow (6th-grade reading level).

Guidelines:
1. Tone: Reassuring, calm and objective.
2. Clarity: Avoid jargon. When a medical term cannot be avoided, explain it right away in parentheses or add it to the glossary.
3. Structure: Split the information into a summary, key takeaways and a glossary of terms.
4. Privacy: Never repeat personally identifying information from the source, such as names, dates of birth or ID numbers.
5. Accuracy: Do not invent anything. If the report is illegible or unclear, say so.
""".strip()

ANALYSIS_PROMPT = """
Please analyze the provided medical report.

Return the result as JSON in this shape:
{
  "summary": "One paragraph summarizing the main findings in simple language.",
  "keyPoints": ["Takeaway 1", "Takeaway 2"],
  "glossary": [
    {"term": "Medical term", "definition": "Simple explanation"}
  ],
  "disclaimer": "A standard medical disclaimer stating that this explanation is AI-generated and does not replace professional medical advice."
}
""".strip()


class ReportAnalyzer:
    """
    Builds the analysis request, calls the model and decodes the result.

    Every failure after input validation is reported to the caller as
    a single AnalysisFailedError; the cause is logged and chained.
    """

    def __init__(
        self,
        engine: Optional[LLMEngine] = None,
        processor: Optional[ImageProcessor] = None
    ):
        self.engine = engine or get_llm_engine()
        self.processor = processor or image_processor

    def _validate_input(
        self,
        text: Optional[str],
        image: Optional[str]
    ) -> Tuple[Optional[str], Optional[str]]:
        """
        Check that exactly one input is given.

        Returns:
            Tuple of (text, image) with blank values replaced by None
        """
        text = text if text and text.strip() else None
        image = image if image and image.strip() else None

        if text and image:
            raise InputValidationError(
                "Please provide either report text or an image, not both."
            )
        if not text and not image:
            raise InputValidationError(
                "Please paste the report text or upload an image of the report."
            )
        if text and len(text) > settings.max_text_length:
            raise InputValidationError(
                f"Report text is too long. Maximum is {settings.max_text_length} characters."
            )
        return text, image

    def build_parts(
        self,
        text: Optional[str],
        image: Optional[str]
    ) -> List[types.Part]:
        """
        Build the ordered content parts: image, text, then the instruction.

        Blank values are skipped.

        Args:
            text: Report text
            image: Base64 image, optionally a data URI

        Returns:
            List of content parts
        """
        parts: List[types.Part] = []

        if image and image.strip():
            image_data = self.processor.load(image)
            parts.append(
                types.Part.from_bytes(data=image_data.data, mime_type=image_data.mime_type)
            )

        if text and text.strip():
            parts.append(types.Part.from_text(text=text))

        parts.append(types.Part.from_text(text=ANALYSIS_PROMPT))
        return parts

    async def analyze(
        self,
        text: Optional[str] = None,
        image: Optional[str] = None
    ) -> SimplifiedReport:
        """
        Analyze a medical report.

        Args:
            text: Pasted report text
            image: Base64 report image, optionally a data URI

        Returns:
            SimplifiedReport decoded from the model output

        Raises:
            InputValidationError: If not exactly one of text or image is given
            ConfigurationError: If the model client is not configured
            AnalysisFailedError: If the model call fails or returns unusable output
        """
        text, image = self._validate_input(text, image)
        self.engine.require_client()

        parts = self.build_parts(text, image)
        start_time = time.time()

        logger.info(
            "Starting report analysis",
            source="image" if image else "text",
            parts=len(parts)
        )

        try:
            payload = await self.engine.generate_structured(
                parts=parts,
                response_schema=REPORT_RESPONSE_SCHEMA,
                system_instruction=SYSTEM_INSTRUCTION
            )
            if not payload:
                raise ReportDecodeError("No response received from the model.")
            report = decode_report(payload)

        except Exception as e:
            logger.error(
                "Report analysis failed",
                error_type=type(e).__name__,
                error=str(e),
                exc_info=True
            )
            raise AnalysisFailedError(ANALYSIS_FAILED_MESSAGE) from e

        logger.info(
            "Report analyzed",
            key_point_count=len(report.key_points),
            glossary_terms=len(report.glossary),
            processing_time_ms=int((time.time() - start_time) * 1000)
        )
        return report


# Lazily created so the engine reads settings at first use
_analyzer_instance: Optional[ReportAnalyzer] = None


def get_report_analyzer() -> ReportAnalyzer:
    """Get or create singleton analyzer instance."""
    global _analyzer_instance
    if _analyzer_instance is None:
        _analyzer_instance = ReportAnalyzer()
    return _analyzer_instance
