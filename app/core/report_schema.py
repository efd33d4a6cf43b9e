"""
Report schema contract for MediClear.

The same shape is used twice: handed to the model as a response schema
so it emits conforming JSON, and checked again on the way back because
the model's output is untrusted input.
"""

import json
import re

from google.genai import types
from pydantic import ValidationError

from app.core.errors import ReportDecodeError
from app.models.schemas import SimplifiedReport
from app.utils.logger import get_logger

logger = get_logger("report_schema")

REPORT_FIELDS = ["summary", "keyPoints", "glossary", "disclaimer"]

# Models occasionally wrap JSON in a markdown fence despite the mime type
_FENCE_PATTERN = re.compile(r"^\s*```(?:json)?\s*(.*?)\s*```\s*$", re.DOTALL)


def build_response_schema() -> types.Schema:
    """
    Build the structured-output schema for a SimplifiedReport.

    Returns:
        Gemini Schema with all four top-level fields required
    """
    glossary_item = types.Schema(
        type=types.Type.OBJECT,
        properties={
            "term": types.Schema(type=types.Type.STRING),
            "definition": types.Schema(type=types.Type.STRING),
        },
        required=["term", "definition"],
    )

    return types.Schema(
        type=types.Type.OBJECT,
        properties={
            "summary": types.Schema(type=types.Type.STRING),
            "keyPoints": types.Schema(
                type=types.Type.ARRAY,
                items=types.Schema(type=types.Type.STRING),
            ),
            "glossary": types.Schema(
                type=types.Type.ARRAY,
                items=glossary_item,
            ),
            "disclaimer": types.Schema(type=types.Type.STRING),
        },
        required=list(REPORT_FIELDS),
    )


REPORT_RESPONSE_SCHEMA = build_response_schema()


def _strip_fence(payload: str) -> str:
    match = _FENCE_PATTERN.match(payload)
    return match.group(1) if match else payload


def decode_report(payload: str) -> SimplifiedReport:
    """
    Decode the model's textual payload into a SimplifiedReport.

    Args:
        payload: JSON text returned by the model

    Returns:
        Validated SimplifiedReport

    Raises:
        ReportDecodeError: If the payload is not JSON or does not match the schema
    """
    try:
        data = json.loads(_strip_fence(payload))
    except json.JSONDecodeError as e:
        logger.warning("Model output is not valid JSON", error=str(e), length=len(payload))
        raise ReportDecodeError("The model returned a response that could not be read.") from e

    try:
        # Model output must use the wire names declared in the response schema
        return SimplifiedReport.model_validate(data, by_alias=True, by_name=False)
    except ValidationError as e:
        logger.warning(
            "Model output does not match report schema",
            errors=e.error_count(),
            fields=sorted(data) if isinstance(data, dict) else type(data).__name__
        )
        raise ReportDecodeError("The model returned an incomplete report.") from e
