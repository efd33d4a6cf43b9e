"""
Pydantic schemas for MediClear.

Defines the structured report produced by the model and the
request/response models for all API endpoints.
"""

from datetime import datetime
from enum import Enum
from typing import Optional, List

from pydantic import BaseModel, Field, ConfigDict


# =============================================================================
# Enums
# =============================================================================

class TranslationState(str, Enum):
    """Language state of a displayed report."""
    BASE = "base"
    TRANSLATING = "translating"
    TRANSLATED = "translated"


# =============================================================================
# Structured Report
# =============================================================================

class GlossaryItem(BaseModel):
    """A medical term paired with a plain-language definition."""

    model_config = ConfigDict(frozen=True, hide_input_in_errors=True)

    term: str = Field(description="Medical term as it appeared in the report")
    definition: str = Field(description="Plain-language explanation")


class SimplifiedReport(BaseModel):
    """
    Patient-friendly rendition of a medical report.

    All four fields are required. ``keyPoints`` and ``glossary`` may be
    empty lists but never absent or null. Field names on the wire are
    camelCase to match the response schema given to the model.
    """

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        hide_input_in_errors=True
    )

    summary: str = Field(
        description="One paragraph summarizing the findings in simple language"
    )
    key_points: List[str] = Field(
        alias="keyPoints",
        description="Short takeaways, in reading order"
    )
    glossary: List[GlossaryItem] = Field(
        description="Terms explained for a layperson"
    )
    disclaimer: str = Field(
        description="Standard AI-generated medical disclaimer"
    )


# =============================================================================
# Requests
# =============================================================================

class AnalyzeRequest(BaseModel):
    """Request to analyze a pasted report or a base64 encoded image."""

    text: Optional[str] = Field(
        default=None,
        description="Report text pasted by the user"
    )
    image: Optional[str] = Field(
        default=None,
        description="Base64 image data, optionally a data URI"
    )


class TranslateRequest(BaseModel):
    """Request to translate an existing report."""

    report: SimplifiedReport = Field(description="Report to translate")
    target_language: str = Field(description="Language name, e.g. 'Hindi'")


class LanguageSelection(BaseModel):
    """Language chosen for a displayed report."""

    language: str = Field(description="Language name, e.g. 'Tamil'")


# =============================================================================
# Responses
# =============================================================================

class ReportView(BaseModel):
    """The report currently displayed for a session."""

    session_id: str = Field(description="Report session ID")
    language: str = Field(description="Language of the displayed report")
    state: TranslationState = Field(description="Translation state")
    translation_failed: bool = Field(
        default=False,
        description="True when the last language switch fell back to the original"
    )
    report: SimplifiedReport = Field(description="Displayed report")


class LanguagesResponse(BaseModel):
    """Languages a report can be displayed in."""

    base_language: str = Field(description="Language reports are produced in")
    languages: List[str] = Field(description="Selectable languages")


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(default="healthy")
    version: str = Field(description="Application version")
    llm_configured: bool = Field(description="Whether the model client is usable")
    timestamp: datetime = Field(default_factory=datetime.utcnow)


class ErrorResponse(BaseModel):
    """Standard error response."""

    error: str = Field(description="Error type")
    message: str = Field(description="Human-readable error message")
    error_code: str = Field(description="Machine-readable error code")
