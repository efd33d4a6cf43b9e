"""
Tests for the report schema contract.
"""

import json

import pytest
from google.genai import types
from pydantic import ValidationError

from app.core.errors import ReportDecodeError
from app.core.report_schema import REPORT_FIELDS, build_response_schema, decode_report
from app.models.schemas import GlossaryItem, SimplifiedReport

from conftest import CANNED_REPORT


class TestDecodeReport:
    """Test decoding of model output."""

    def test_valid_payload_decodes(self):
        """A conforming payload becomes a SimplifiedReport."""
        report = decode_report(json.dumps(CANNED_REPORT))

        assert report.summary == "S"
        assert report.key_points == ["A", "B"]
        assert report.glossary == [GlossaryItem(term="T", definition="D")]
        assert report.disclaimer == "Disc"

    def test_round_trips_to_wire_names(self):
        """Serialized report uses the camelCase field names."""
        report = decode_report(json.dumps(CANNED_REPORT))
        assert report.model_dump(by_alias=True) == CANNED_REPORT

    def test_empty_sequences_allowed(self):
        """keyPoints and glossary may be empty."""
        payload = {**CANNED_REPORT, "keyPoints": [], "glossary": []}
        report = decode_report(json.dumps(payload))

        assert report.key_points == []
        assert report.glossary == []

    def test_duplicate_terms_allowed(self):
        """Glossary terms are not required to be unique."""
        item = {"term": "T", "definition": "D"}
        payload = {**CANNED_REPORT, "glossary": [item, item]}
        assert len(decode_report(json.dumps(payload)).glossary) == 2

    def test_fenced_payload_decodes(self):
        """JSON wrapped in a markdown fence is accepted."""
        payload = "```json\n" + json.dumps(CANNED_REPORT) + "\n```"
        assert decode_report(payload).summary == "S"

    def test_extra_fields_ignored(self):
        """Fields outside the schema are dropped."""
        payload = {**CANNED_REPORT, "riskLevel": "high"}
        report = decode_report(json.dumps(payload))
        assert "riskLevel" not in report.model_dump(by_alias=True)

    def test_python_names_rejected(self):
        """Model output must use keyPoints, not the attribute name."""
        payload = {**CANNED_REPORT}
        payload["key_points"] = payload.pop("keyPoints")

        with pytest.raises(ReportDecodeError):
            decode_report(json.dumps(payload))

    @pytest.mark.parametrize("field", REPORT_FIELDS)
    def test_missing_field_rejected(self, field):
        """Every top-level field is required."""
        payload = {k: v for k, v in CANNED_REPORT.items() if k != field}
        with pytest.raises(ReportDecodeError):
            decode_report(json.dumps(payload))

    def test_null_sequence_rejected(self):
        """An absent list may not be sent as null."""
        payload = {**CANNED_REPORT, "keyPoints": None}
        with pytest.raises(ReportDecodeError):
            decode_report(json.dumps(payload))

    def test_glossary_item_shape_enforced(self):
        """Glossary items need both term and definition."""
        payload = {**CANNED_REPORT, "glossary": [{"term": "T"}]}
        with pytest.raises(ReportDecodeError):
            decode_report(json.dumps(payload))

    def test_non_json_rejected(self):
        """Prose output is not a report."""
        with pytest.raises(ReportDecodeError):
            decode_report("Sorry, I cannot read this report.")

    def test_json_array_rejected(self):
        """Top-level value must be an object."""
        with pytest.raises(ReportDecodeError):
            decode_report(json.dumps([CANNED_REPORT]))


class TestSimplifiedReport:
    """Test the report model itself."""

    def test_report_is_immutable(self):
        """Reports cannot be reassigned field by field."""
        report = SimplifiedReport.model_validate(CANNED_REPORT)
        with pytest.raises(ValidationError):
            report.summary = "changed"

    def test_python_names_accepted(self):
        """Reports can be built with snake_case names."""
        report = SimplifiedReport(
            summary="S",
            key_points=["A"],
            glossary=[],
            disclaimer="Disc"
        )
        assert report.model_dump(by_alias=True)["keyPoints"] == ["A"]


class TestResponseSchema:
    """Test the schema handed to the model."""

    def test_all_fields_required(self):
        """All four top-level fields are required."""
        schema = build_response_schema()

        assert schema.type == types.Type.OBJECT
        assert set(schema.required) == {"summary", "keyPoints", "glossary", "disclaimer"}

    def test_field_types(self):
        """Field types match the report model."""
        props = build_response_schema().properties

        assert props["summary"].type == types.Type.STRING
        assert props["disclaimer"].type == types.Type.STRING
        assert props["keyPoints"].type == types.Type.ARRAY
        assert props["keyPoints"].items.type == types.Type.STRING
        assert props["glossary"].type == types.Type.ARRAY

    def test_glossary_items_require_term_and_definition(self):
        """Glossary items are objects with two required strings."""
        item = build_response_schema().properties["glossary"].items

        assert item.type == types.Type.OBJECT
        assert set(item.required) == {"term", "definition"}
        assert item.properties["term"].type == types.Type.STRING
        assert item.properties["definition"].type == types.Type.STRING
