"""Tests for decoding model responses into AnalysisResult."""

from unittest.mock import MagicMock, patch

import pytest

from adminia.analysis.validator import build_analysis_result


class TestConfidence:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [(1.7, 1.0), (-0.3, 0.0), (0.82, 0.82), (1, 1.0), (0, 0.0)],
    )
    def test_clamps_numbers(self, raw: float, expected: float) -> None:
        assert build_analysis_result({"confidence": raw}).confidence == expected

    @pytest.mark.parametrize("raw", [None, "0.9", True, False, [0.9], float("nan")])
    def test_defaults_non_numbers(self, raw: object) -> None:
        assert build_analysis_result({"confidence": raw}).confidence == 0.5

    def test_defaults_when_absent(self) -> None:
        assert build_analysis_result({}).confidence == 0.5


class TestCategory:
    def test_known_category(self) -> None:
        assert build_analysis_result({"category": "medical"}).category == "medical"

    def test_unknown_category_becomes_other(self) -> None:
        assert build_analysis_result({"category": "receipts"}).category == "other"

    def test_missing_category_becomes_other(self) -> None:
        assert build_analysis_result({}).category == "other"


class TestOtherFields:
    def test_empty_object_is_fully_defaulted(self) -> None:
        result = build_analysis_result({})
        assert result.extracted_data == {}
        assert result.summary == ""
        assert result.key_information == []
        assert result.document_type == "Unknown"

    def test_keeps_well_typed_fields(self) -> None:
        result = build_analysis_result(
            {
                "category": "invoices",
                "confidence": 0.9,
                "extractedData": {"amount": "120.00 EUR", "dueDate": "2025-04-01"},
                "summary": "  Electricity bill for March. ",
                "keyInformation": ["Due April 1st", "Amount 120 EUR"],
                "documentType": "Electricity bill",
            }
        )
        assert result.extracted_data == {"amount": "120.00 EUR", "dueDate": "2025-04-01"}
        assert result.summary == "Electricity bill for March."
        assert result.key_information == ["Due April 1st", "Amount 120 EUR"]
        assert result.document_type == "Electricity bill"

    def test_non_object_extracted_data_becomes_empty(self) -> None:
        result = build_analysis_result({"extractedData": ["amount", 12]})
        assert result.extracted_data == {}

    def test_non_string_summary_becomes_empty(self) -> None:
        assert build_analysis_result({"summary": 42}).summary == ""

    def test_non_list_key_information_becomes_empty(self) -> None:
        assert build_analysis_result({"keyInformation": "one point"}).key_information == []

    def test_key_information_keeps_strings_and_numbers(self) -> None:
        result = build_analysis_result({"keyInformation": ["a", 3, None, {"x": 1}, " ", True]})
        assert result.key_information == ["a", "3"]

    @patch("adminia.analysis.validator.Log")
    def test_long_key_information_is_capped_with_warning(self, mock_log: MagicMock) -> None:
        result = build_analysis_result({"keyInformation": [f"point {i}" for i in range(60)]})
        assert len(result.key_information) == 50
        assert result.key_information[-1] == "point 49"
        mock_log.warning.assert_called_once()
        assert "50 of 60" in mock_log.warning.call_args.args[0]

    @patch("adminia.analysis.validator.Log")
    def test_short_key_information_logs_nothing(self, mock_log: MagicMock) -> None:
        build_analysis_result({"keyInformation": ["a", "b"]})
        mock_log.warning.assert_not_called()

    def test_blank_document_type_becomes_unknown(self) -> None:
        assert build_analysis_result({"documentType": "  "}).document_type == "Unknown"


class TestToDict:
    def test_uses_camel_case_keys(self) -> None:
        payload = build_analysis_result({"category": "legal", "confidence": 0.7}).to_dict()
        assert set(payload) == {
            "category",
            "confidence",
            "extractedData",
            "summary",
            "keyInformation",
            "documentType",
        }
        assert payload["category"] == "legal"
