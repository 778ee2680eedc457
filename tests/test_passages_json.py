"""Tests for the passages.json adapter.

WHY: The passage file is hand-authored. Bad records must be rejected at
load time with the file and record named, and good records must keep
their order, timing and highlight convention.

HOW: Passage files are written to tmp_path and loaded; record lists are
also passed straight to passages_from_records().
"""

import json

import pytest

from dialogue_box.adapters.passages_json import load_passages, passages_from_records
from dialogue_box.core.errors import DialogueError, InvalidConfigurationError

RECORDS = {
    "0": {
        "text": "Hello there.",
        "highlightIndices": [{"start": 7, "end": 12}],
        "ms": 15431,
    },
    "1": {
        "text": "General Kenobi.",
        "highlightIndices": [],
        "ms": 18200,
        "endMs": 20500,
    },
}


@pytest.fixture
def passage_file(tmp_path):
    path = tmp_path / "passages.json"
    path.write_text(json.dumps(RECORDS), encoding="utf-8")
    return path


class TestLoadPassages:
    """Reading passage files from disk."""

    def test_object_of_records_in_key_order(self, passage_file):
        model = load_passages(passage_file)
        assert model.passage_count() == 2
        assert model.passage(0).text == "Hello there."
        assert model.passage(1).start_ms == 18200
        assert model.passage(1).end_ms == 20500
        assert model.passage(0).end_ms is None

    def test_list_of_records(self, tmp_path):
        path = tmp_path / "list.json"
        path.write_text(json.dumps(list(RECORDS.values())), encoding="utf-8")
        model = load_passages(path)
        assert [p.text for p in model] == ["Hello there.", "General Kenobi."]

    def test_highlights_one_based_by_default(self, passage_file):
        passage = load_passages(passage_file).passage(0)
        highlighted = "".join(c for i, c in enumerate(passage.text) if passage.is_highlighted(i))
        assert highlighted == "there"

    def test_zero_based_highlights(self, passage_file):
        passage = load_passages(passage_file, one_based_highlights=False).passage(0)
        highlighted = "".join(c for i, c in enumerate(passage.text) if passage.is_highlighted(i))
        assert highlighted == "here."

    def test_missing_file(self, tmp_path):
        with pytest.raises(InvalidConfigurationError, match="Cannot read"):
            load_passages(tmp_path / "nope.json")

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(InvalidConfigurationError, match="not valid JSON"):
            load_passages(path)

    def test_error_names_file(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text(json.dumps([{"text": "x", "highlightIndices": []}]), encoding="utf-8")
        with pytest.raises(InvalidConfigurationError, match="bad.json"):
            load_passages(path)

    def test_scalar_top_level_rejected(self, tmp_path):
        path = tmp_path / "scalar.json"
        path.write_text("42", encoding="utf-8")
        with pytest.raises(InvalidConfigurationError, match="list or an object"):
            load_passages(path)

    def test_empty_file_rejected(self, tmp_path):
        path = tmp_path / "empty.json"
        path.write_text("[]", encoding="utf-8")
        with pytest.raises(InvalidConfigurationError):
            load_passages(path)


class TestRecordValidation:
    """Schema checks on individual records."""

    @pytest.mark.parametrize("record", [
        {"text": "x", "highlightIndices": []},
        {"text": "", "highlightIndices": [], "ms": 0},
        {"text": "x", "highlightIndices": [], "ms": "15431"},
        {"text": "x", "highlightIndices": [], "ms": -1},
        {"text": "x", "highlightIndices": [{"start": 1}], "ms": 0},
        {"text": "x", "highlightIndices": [], "ms": 0, "endMs": 1.5},
        "just a string",
    ])
    def test_bad_record(self, record):
        with pytest.raises(InvalidConfigurationError, match="Passage 1 is invalid"):
            passages_from_records([RECORDS["0"], record])

    def test_errors_are_dialogue_errors(self):
        with pytest.raises(DialogueError):
            passages_from_records([{"text": "x"}])

    def test_errors_are_value_errors(self):
        with pytest.raises(ValueError):
            passages_from_records([{"text": "x"}])
