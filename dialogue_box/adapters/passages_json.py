"""Adapter: passages.json records to the PassageModel.

WHY: Passage text, highlight spans and audio timestamps are authored by
hand in a JSON file. A typo there (a string where a timestamp should be,
a missing "ms") should fail loudly at load time with the file and record
named, not as a confusing error three minutes into playback.

HOW: The file holds either a list of records or an object whose values
are records (taken in key order, as authored). Each record is validated
against passages_schema.json with jsonschema, then converted to frozen
Passage objects with HighlightSpan bounds in the requested convention.

RULES:
- Record fields: text (str), highlightIndices ([{start, end}]), ms (int),
  optional endMs (int)
- Highlight bounds are one-based by default (authored data convention)
- Any read, JSON, or schema error raises InvalidConfigurationError
- An empty file (no records) raises InvalidConfigurationError
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import jsonschema

from dialogue_box.core.errors import InvalidConfigurationError
from dialogue_box.core.passages import HighlightSpan, Passage, PassageModel

logger = logging.getLogger(__name__)

_SCHEMA_PATH = Path(__file__).resolve().parent / "passages_schema.json"

_CACHED_SCHEMA: Optional[dict] = None


def _get_schema() -> dict:
    """Load and cache the passage record schema."""
    global _CACHED_SCHEMA
    if _CACHED_SCHEMA is None:
        with open(_SCHEMA_PATH, encoding="utf-8") as f:
            _CACHED_SCHEMA = json.load(f)
    return _CACHED_SCHEMA


def _records_from_data(data: Any) -> List[Dict[str, Any]]:
    if isinstance(data, dict):
        return list(data.values())
    if isinstance(data, list):
        return data
    raise InvalidConfigurationError(
        "Passage data must be a list or an object of records, got {}".format(type(data).__name__)
    )


def passages_from_records(
    records: List[Dict[str, Any]],
    one_based_highlights: bool = True,
) -> PassageModel:
    """Validate passage records and build a PassageModel.

    Args:
        records: Parsed passage records in playback order.
        one_based_highlights: Convention of the highlight bounds; see
                              HighlightSpan.

    Raises:
        InvalidConfigurationError: If a record fails schema validation or
            there are no records.
    """
    schema = _get_schema()
    passages: List[Passage] = []
    for position, record in enumerate(records):
        try:
            jsonschema.validate(instance=record, schema=schema)
        except jsonschema.ValidationError as e:
            raise InvalidConfigurationError(
                "Passage {} is invalid: {}".format(position, e.message)
            ) from e
        spans = tuple(
            HighlightSpan(start=h["start"], end=h["end"], one_based=one_based_highlights)
            for h in record["highlightIndices"]
        )
        passages.append(Passage(
            text=record["text"],
            highlights=spans,
            start_ms=record["ms"],
            end_ms=record.get("endMs"),
        ))
    return PassageModel(passages)


def load_passages(path: str | Path, one_based_highlights: bool = True) -> PassageModel:
    """Read and validate a passages JSON file.

    Raises:
        InvalidConfigurationError: If the file is missing, is not valid
            JSON, or any record is malformed.
    """
    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise InvalidConfigurationError("Cannot read passage file {}: {}".format(path, e)) from e
    except json.JSONDecodeError as e:
        raise InvalidConfigurationError("Passage file {} is not valid JSON: {}".format(path, e)) from e

    try:
        model = passages_from_records(_records_from_data(data), one_based_highlights)
    except InvalidConfigurationError as e:
        raise InvalidConfigurationError("{}: {}".format(path, e)) from e
    logger.info("Loaded %d passage(s) from %s", model.passage_count(), path)
    return model
