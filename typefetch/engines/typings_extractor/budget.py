"""Bound the emitted file mapping to a serialized byte ceiling."""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any

import structlog

from typefetch.engines.typings_extractor.models import ExtractionResult, FileRecord

log = structlog.get_logger("typefetch.engine.budget")

# Length of "{}", the serialization of an empty mapping.
_EMPTY_MAPPING_BYTES = 2


def serialized_size(value: Any) -> int:
    """UTF-8 byte length of *value* as compact JSON (how the API renders it)."""
    return len(
        json.dumps(value, ensure_ascii=False, separators=(",", ":")).encode("utf-8")
    )


def _files_size(files: Mapping[str, FileRecord]) -> int:
    return serialized_size({path: rec.as_module() for path, rec in files.items()})


def _entry_size(path: str, record: FileRecord) -> int:
    # "key":value — the colon is the one byte of structure per entry
    return serialized_size(path) + 1 + serialized_size(record.as_module())


def apply_budget(files: Mapping[str, FileRecord], max_bytes: int) -> ExtractionResult:
    """Keep the longest scan-order prefix of *files* whose JSON stays under *max_bytes*.

    When everything fits the result carries no ``dropped_file_count``.
    """
    if _files_size(files) < max_bytes:
        return ExtractionResult(files=dict(files))

    kept: dict[str, FileRecord] = {}
    running = _EMPTY_MAPPING_BYTES
    for path, record in files.items():
        cost = _entry_size(path, record) + (1 if kept else 0)  # comma separator
        if running + cost >= max_bytes:
            break
        kept[path] = record
        running += cost

    # The estimate is exact for json.dumps, but verify the real payload anyway.
    while kept and _files_size(kept) >= max_bytes:
        kept.popitem()

    dropped = len(files) - len(kept)
    log.warning(
        "budget.truncated",
        kept=len(kept),
        dropped=dropped,
        max_bytes=max_bytes,
    )
    return ExtractionResult(files=kept, dropped_file_count=dropped)
