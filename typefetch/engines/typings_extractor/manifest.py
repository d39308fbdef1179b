"""package.json helpers and the dead-manifest filter."""

from __future__ import annotations

import json
from collections.abc import Mapping
from pathlib import Path, PurePosixPath

import structlog

from typefetch.engines.typings_extractor.models import FileRecord
from typefetch.exceptions import ManifestParseError

log = structlog.get_logger("typefetch.engine.manifest")

MANIFEST_NAME = "package.json"
DECLARATION_SOURCE_SUFFIX = ".ts"


def parse_manifest(content: str, path: Path | str = "<memory>") -> dict:
    """Parse manifest text, raising ``ManifestParseError`` unless it is a JSON object."""
    try:
        data = json.loads(content)
    except json.JSONDecodeError as exc:
        raise ManifestParseError(path) from exc
    if not isinstance(data, dict):
        raise ManifestParseError(path)
    return data


def read_manifest(path: Path) -> dict:
    try:
        content = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ManifestParseError(path) from exc
    return parse_manifest(content, path)


def declares_types(manifest: Mapping) -> bool:
    """True when the manifest points at a root declaration file."""
    return bool(manifest.get("types") or manifest.get("typings"))


def is_manifest_path(path: str) -> bool:
    return PurePosixPath(path).name == MANIFEST_NAME


def clean_manifests(files: Mapping[str, FileRecord]) -> dict[str, FileRecord]:
    """Drop manifests that neither declare types nor sit above a ``.ts`` file.

    Non-manifest entries are kept as they are. Iteration order is preserved.
    """
    # Every directory that has a declaration source somewhere beneath it.
    covered: set[PurePosixPath] = set()
    for path in files:
        if path.endswith(DECLARATION_SOURCE_SUFFIX):
            covered.update(PurePosixPath(path).parents)

    cleaned: dict[str, FileRecord] = {}
    dropped = 0
    for path, record in files.items():
        if not is_manifest_path(path):
            cleaned[path] = record
            continue
        if _manifest_is_valid(path, record, covered):
            cleaned[path] = record
        else:
            dropped += 1

    if dropped:
        log.debug("manifest.dropped", count=dropped)
    return cleaned


def _manifest_is_valid(path: str, record: FileRecord, covered: set[PurePosixPath]) -> bool:
    try:
        if declares_types(parse_manifest(record.content, path)):
            return True
    except ManifestParseError:
        pass
    return PurePosixPath(path).parent in covered
