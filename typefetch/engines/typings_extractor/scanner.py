"""Walk an installed node_modules tree and collect typing-relevant files."""

from __future__ import annotations

from pathlib import Path, PurePosixPath

from typefetch.engines.typings_extractor.manifest import (
    DECLARATION_SOURCE_SUFFIX,
    MANIFEST_NAME,
)
from typefetch.engines.typings_extractor.models import FileRecord

# Matched by directory name at any depth.
BLACKLISTED_DIRECTORIES = frozenset({"__tests__", "aws-sdk"})

# Directories that usually hold sources next to their compiled declarations;
# only ``.d.ts`` files are taken from them.
TYPE_ONLY_DIRECTORIES = frozenset({"src"})

DECLARATION_SUFFIX = ".d.ts"


def is_relevant(relative_path: PurePosixPath) -> bool:
    """Classify a path relative to the package root."""
    if relative_path.name == MANIFEST_NAME:
        return True
    type_only = any(part in TYPE_ONLY_DIRECTORIES for part in relative_path.parts[:-1])
    required = DECLARATION_SUFFIX if type_only else DECLARATION_SOURCE_SUFFIX
    return relative_path.name.endswith(required)


def scan_tree(package_root: Path) -> dict[str, FileRecord]:
    """Depth-first scan of *package_root*, keyed by absolute path in visit order."""
    files: dict[str, FileRecord] = {}
    _walk(package_root, package_root, files)
    return files


def _walk(directory: Path, package_root: Path, files: dict[str, FileRecord]) -> None:
    for entry in sorted(directory.iterdir(), key=lambda p: p.name):
        if entry.is_symlink() and entry.is_dir():
            continue
        if entry.is_dir():
            if entry.name not in BLACKLISTED_DIRECTORIES:
                _walk(entry, package_root, files)
            continue
        if not entry.is_file():
            continue
        relative = PurePosixPath(entry.relative_to(package_root).as_posix())
        if not is_relevant(relative):
            continue
        key = str(entry)
        files[key] = FileRecord(
            path=key,
            content=entry.read_text(encoding="utf-8", errors="replace"),
        )
