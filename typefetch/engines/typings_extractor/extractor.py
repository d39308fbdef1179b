"""TypingsExtractor — install, scan, clean and budget one dependency."""

from __future__ import annotations

import asyncio
from collections.abc import Mapping
from pathlib import Path

import structlog

from typefetch.core.config import Settings
from typefetch.engines.typings_extractor.budget import apply_budget
from typefetch.engines.typings_extractor.installer import exposes_types, install_package
from typefetch.engines.typings_extractor.manifest import (
    DECLARATION_SOURCE_SUFFIX,
    clean_manifests,
)
from typefetch.engines.typings_extractor.models import ExtractionResult, FileRecord
from typefetch.engines.typings_extractor.scanner import scan_tree
from typefetch.engines.typings_extractor.scratch import scratch_directory
from typefetch.engines.typings_extractor.specifier import parse_specifier

log = structlog.get_logger("typefetch.engine")


def relativize(files: Mapping[str, FileRecord], package_root: Path) -> dict[str, FileRecord]:
    """Re-key records as ``/<path under package_root>`` with POSIX separators."""
    relative: dict[str, FileRecord] = {}
    for path, record in files.items():
        key = "/" + Path(path).relative_to(package_root).as_posix()
        relative[key] = FileRecord(path=key, content=record.content)
    return relative


def collect(package_root: Path, max_bytes: int) -> ExtractionResult:
    """Scan an installed tree and build the bounded result (blocking I/O)."""
    files = clean_manifests(scan_tree(package_root))
    if not any(path.endswith(DECLARATION_SOURCE_SUFFIX) for path in files):
        return ExtractionResult()
    return apply_budget(relativize(files, package_root), max_bytes)


class TypingsExtractor:
    """Answer "declaration files for name@version" from a throwaway npm install."""

    def __init__(self, settings: Settings) -> None:
        self._settings = settings

    @property
    def settings(self) -> Settings:
        return self._settings

    async def extract(self, raw_specifier: str) -> ExtractionResult:
        """Full pipeline: parse -> install -> manifest check -> scan -> clean -> budget.

        The scratch directory is removed whether this returns or raises.
        """
        spec = parse_specifier(raw_specifier)
        settings = self._settings
        bound = log.bind(dependency=spec.name, version=spec.version)

        with scratch_directory(spec, settings.scratch_root) as handle:
            package_root = await install_package(
                spec,
                handle,
                npm_bin=settings.npm_bin,
                npm_home=settings.effective_npm_home,
                timeout=settings.install_timeout,
                ignore_scripts=settings.npm_ignore_scripts,
            )

            if not exposes_types(package_root, spec):
                bound.info("extractor.no_declared_types")
                return ExtractionResult()

            result = await asyncio.to_thread(
                collect, package_root, settings.max_response_bytes
            )

        bound.info(
            "extractor.completed",
            file_count=len(result.files),
            dropped_file_count=result.dropped_file_count,
        )
        return result
