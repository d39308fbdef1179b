"""Typings extractor engine — fetch declaration files for an npm dependency."""

from typefetch.engines.typings_extractor.extractor import TypingsExtractor
from typefetch.engines.typings_extractor.models import (
    DependencySpecifier,
    ExtractionResult,
    FileRecord,
    ScratchHandle,
)
from typefetch.engines.typings_extractor.specifier import parse_specifier, scratch_id

__all__ = [
    "DependencySpecifier",
    "ExtractionResult",
    "FileRecord",
    "ScratchHandle",
    "TypingsExtractor",
    "parse_specifier",
    "scratch_id",
]
