"""Data models for the typings extractor engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

# npm scope reserved for community-maintained declarations (DefinitelyTyped)
TYPES_SCOPE_PREFIX = "@types/"
PACKAGE_ROOT_NAME = "node_modules"


@dataclass(frozen=True)
class DependencySpecifier:
    """A parsed ``name[@version]`` query; ``name`` keeps its ``@scope/`` prefix."""

    name: str
    version: str = "latest"

    @property
    def install_target(self) -> str:
        return f"{self.name}@{self.version}"

    @property
    def is_types_package(self) -> bool:
        return self.name.startswith(TYPES_SCOPE_PREFIX)


@dataclass(frozen=True)
class ScratchHandle:
    """An isolated directory owned by exactly one pipeline run."""

    id: str
    root_path: Path

    @property
    def package_root(self) -> Path:
        """Where npm places the installed dependency tree."""
        return self.root_path / PACKAGE_ROOT_NAME


@dataclass
class FileRecord:
    """A single collected file."""

    path: str
    content: str

    def as_module(self) -> dict[str, str]:
        return {"module": self.content}


@dataclass
class ExtractionResult:
    """Outcome of one extraction; ``files`` is keyed by emitted path."""

    files: dict[str, FileRecord] = field(default_factory=dict)
    dropped_file_count: int | None = None

    @property
    def truncated(self) -> bool:
        return self.dropped_file_count is not None

    def to_payload(self) -> dict:
        """Return the JSON-ready ``{"files": ..., "droppedFileCount"?: ...}`` shape."""
        payload: dict = {"files": {path: rec.as_module() for path, rec in self.files.items()}}
        if self.dropped_file_count is not None:
            payload["droppedFileCount"] = self.dropped_file_count
        return payload
