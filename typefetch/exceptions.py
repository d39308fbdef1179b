"""Custom exceptions for typefetch."""

from __future__ import annotations

from pathlib import Path


class TypefetchError(Exception):
    """Base exception for all typefetch errors."""


class InputError(TypefetchError):
    """Missing, blank or repeated dependency specifier (-> HTTP 422)."""


class InstallError(TypefetchError):
    """Raised when npm fails to materialize a dependency (-> HTTP 422)."""

    def __init__(self, target: str, returncode: int | None, stderr: str = ""):
        self.target = target
        self.returncode = returncode
        self.stderr = stderr
        detail = f": {stderr}" if stderr else ""
        if returncode is None:
            super().__init__(f"npm install failed for {target}{detail}")
        else:
            super().__init__(f"npm install failed for {target} (exit {returncode}){detail}")


class ManifestParseError(TypefetchError):
    """Raised when a package.json cannot be read or is not a JSON object."""

    def __init__(self, path: Path | str):
        self.path = str(path)
        super().__init__(f"invalid package manifest: {self.path}")


class ConfigError(TypefetchError):
    """Invalid environment configuration."""
