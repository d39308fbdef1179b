"""Dependency specifier parsing and deterministic scratch naming."""

from __future__ import annotations

import hashlib

from typefetch.engines.typings_extractor.models import DependencySpecifier
from typefetch.exceptions import InputError

SCRATCH_ID_LENGTH = 16


def parse_specifier(raw: str) -> DependencySpecifier:
    """Split ``name``, ``name@version`` or ``@scope/name@version``.

    The version defaults to ``latest`` when absent. Version tokens are not
    validated; npm resolves them.
    """
    raw = (raw or "").strip()
    if not raw:
        raise InputError("Please provide a dependency")

    parts = raw.split("@")
    if len(parts) == 1 or (raw.startswith("@") and len(parts) == 2):
        return DependencySpecifier(name=raw)

    version = parts.pop()
    return DependencySpecifier(name="@".join(parts), version=version)


def scratch_id(dependency: str, version: str) -> str:
    """Fixed-width hex id for ``dependency@version``; same input, same id."""
    digest = hashlib.sha256(f"{dependency}@{version}".encode()).hexdigest()
    return digest[:SCRATCH_ID_LENGTH]
