"""Scratch directory lifecycle: naming, guaranteed removal, stale sweep."""

from __future__ import annotations

import shutil
import time
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

import structlog

from typefetch.engines.typings_extractor.models import DependencySpecifier, ScratchHandle
from typefetch.engines.typings_extractor.specifier import scratch_id

log = structlog.get_logger("typefetch.engine.scratch")

SCRATCH_PREFIX = "typefetch-"


def new_scratch_handle(spec: DependencySpecifier, base: Path) -> ScratchHandle:
    """Name a scratch directory for *spec* under *base*.

    The deterministic id is suffixed with a per-run nonce, so two concurrent
    requests for the same ``name@version`` get disjoint trees.
    """
    sid = scratch_id(spec.name, spec.version)
    target = base / f"{SCRATCH_PREFIX}{sid}-{uuid.uuid4().hex[:8]}"
    return ScratchHandle(id=sid, root_path=target)


@contextmanager
def scratch_directory(spec: DependencySpecifier, base: Path) -> Iterator[ScratchHandle]:
    """Create a fresh scratch directory and remove it on every exit path."""
    handle = new_scratch_handle(spec, base)
    base.mkdir(parents=True, exist_ok=True)
    handle.root_path.mkdir()
    log.debug("scratch.created", scratch_id=handle.id, path=str(handle.root_path))
    try:
        yield handle
    finally:
        reap(handle)


def reap(handle: ScratchHandle) -> None:
    """Recursively delete the scratch tree. Failures are logged, never raised."""
    try:
        shutil.rmtree(handle.root_path)
    except FileNotFoundError:
        pass
    except OSError:
        log.warning(
            "scratch.reap_failed",
            scratch_id=handle.id,
            path=str(handle.root_path),
            exc_info=True,
        )
    else:
        log.debug("scratch.reaped", scratch_id=handle.id)


def sweep_stale_scratch(base: Path, max_age: float) -> int:
    """Remove ``typefetch-*`` directories under *base* older than *max_age* seconds.

    Returns the number of directories removed.
    """
    if not base.is_dir():
        return 0
    cutoff = time.time() - max_age
    removed = 0
    for entry in sorted(base.glob(f"{SCRATCH_PREFIX}*")):
        if not entry.is_dir() or entry.is_symlink():
            continue
        try:
            if entry.stat().st_mtime >= cutoff:
                continue
            shutil.rmtree(entry)
        except OSError:
            log.warning("scratch.sweep_failed", path=str(entry), exc_info=True)
            continue
        removed += 1
    if removed:
        log.info("scratch.swept", removed=removed, base=str(base))
    return removed
