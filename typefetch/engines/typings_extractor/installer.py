"""npm install helper for the typings extractor."""

from __future__ import annotations

import asyncio
import os
from pathlib import Path

import structlog

from typefetch.engines.typings_extractor.manifest import (
    MANIFEST_NAME,
    declares_types,
    read_manifest,
)
from typefetch.engines.typings_extractor.models import DependencySpecifier, ScratchHandle
from typefetch.exceptions import InstallError, ManifestParseError

log = structlog.get_logger("typefetch.engine.installer")

# Only the end of npm's stderr is worth surfacing.
_STDERR_TAIL = 2000


def build_install_command(
    npm_bin: str,
    spec: DependencySpecifier,
    handle: ScratchHandle,
    *,
    ignore_scripts: bool = True,
) -> list[str]:
    """Production-only install that writes neither package.json nor a lockfile."""
    cmd = [
        npm_bin,
        "install",
        "--prefix",
        str(handle.root_path),
        "--omit=dev",
        "--no-save",
        "--no-package-lock",
        "--no-audit",
        "--no-fund",
    ]
    if ignore_scripts:
        cmd.append("--ignore-scripts")
    # the target comes from the request; never let npm read it as an option
    cmd += ["--", spec.install_target]
    return cmd


async def install_package(
    spec: DependencySpecifier,
    handle: ScratchHandle,
    *,
    npm_bin: str = "npm",
    npm_home: Path,
    timeout: float,
    ignore_scripts: bool = True,
) -> Path:
    """Install *spec* into *handle* and return the populated package root.

    Raises ``InstallError`` on non-zero exit, timeout, or a missing npm binary.
    """
    if spec.install_target.startswith("-"):
        raise InstallError(spec.install_target, None, "package name must not start with '-'")
    cmd = build_install_command(npm_bin, spec, handle, ignore_scripts=ignore_scripts)
    env = {**os.environ, "HOME": str(npm_home)}
    log.info(
        "installer.started",
        target=spec.install_target,
        scratch_id=handle.id,
    )
    await _run(cmd, spec.install_target, cwd=handle.root_path, env=env, timeout=timeout)
    return handle.package_root


async def _run(
    cmd: list[str], target: str, *, cwd: Path, env: dict[str, str], timeout: float
) -> None:
    """Run npm, raising InstallError on failure."""
    try:
        proc = await asyncio.create_subprocess_exec(
            *cmd,
            cwd=str(cwd),
            env=env,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError as exc:
        raise InstallError(target, None, f"cannot execute {cmd[0]}: {exc}") from exc

    try:
        _, stderr = await asyncio.wait_for(proc.communicate(), timeout=timeout)
    except asyncio.TimeoutError as exc:
        await _terminate(proc)
        raise InstallError(target, None, f"timed out after {timeout:g}s") from exc
    except BaseException:
        # cancelled: npm must be gone before the scratch tree is reaped
        await _terminate(proc)
        raise

    if proc.returncode != 0:
        message = stderr.decode(errors="replace").strip()[-_STDERR_TAIL:]
        raise InstallError(target, proc.returncode, message)


async def _terminate(proc: asyncio.subprocess.Process) -> None:
    if proc.returncode is None:
        try:
            proc.kill()
        except ProcessLookupError:
            pass
    await proc.wait()


def exposes_types(package_root: Path, spec: DependencySpecifier) -> bool:
    """Decide from the installed manifest whether a scan is worth doing.

    An unreadable manifest counts as declaring no types; ``@types/*``
    packages are always scanned.
    """
    manifest_path = package_root / spec.name / MANIFEST_NAME
    try:
        manifest = read_manifest(manifest_path)
    except ManifestParseError:
        log.info("installer.manifest_unreadable", path=str(manifest_path))
        manifest = {}
    return declares_types(manifest) or spec.is_types_package
