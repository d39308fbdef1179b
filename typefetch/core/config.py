"""Runtime settings read from ``TYPEFETCH_*`` environment variables."""

from __future__ import annotations

import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path

from typefetch.exceptions import ConfigError

# Cap on the serialized ``files`` mapping returned to clients.
DEFAULT_MAX_RESPONSE_BYTES = int(5.8 * 1024 * 1024)
DEFAULT_INSTALL_TIMEOUT = 300.0
DEFAULT_STALE_SCRATCH_SECONDS = 3600.0

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    """Immutable runtime configuration for the extractor and the API."""

    scratch_root: Path
    npm_bin: str = "npm"
    npm_home: Path | None = None
    install_timeout: float = DEFAULT_INSTALL_TIMEOUT
    npm_ignore_scripts: bool = True
    max_response_bytes: int = DEFAULT_MAX_RESPONSE_BYTES
    stale_scratch_seconds: float = DEFAULT_STALE_SCRATCH_SECONDS
    cors_origins: list[str] = field(default_factory=lambda: ["*"])

    def __post_init__(self) -> None:
        # "{}" alone is two bytes; a ceiling at or below that can never be met.
        if self.max_response_bytes <= 2:
            raise ConfigError(
                f"max_response_bytes must be greater than 2, got {self.max_response_bytes}"
            )
        if self.install_timeout <= 0:
            raise ConfigError(f"install_timeout must be positive, got {self.install_timeout}")

    @property
    def effective_npm_home(self) -> Path:
        return self.npm_home or self.scratch_root

    @classmethod
    def from_env(cls) -> Settings:
        """Build settings from the process environment.

        Reads:
            TYPEFETCH_SCRATCH_ROOT          — parent of per-request scratch dirs
            TYPEFETCH_NPM_BIN               — npm executable (default: npm)
            TYPEFETCH_NPM_HOME              — HOME for npm (default: scratch root)
            TYPEFETCH_INSTALL_TIMEOUT       — seconds before npm is killed
            TYPEFETCH_NPM_IGNORE_SCRIPTS    — pass --ignore-scripts (default: 1)
            TYPEFETCH_MAX_RESPONSE_BYTES    — response budget in bytes
            TYPEFETCH_STALE_SCRATCH_SECONDS — age after which leftovers are swept
            TYPEFETCH_CORS_ORIGINS          — comma separated (default: *)
        """
        env = os.environ
        scratch_root = Path(env.get("TYPEFETCH_SCRATCH_ROOT") or tempfile.gettempdir())
        npm_home = env.get("TYPEFETCH_NPM_HOME")
        origins = env.get("TYPEFETCH_CORS_ORIGINS", "*")
        return cls(
            scratch_root=scratch_root,
            npm_bin=env.get("TYPEFETCH_NPM_BIN", "npm"),
            npm_home=Path(npm_home) if npm_home else None,
            install_timeout=_number(
                "TYPEFETCH_INSTALL_TIMEOUT", float, DEFAULT_INSTALL_TIMEOUT
            ),
            npm_ignore_scripts=env.get("TYPEFETCH_NPM_IGNORE_SCRIPTS", "1").strip().lower()
            in _TRUTHY,
            max_response_bytes=_number(
                "TYPEFETCH_MAX_RESPONSE_BYTES", int, DEFAULT_MAX_RESPONSE_BYTES
            ),
            stale_scratch_seconds=_number(
                "TYPEFETCH_STALE_SCRATCH_SECONDS", float, DEFAULT_STALE_SCRATCH_SECONDS
            ),
            cors_origins=[o.strip() for o in origins.split(",") if o.strip()],
        )


def _number(name: str, kind: type, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return kind(raw.strip())
    except ValueError as exc:
        raise ConfigError(f"{name} must be a number, got {raw!r}") from exc
