"""Shared fixtures for typefetch tests.

No network or real npm is needed: ``fake_npm`` writes a small shell script
that mimics ``npm install --prefix DIR`` by copying a prepared tree into
``DIR/node_modules``. Behaviour is steered through environment variables:

    FAKE_NPM_TREE   directory copied into node_modules
    FAKE_NPM_FAIL   non-empty -> print an npm-style error and exit 1
    FAKE_NPM_SLEEP  replace the process with `sleep N` (timeout tests)
    FAKE_NPM_LOG    file that receives the pid, argv and HOME of each call
"""

from __future__ import annotations

import json
import stat
from pathlib import Path

import pytest

from typefetch.core.config import Settings

FAKE_NPM = """#!/bin/sh
prefix=""
prev=""
target=""
for arg in "$@"; do
  if [ "$prev" = "--prefix" ]; then prefix="$arg"; fi
  prev="$arg"
  target="$arg"
done
if [ -n "$FAKE_NPM_LOG" ]; then
  echo "pid=$$ $* HOME=$HOME" >> "$FAKE_NPM_LOG"
fi
if [ -n "$FAKE_NPM_SLEEP" ]; then
  exec sleep "$FAKE_NPM_SLEEP"
fi
if [ -n "$FAKE_NPM_FAIL" ]; then
  echo "npm ERR! code E404" >&2
  echo "npm ERR! 404 Not Found - GET https://registry.npmjs.org/$target" >&2
  exit 1
fi
mkdir -p "$prefix/node_modules"
if [ -n "$FAKE_NPM_TREE" ]; then
  cp -R "$FAKE_NPM_TREE/." "$prefix/node_modules/"
fi
exit 0
"""


def write_tree(root: Path, files: dict[str, str | dict]) -> Path:
    """Create *files* (relative path -> text or JSON-able dict) under *root*."""
    for rel, content in files.items():
        target = root / rel
        target.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, dict):
            content = json.dumps(content)
        target.write_text(content, encoding="utf-8")
    return root


@pytest.fixture
def make_tree():
    return write_tree


@pytest.fixture
def fake_npm(tmp_path: Path) -> Path:
    script = tmp_path / "bin" / "npm"
    script.parent.mkdir()
    script.write_text(FAKE_NPM)
    script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return script


@pytest.fixture
def npm_tree(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """An empty registry tree; tests fill it with write_tree()."""
    tree = tmp_path / "registry"
    tree.mkdir()
    monkeypatch.setenv("FAKE_NPM_TREE", str(tree))
    monkeypatch.delenv("FAKE_NPM_FAIL", raising=False)
    monkeypatch.delenv("FAKE_NPM_SLEEP", raising=False)
    return tree


@pytest.fixture
def scratch_root(tmp_path: Path) -> Path:
    root = tmp_path / "scratch"
    root.mkdir()
    return root


@pytest.fixture
def settings(scratch_root: Path, fake_npm: Path, tmp_path: Path) -> Settings:
    home = tmp_path / "npm-home"
    home.mkdir()
    return Settings(
        scratch_root=scratch_root,
        npm_bin=str(fake_npm),
        npm_home=home,
        install_timeout=30,
    )
