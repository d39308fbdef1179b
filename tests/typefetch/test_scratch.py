"""Tests for scratch directory naming, removal and the stale sweep."""

from __future__ import annotations

import os
import time
from unittest.mock import patch

import pytest

from typefetch.engines.typings_extractor.models import DependencySpecifier
from typefetch.engines.typings_extractor.scratch import (
    SCRATCH_PREFIX,
    new_scratch_handle,
    reap,
    scratch_directory,
    sweep_stale_scratch,
)
from typefetch.engines.typings_extractor.specifier import scratch_id

SPEC = DependencySpecifier("@types/node", "20.0.0")


class TestNewScratchHandle:
    def test_name_carries_deterministic_id(self, tmp_path):
        handle = new_scratch_handle(SPEC, tmp_path)
        assert handle.id == scratch_id("@types/node", "20.0.0")
        assert handle.root_path.parent == tmp_path
        assert handle.root_path.name.startswith(f"{SCRATCH_PREFIX}{handle.id}-")

    def test_same_specifier_gets_disjoint_directories(self, tmp_path):
        first = new_scratch_handle(SPEC, tmp_path)
        second = new_scratch_handle(SPEC, tmp_path)
        assert first.id == second.id
        assert first.root_path != second.root_path

    def test_package_root(self, tmp_path):
        handle = new_scratch_handle(SPEC, tmp_path)
        assert handle.package_root == handle.root_path / "node_modules"


class TestScratchDirectory:
    def test_removed_after_success(self, tmp_path):
        with scratch_directory(SPEC, tmp_path) as handle:
            assert handle.root_path.is_dir()
            (handle.package_root / "pkg").mkdir(parents=True)
            (handle.package_root / "pkg" / "index.d.ts").write_text("export {};")
        assert not handle.root_path.exists()
        assert list(tmp_path.iterdir()) == []

    def test_removed_after_error(self, tmp_path):
        with pytest.raises(RuntimeError, match="boom"):
            with scratch_directory(SPEC, tmp_path) as handle:
                (handle.root_path / "partial").write_text("x")
                raise RuntimeError("boom")
        assert not handle.root_path.exists()

    def test_creates_missing_base(self, tmp_path):
        base = tmp_path / "does" / "not" / "exist"
        with scratch_directory(SPEC, base) as handle:
            assert handle.root_path.is_dir()
        assert base.is_dir()

    def test_reap_failure_does_not_mask_primary_error(self, tmp_path):
        with patch(
            "typefetch.engines.typings_extractor.scratch.shutil.rmtree",
            side_effect=PermissionError("denied"),
        ):
            with pytest.raises(ValueError, match="primary"):
                with scratch_directory(SPEC, tmp_path):
                    raise ValueError("primary")

    def test_reap_failure_is_swallowed_on_success(self, tmp_path):
        with patch(
            "typefetch.engines.typings_extractor.scratch.shutil.rmtree",
            side_effect=PermissionError("denied"),
        ):
            with scratch_directory(SPEC, tmp_path) as handle:
                pass
        assert handle.root_path.exists()

    def test_reap_tolerates_missing_directory(self, tmp_path):
        handle = new_scratch_handle(SPEC, tmp_path)
        reap(handle)
        assert not handle.root_path.exists()


class TestSweepStaleScratch:
    def _age(self, path, seconds):
        old = time.time() - seconds
        os.utime(path, (old, old))

    def test_removes_only_old_scratch_dirs(self, tmp_path):
        old = tmp_path / f"{SCRATCH_PREFIX}aaaa-0001"
        fresh = tmp_path / f"{SCRATCH_PREFIX}bbbb-0002"
        unrelated = tmp_path / "something-else"
        for d in (old, fresh, unrelated):
            (d / "node_modules").mkdir(parents=True)
        self._age(old, 7200)
        self._age(unrelated, 7200)

        removed = sweep_stale_scratch(tmp_path, max_age=3600)

        assert removed == 1
        assert not old.exists()
        assert fresh.exists()
        assert unrelated.exists()

    def test_ignores_plain_files(self, tmp_path):
        stray = tmp_path / f"{SCRATCH_PREFIX}file"
        stray.write_text("x")
        self._age(stray, 7200)
        assert sweep_stale_scratch(tmp_path, max_age=1) == 0
        assert stray.exists()

    def test_missing_base(self, tmp_path):
        assert sweep_stale_scratch(tmp_path / "nope", max_age=1) == 0
