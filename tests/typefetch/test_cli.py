"""Tests for CLI commands — the extractor is mocked, no npm needed."""

from __future__ import annotations

import json
from unittest.mock import AsyncMock, patch

import pytest
from click.testing import CliRunner

from typefetch.cli import main
from typefetch.engines.typings_extractor.models import ExtractionResult, FileRecord
from typefetch.exceptions import InstallError

EXTRACT = "typefetch.cli.TypingsExtractor.extract"


def _result(dropped: int | None = None) -> ExtractionResult:
    return ExtractionResult(
        files={
            "/csstype/index.d.ts": FileRecord("/csstype/index.d.ts", "export type C = string;"),
            "/csstype/package.json": FileRecord("/csstype/package.json", '{"types":"index.d.ts"}'),
        },
        dropped_file_count=dropped,
    )


@pytest.fixture(autouse=True)
def _env(tmp_path, monkeypatch):
    monkeypatch.setenv("TYPEFETCH_SCRATCH_ROOT", str(tmp_path / "scratch"))
    monkeypatch.delenv("TYPEFETCH_MAX_RESPONSE_BYTES", raising=False)


class TestFetch:
    def test_summary(self):
        with patch(EXTRACT, new=AsyncMock(return_value=_result())):
            result = CliRunner().invoke(main, ["fetch", "csstype"])
        assert result.exit_code == 0, result.output
        assert "Collected 2 file(s) for csstype" in result.output
        assert "/csstype/index.d.ts" in result.output

    def test_summary_mentions_dropped_files(self):
        with patch(EXTRACT, new=AsyncMock(return_value=_result(dropped=4))):
            result = CliRunner().invoke(main, ["fetch", "csstype"])
        assert "4 file(s) dropped" in result.output

    def test_nothing_found(self):
        with patch(EXTRACT, new=AsyncMock(return_value=ExtractionResult())):
            result = CliRunner().invoke(main, ["fetch", "lodash"])
        assert result.exit_code == 0
        assert "No type declarations found for lodash." in result.output

    def test_json_output(self):
        with patch(EXTRACT, new=AsyncMock(return_value=_result(dropped=1))):
            result = CliRunner().invoke(main, ["fetch", "csstype", "--json"])
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["status"] == "ok"
        assert data["files"]["/csstype/index.d.ts"] == {"module": "export type C = string;"}
        assert data["droppedFileCount"] == 1

    def test_out_writes_files(self, tmp_path):
        out = tmp_path / "typings"
        with patch(EXTRACT, new=AsyncMock(return_value=_result())):
            result = CliRunner().invoke(main, ["fetch", "csstype", "--out", str(out)])
        assert result.exit_code == 0, result.output
        assert (out / "csstype" / "index.d.ts").read_text() == "export type C = string;"
        assert (out / "csstype" / "package.json").is_file()
        assert "Wrote 2 file(s)" in result.output

    def test_out_refuses_escaping_paths(self, tmp_path):
        evil = ExtractionResult(files={"/../escape.d.ts": FileRecord("/../escape.d.ts", "")})
        with patch(EXTRACT, new=AsyncMock(return_value=evil)):
            result = CliRunner().invoke(
                main, ["fetch", "x", "--out", str(tmp_path / "typings")]
            )
        assert result.exit_code != 0
        assert not (tmp_path / "escape.d.ts").exists()

    def test_install_error_exits_nonzero(self):
        err = InstallError("ghost@latest", 1, "npm ERR! 404")
        with patch(EXTRACT, new=AsyncMock(side_effect=err)):
            result = CliRunner().invoke(main, ["fetch", "ghost"])
        assert result.exit_code == 1
        assert "ghost@latest" in result.output

    def test_max_bytes_override(self):
        seen = {}

        async def fake_extract(self, specifier):
            seen["max"] = self.settings.max_response_bytes
            return ExtractionResult()

        with patch(EXTRACT, new=fake_extract):
            result = CliRunner().invoke(main, ["fetch", "react", "--max-bytes", "4096"])
        assert result.exit_code == 0, result.output
        assert seen["max"] == 4096

    def test_invalid_max_bytes_is_reported(self):
        result = CliRunner().invoke(main, ["fetch", "react", "--max-bytes", "1"])
        assert result.exit_code != 0
        assert "max_response_bytes" in result.output
