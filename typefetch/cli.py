"""CLI entry point: typefetch.

Subcommands:
    typefetch fetch react@18.2.0                 # summary of collected files
    typefetch fetch @types/node --json           # full JSON payload on stdout
    typefetch fetch lodash --out ./typings       # write files beneath ./typings
    typefetch serve --port 8000                  # run the HTTP API
"""

from __future__ import annotations

import asyncio
import dataclasses
import json
import sys
from pathlib import Path

import click

from typefetch.core.config import Settings
from typefetch.core.logging import setup_logging
from typefetch.engines.typings_extractor import ExtractionResult, TypingsExtractor
from typefetch.exceptions import ConfigError, TypefetchError


def _load_settings(max_bytes: int | None) -> Settings:
    try:
        settings = Settings.from_env()
        if max_bytes is not None:
            settings = dataclasses.replace(settings, max_response_bytes=max_bytes)
    except ConfigError as e:
        raise click.ClickException(str(e)) from e
    return settings


def _write_files(result: ExtractionResult, out_dir: Path) -> int:
    """Write every emitted file under *out_dir*; returns the number written."""
    root = out_dir.resolve()
    written = 0
    for path, record in result.files.items():
        target = (root / path.lstrip("/")).resolve()
        if not target.is_relative_to(root):
            raise click.ClickException(f"refusing to write outside {root}: {path}")
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(record.content, encoding="utf-8")
        written += 1
    return written


def _print_summary(specifier: str, result: ExtractionResult) -> None:
    if not result.files:
        click.echo(f"No type declarations found for {specifier}.")
        return

    total = sum(len(rec.content.encode("utf-8")) for rec in result.files.values())
    click.echo(f"Collected {len(result.files)} file(s) for {specifier} ({total} bytes)\n")
    for path in result.files:
        click.echo(f"  {path}")
    if result.truncated:
        click.echo(f"\n  {result.dropped_file_count} file(s) dropped to fit the size budget")


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Verbose logging")
def main(verbose: bool) -> None:
    """Fetch TypeScript declaration files for npm dependencies."""
    setup_logging(level="DEBUG" if verbose else None, stream=sys.stderr)


@main.command()
@click.argument("specifier")
@click.option("--json", "as_json", is_flag=True, help="Print the JSON payload")
@click.option(
    "--out",
    "out_dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Write collected files beneath this directory",
)
@click.option("--max-bytes", type=int, default=None, help="Override the response budget")
def fetch(specifier: str, as_json: bool, out_dir: Path | None, max_bytes: int | None) -> None:
    """Install SPECIFIER in a scratch directory and collect its typings."""
    extractor = TypingsExtractor(_load_settings(max_bytes))
    try:
        result = asyncio.run(extractor.extract(specifier))
    except TypefetchError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    if out_dir is not None:
        count = _write_files(result, out_dir)
        click.echo(f"Wrote {count} file(s) to {out_dir}", err=as_json)

    if as_json:
        click.echo(json.dumps({"status": "ok", **result.to_payload()}, ensure_ascii=False))
    elif out_dir is None:
        _print_summary(specifier, result)


@main.command()
@click.option("--host", default="127.0.0.1", help="Bind address")
@click.option("--port", default=8000, type=int, help="Bind port")
def serve(host: str, port: int) -> None:
    """Run the HTTP API with uvicorn."""
    import uvicorn

    from typefetch.api import create_app

    try:
        app = create_app()
    except ConfigError as e:
        raise click.ClickException(str(e)) from e
    uvicorn.run(app, host=host, port=port, log_config=None)


if __name__ == "__main__":
    main()
