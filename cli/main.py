"""Rental Scout CLI — entry-point for crawls and store maintenance.

Usage:
    python cli/main.py --help

Commands:
    crawl     → walk the listing index and save fresh owner listings
    listings  → print the persisted listings
    merge     → fold another listing workbook into the store
"""

from __future__ import annotations

import sys
from pathlib import Path

# Ensure the project root is on sys.path so that `from scout.xxx import ...`
# works when the CLI is invoked as `python cli/main.py` from any directory.
_ROOT = Path(__file__).resolve().parent.parent
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

import logging
from dataclasses import replace
from typing import Optional

import typer

from scout.config import settings

app = typer.Typer(
    name="scout",
    help="Rental Scout CLI.",
    no_args_is_help=True,
)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)-7s %(message)s",
        datefmt="%H:%M:%S",
        force=True,
    )


def _resolve_output(output: Optional[Path]) -> Path:
    if output is not None:
        return output
    settings.ensure_workspace()
    return settings.output_path


# ---------------------------------------------------------------------------
# Crawl
# ---------------------------------------------------------------------------
@app.command("crawl")
def crawl_cmd(
    start_url: Optional[str] = typer.Option(None, help="First index page (defaults to SCOUT_START_URL)."),
    output: Optional[Path] = typer.Option(None, help="Workbook to merge results into."),
    max_pages: Optional[int] = typer.Option(None, help="Hard limit on index pages (0 = unlimited)."),
    headed: bool = typer.Option(False, "--headed", help="Show the browser window."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log every decision at DEBUG level."),
) -> None:
    """Crawl the listing index and save newly found listings."""
    from scout.agent.runner import run_crawl

    _configure_logging(verbose)
    url = start_url or settings.start_url
    if not url:
        typer.echo("[crawl] No start URL. Pass --start-url or set SCOUT_START_URL.", err=True)
        raise typer.Exit(2)

    config = replace(settings)
    if max_pages is not None:
        config.max_pages = max_pages
    if headed:
        config.headless = False
    path = _resolve_output(output)

    typer.echo(f"[crawl] Starting at {url!r} …")
    try:
        report = run_crawl(config, start_url=url, output_path=path)
    except Exception as exc:
        logging.getLogger("scout").exception("[crawl] fatal error")
        typer.echo(f"[crawl] Failed: {exc}", err=True)
        raise typer.Exit(1)

    typer.echo(f"[crawl] Pages  : {report.crawl.pages_visited}")
    typer.echo(f"[crawl] Valid  : {report.new_listings}")
    if report.saved is not None:
        saved = report.saved
        typer.echo(
            f"[crawl] Saved  : {saved.total} listing(s) "
            f"({saved.added} new + {saved.existing} existing) → {saved.path}"
        )
    else:
        typer.echo(f"[crawl] Store not written: {report.store_error}", err=True)


# ---------------------------------------------------------------------------
# Store
# ---------------------------------------------------------------------------
@app.command("listings")
def listings_cmd(
    output: Optional[Path] = typer.Option(None, help="Workbook to read."),
    limit: int = typer.Option(0, help="Show only the last N listings (0 = all)."),
) -> None:
    """Print the persisted listings."""
    from scout.store import load_listings

    path = _resolve_output(output)
    rows = load_listings(path)
    if not rows:
        typer.echo(f"[listings] No listings in {path}.")
        return
    shown = rows[-limit:] if limit > 0 else rows
    for row in shown:
        typer.echo(f"  {row.date:<12} {row.location:<40} {row.url}")
    typer.echo(f"[listings] {len(shown)} of {len(rows)} listing(s).")


@app.command("merge")
def merge_cmd(
    source: Path = typer.Argument(..., exists=True, dir_okay=False, help="Workbook to merge from."),
    output: Optional[Path] = typer.Option(None, help="Workbook to merge into."),
) -> None:
    """Merge the rows of another workbook into the store (deduplicated by URL)."""
    from scout.errors import StoreWriteError
    from scout.store import load_listings, save_new_listings

    path = _resolve_output(output)
    incoming = load_listings(source)
    try:
        summary = save_new_listings(path, incoming)
    except StoreWriteError as exc:
        typer.echo(f"[merge] {exc}", err=True)
        raise typer.Exit(1)
    typer.echo(
        f"[merge] {summary.added} new listing(s) added; {summary.total} total in {summary.path}"
    )


# ---------------------------------------------------------------------------
# Entry-point
# ---------------------------------------------------------------------------
if __name__ == "__main__":
    app()
