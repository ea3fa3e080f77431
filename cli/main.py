"""bizprofile CLI: entry-point for profile runs from the terminal.

Usage:
    python cli/main.py --help

Commands:
    profile  → crawl a site and print its business-profile record
    crawl    → crawl only; list fetched pages and corpus statistics
    check    → report whether the summarisation model is configured
"""

from __future__ import annotations

import sys
from pathlib import Path

# Ensure the project root is on sys.path so that `from backend.xxx import ...`
# works when the CLI is invoked as `python cli/main.py` from any directory.
_ROOT = Path(__file__).resolve().parent.parent
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

import json

import typer

from backend.config import settings
from backend.errors import ProfileError
from cli.rendering import render_crawl, render_record

app = typer.Typer(
    name="bizprofile",
    help="Small-business website profiler.",
    no_args_is_help=True,
)


@app.command("profile")
def profile(
    url: str = typer.Argument(..., help="Website to profile (http:// or https://)."),
    no_summary: bool = typer.Option(
        False, "--no-summary", help="Skip the summarisation model; extracted fields only."
    ),
    as_json: bool = typer.Option(False, "--json", help="Print the record as JSON."),
) -> None:
    """Crawl a site and print its business-profile record."""
    from backend.profile.service import build_profile

    typer.echo(f"[profile] Profiling {url!r} …")
    try:
        record = build_profile(url, summarize=not no_summary)
    except ProfileError as exc:
        typer.echo(f"[profile] Error: {exc.message}", err=True)
        raise typer.Exit(1)

    if as_json:
        typer.echo(json.dumps(record.to_dict(), indent=2))
    else:
        typer.echo("\n" + "=" * 72)
        typer.echo(render_record(record))
        typer.echo("=" * 72)


@app.command("crawl")
def crawl(
    url: str = typer.Argument(..., help="Website to crawl (http:// or https://)."),
) -> None:
    """Crawl a site and list the pages fetched, without extracting fields."""
    from backend.scraper import CrawlTarget, walk

    try:
        target = CrawlTarget.parse(url)
    except ProfileError as exc:
        typer.echo(f"[crawl] Error: {exc.message}", err=True)
        raise typer.Exit(1)

    result = walk(target)
    typer.echo(render_crawl(result))


@app.command("check")
def check() -> None:
    """Report whether the summarisation model has credentials, and which model."""
    typer.echo(f"[check] Provider : {settings.llm_provider}")
    typer.echo(f"[check] Model    : {settings.active_model}")
    typer.echo(f"[check] Has key  : {'yes' if settings.has_llm_credentials else 'no'}")


# ---------------------------------------------------------------------------
# Entry-point
# ---------------------------------------------------------------------------
if __name__ == "__main__":
    app()
