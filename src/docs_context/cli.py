"""Command-line interface for docs-context.

Usage:
    docs-context docs --library-name react --query "useEffect cleanup"
    docs-context docs --url https://docs.example.com/start
    docs-context github facebook/react
    docs-context classify git@github.com:pallets/click.git
    docs-context trending --per-page 5

Environment Variables:
    CONTEXT7_API_KEY, GITHUB_TOKEN (optional; see docs_context.config)
"""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from collections.abc import AsyncIterator

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .classifier import classify
from .config import DOCUMENTATION_PRESETS, Settings
from .engine import RetrievalEngine
from .errors import GitHubError
from .github_client import GitHubClient
from .models import InvocationState, InvocationStatus, RepositoryMetadata, RetrievalResult

console = Console()
logger = logging.getLogger(__name__)


async def _drain(states: AsyncIterator[InvocationState], label: str) -> InvocationState:
    final = InvocationState.failed("Invocation produced no result.")
    status = console.status(f"[bold blue]{label}...[/bold blue]")
    try:
        async for state in states:
            if state.state is InvocationStatus.LOADING:
                status.start()
                continue
            final = state
    finally:
        status.stop()
    return final


def _print_docs(result: RetrievalResult) -> None:
    console.print(Panel(result.summary, title=f"[bold]{result.title}[/bold] ({result.source.value})"))
    for section in result.sections:
        console.print(f"[bold cyan]{section.heading}[/bold cyan]")
        console.print(section.snippet)
        if section.citation_url:
            console.print(f"[dim]{section.citation_url}[/dim]")
        console.print()
    if result.fallback:
        for name, body in (("llms.txt", result.fallback.llms_txt), ("llms-full.txt", result.fallback.llms_full_txt)):
            marker = "[green]✓[/green]" if body else "[dim]-[/dim]"
            console.print(f"{marker} {name}")


def _print_repository(metadata: RepositoryMetadata | None) -> None:
    if metadata is None:
        console.print("[yellow]No repository data was returned.[/yellow]")
        return
    table = Table(title=metadata.full_name, show_header=False)
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    for key, value in metadata.to_dict().items():
        table.add_row(key, "" if value is None else str(value))
    console.print(table)


def _finish(state: InvocationState, as_json: bool) -> None:
    if as_json:
        click.echo(json.dumps(state.to_dict(), indent=2))
    elif state.state is InvocationStatus.ERROR:
        console.print(f"[bold red]✗ {state.error}[/bold red]")
    elif state.docs is not None:
        _print_docs(state.docs)
    else:
        _print_repository(state.github)

    if state.state is InvocationStatus.ERROR:
        sys.exit(1)


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
@click.pass_context
def main(ctx: click.Context, verbose: bool) -> None:
    """Retrieve grounding context for documentation and GitHub questions."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG)
    else:
        logging.basicConfig(level=logging.INFO)
    ctx.obj = Settings.from_env()


@main.command()
@click.option("--url", help="Docs page URL to summarize")
@click.option("--library-name", help="Library name for structured lookup (e.g. react)")
@click.option("--library-id", help="Library identifier (e.g. /vercel/next.js)")
@click.option("--query", default="Documentation overview", show_default=True, help="Question to ground")
@click.option("--max-chars", type=int, default=6000, show_default=True)
@click.option("--max-section-chars", type=int, default=1200, show_default=True)
@click.option("--max-sentences", type=int, default=5, show_default=True)
@click.option("--json", "as_json", is_flag=True, help="Print the terminal state as JSON")
@click.pass_obj
def docs(
    settings: Settings,
    url: str | None,
    library_name: str | None,
    library_id: str | None,
    query: str,
    max_chars: int,
    max_section_chars: int,
    max_sentences: int,
    as_json: bool,
) -> None:
    """Fetch documentation via structured lookup or a URL fallback."""
    request = {
        "query": query,
        "url": url,
        "library_name": library_name,
        "library_id": library_id,
        "max_chars": max_chars,
        "max_section_chars": max_section_chars,
        "max_sentences": max_sentences,
    }

    async def run() -> InvocationState:
        async with RetrievalEngine(settings) as engine:
            return await _drain(engine.retrieve_docs(request), "Retrieving docs")

    _finish(asyncio.run(run()), as_json)


@main.command()
@click.argument("reference")
@click.option("--json", "as_json", is_flag=True, help="Print the terminal state as JSON")
@click.pass_obj
def github(settings: Settings, reference: str, as_json: bool) -> None:
    """Get repository data from GitHub for REFERENCE."""

    async def run() -> InvocationState:
        async with RetrievalEngine(settings) as engine:
            return await _drain(engine.retrieve_github(reference), "Fetching repository")

    _finish(asyncio.run(run()), as_json)


@main.command(name="classify")
@click.argument("reference")
def classify_command(reference: str) -> None:
    """Show how REFERENCE would be routed."""
    result = classify(reference)
    console.print(f"[bold]kind:[/bold] {result.kind.value}")
    if result.github:
        ref = result.github
        for label, value in (
            ("owner", ref.owner),
            ("repo", ref.repo),
            ("ref", ref.ref),
            ("path", ref.path),
            ("url", GitHubClient.get_html_url(ref.owner, ref.repo, ref.ref, ref.path)),
        ):
            if value:
                console.print(f"  {label}: {value}")
    elif result.docs:
        for label, value in (
            ("host", result.docs.host),
            ("section", result.docs.section),
            ("page", result.docs.page),
            ("path", result.docs.path),
        ):
            if value:
                console.print(f"  {label}: {value}")


@main.command()
@click.option("--date", help="Created on or after (YYYY-MM-DD, default today UTC)")
@click.option("--per-page", type=int, default=10, show_default=True)
@click.option("--json", "as_json", is_flag=True, help="Print the listing as JSON")
@click.pass_obj
def trending(settings: Settings, date: str | None, per_page: int, as_json: bool) -> None:
    """List today's most-starred new repositories."""

    async def run():
        async with RetrievalEngine(settings) as engine:
            return await engine.trending(date=date, per_page=per_page)

    try:
        listing = asyncio.run(run())
    except GitHubError as e:
        console.print(f"[bold red]✗ {e}[/bold red]")
        sys.exit(1)

    if as_json:
        click.echo(json.dumps(listing.to_dict(), indent=2))
        return

    table = Table(title=f"Trending since {listing.date}")
    table.add_column("Repository", style="cyan")
    table.add_column("Language")
    table.add_column("Stars", justify="right")
    table.add_column("Forks", justify="right")
    for repo in listing.repos:
        table.add_row(repo.full_name, repo.language or "", str(repo.stars), str(repo.forks))
    console.print(table)
    console.print(f"[dim]{listing.note}[/dim]")


@main.command()
def presets() -> None:
    """List well-known documentation sites."""
    table = Table(show_header=True)
    table.add_column("Label", style="cyan")
    table.add_column("URL")
    for label, url in DOCUMENTATION_PRESETS:
        table.add_row(label, url)
    console.print(table)


if __name__ == "__main__":
    main()
