# dk_search/cli/runner.py

"""Headless CLI search runner, reusing the async orchestrator."""

import json
import logging
import sys

from rich.console import Console
from rich.table import Table

from dk_search.models.product import Product
from dk_search.services.search_orchestrator import SearchOrchestrator

logger = logging.getLogger("dk_search.cli")

# Stderr console for status messages so stdout stays clean for JSON
_err = Console(stderr=True)


def _products_to_dicts(products: list[Product]) -> list[dict[str, object]]:
    """Serialise a product list to plain dicts for JSON output."""
    return [p.to_dict() for p in products]


def _print_table(products: list[Product]) -> None:
    """Render a Rich table of products to stdout, in rank order."""
    table = Table(
        title="Search Results",
        show_lines=True,
        title_style="bold cyan",
    )
    table.add_column("#", style="dim", width=4)
    table.add_column("Name", max_width=60)
    table.add_column("Price", justify="right", style="green")
    table.add_column("Rating", justify="center")
    table.add_column("Brand", style="magenta")
    table.add_column("Score", justify="right")
    table.add_column("URL", overflow="fold", style="dim")

    for idx, p in enumerate(products, 1):
        table.add_row(
            str(idx),
            p.name[:60],
            p.price,
            p.rating,
            p.brand,
            f"{p.relevance_score:.1f}",
            p.url,
        )

    Console().print(table)


async def cli_search(
    query: str,
    limit: int,
    override_term: str | None,
    output_format: str,
    max_workers: int | None = None,
    orchestrator: SearchOrchestrator | None = None,
) -> int:
    """Run a headless search and return an exit code (0=ok, 1=fail)."""
    if not query.strip():
        _err.print("[red]Query must not be blank.[/red]")
        return 1

    orchestrator = orchestrator or SearchOrchestrator(
        max_workers=max_workers
    )
    mode = "AI + rules" if orchestrator.expander.uses_ai else "rules"
    _err.print(
        f"[bold]Searching:[/bold] {query}  "
        f"[dim]limit={limit} expansion={mode}[/dim]"
    )

    result = await orchestrator.run(query, limit, override_term)

    if result.candidate_terms:
        terms = ", ".join(
            f"{c.text} ({c.strategy_tag.value})"
            for c in result.candidate_terms
        )
        _err.print(f"[dim]Terms: {terms}[/dim]")

    for error_msg in result.errors:
        _err.print(f"[red]Error: {error_msg}[/red]")

    if not result.products:
        _err.print("[yellow]No products found.[/yellow]")
        return 1

    detail = (
        f" ({result.deduplicated_count} deduped)"
        if result.deduplicated_count
        else ""
    )
    _err.print(
        f"[green]✓ {len(result.products)} products"
        f" of {result.total_before_dedup}{detail}[/green]"
    )

    if output_format == "table":
        _print_table(result.products)
    else:
        json.dump(
            _products_to_dicts(result.products),
            sys.stdout,
            ensure_ascii=False,
            indent=2,
        )
        sys.stdout.write("\n")

    return 0


async def run_health_check() -> int:
    """Run a connectivity health check on the site's endpoints."""
    from dk_search.services.health_checker import HealthChecker

    _err.print("[bold]Running endpoint health check...[/bold]")
    checker = HealthChecker()
    results = await checker.check_all()

    table = Table(
        title="Endpoint Health Check",
        show_lines=True,
        title_style="bold cyan",
    )
    table.add_column("Endpoint", style="bold")
    table.add_column("Status", justify="center")
    table.add_column("Latency", justify="right")
    table.add_column("Notes", style="dim")

    any_down = False
    for r in results:
        if r.status == "ok":
            status = "[green]✅ OK[/green]"
        elif r.status == "slow":
            status = "[yellow]⚠️  SLOW[/yellow]"
        else:
            status = "[red]❌ DOWN[/red]"
            any_down = True

        latency = (
            f"{r.latency_ms:.0f}ms"
            if r.latency_ms > 0
            else "—"
        )
        table.add_row(r.endpoint, status, latency, r.message)

    Console().print(table)
    return 1 if any_down else 0
