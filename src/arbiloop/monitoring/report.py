"""Console report of ranked arbitrage opportunities."""
from typing import Dict, List, Optional
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from arbiloop.models import ArbitrageOpportunity


def render_opportunities(
    opportunities: List[ArbitrageOpportunity],
    top_n: int = 10,
) -> Table:
    """Create table of the best opportunities."""
    table = Table(show_header=True, header_style="bold magenta")

    table.add_column("#", justify="right", style="dim")
    table.add_column("Cycle", style="cyan")
    table.add_column("Optimal Input", justify="right")
    table.add_column("Profit", justify="right", style="green")
    table.add_column("Path")

    for rank, opp in enumerate(opportunities[:top_n], 1):
        path = "\n".join(
            f"{step.from_token} → {step.to_token}: {step.amount:.6f}"
            for step in opp.path
        )
        table.add_row(
            str(rank),
            " → ".join(opp.cycle.nodes),
            f"{opp.optimal_input:.6f}",
            f"{opp.profit:.6f} {opp.start_token}",
            path,
        )

    return table


def render_stats(stats: Dict) -> Table:
    """Create statistics table."""
    table = Table(show_header=False, box=None, padding=(0, 2))

    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right", style="yellow")

    for name, value in stats.items():
        table.add_row(name.replace("_", " ").title(), str(value))

    return table


def print_report(
    opportunities: List[ArbitrageOpportunity],
    stats: Optional[Dict] = None,
    top_n: int = 10,
    console: Optional[Console] = None,
):
    """Print the top opportunities and run statistics."""
    console = console or Console()

    console.print(
        f"[bold cyan]Detected {len(opportunities)} profitable arbitrage opportunities[/]"
    )
    if opportunities:
        console.print(Panel(render_opportunities(opportunities, top_n), title="Top Opportunities"))
    else:
        console.print(Panel("No opportunities detected...", title="Top Opportunities"))

    if stats:
        console.print(Panel(render_stats(stats), title="Scan Statistics"))
