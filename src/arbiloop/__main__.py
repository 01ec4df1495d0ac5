#!/usr/bin/env python3
"""Command line entry point: python -m arbiloop <command>."""
import asyncio
import json
import sys
from pathlib import Path
from typing import List, Optional
from loguru import logger
from rich.console import Console
from arbiloop.config import config, Config
from arbiloop.core.arbitrage_engine import ArbitrageEngine
from arbiloop.data.dataset import load_pools, save_pools, load_tokens, save_tokens
from arbiloop.data.subgraph_client import SubgraphClient
from arbiloop.data.universe import select_universe
from arbiloop.infrastructure.error_handling import ArbitrageError
from arbiloop.monitoring.report import print_report


def setup_logging(settings: Config) -> int:
    """Add a rotating file sink next to the default stderr sink."""
    return logger.add(
        "logs/arbiloop_{time}.log",
        rotation="1 day",
        retention="7 days",
        level=settings.log_level,
    )


def fetch(settings: Config) -> int:
    """Download every pair from the subgraph into the pairs file."""
    async def _fetch():
        async with SubgraphClient(settings.dataset) as client:
            return await client.fetch_all()

    pairs = asyncio.run(_fetch())
    save_pools(settings.dataset.pairs_file, pairs)
    return 0


def select(settings: Config) -> int:
    """Write the token universe chosen from the pairs file."""
    pairs = load_pools(settings.dataset.pairs_file)
    tokens, _ = select_universe(pairs, settings.dataset)
    save_tokens(settings.dataset.tokens_file, tokens)
    return 0


def detect(settings: Config, json_path: Optional[str] = None, console: Optional[Console] = None) -> int:
    """Run the engine over the stored dataset and report the best cycles."""
    tokens = load_tokens(settings.dataset.tokens_file)
    pools = load_pools(settings.dataset.pairs_file)

    engine = ArbitrageEngine(settings.engine)
    result = engine.run(tokens, pools)
    print_report(result.opportunities, result.stats, settings.engine.top_n, console)
    engine.performance.log_summary()

    if json_path:
        path = Path(json_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps([o.to_dict() for o in result.opportunities], indent=2))
        logger.info(f"Opportunities written to {path}")
    return 0


def usage(console: Console):
    console.print("[yellow]Usage:[/]")
    console.print("  python -m arbiloop fetch                 - Download pairs from the subgraph")
    console.print("  python -m arbiloop select                - Choose the token universe by TVL")
    console.print("  python -m arbiloop detect [--json FILE]  - Detect and rank arbitrage cycles")


def main(argv: Optional[List[str]] = None, settings: Optional[Config] = None) -> int:
    """Main entry point."""
    argv = sys.argv[1:] if argv is None else argv
    settings = settings or config
    console = Console()

    if not argv:
        usage(console)
        return 2

    command = argv[0]
    sink_id = setup_logging(settings)

    try:
        if command == "fetch":
            return fetch(settings)
        elif command == "select":
            return select(settings)
        elif command == "detect":
            json_path = None
            if "--json" in argv:
                index = argv.index("--json")
                if index + 1 >= len(argv):
                    usage(console)
                    return 2
                json_path = argv[index + 1]
            return detect(settings, json_path, console)
        else:
            console.print(f"[red]Invalid command: {command}[/]")
            usage(console)
            return 2
    except (ArbitrageError, OSError) as e:
        logger.error(f"{command} failed: {e}")
        return 1
    finally:
        logger.remove(sink_id)


if __name__ == "__main__":
    sys.exit(main())
