"""Pool dataset acquisition, persistence and universe selection."""

from .dataset import load_pools, save_pools, load_tokens, save_tokens, parse_tokens
from .subgraph_client import SubgraphClient
from .universe import select_universe

__all__ = [
    "load_pools",
    "save_pools",
    "load_tokens",
    "save_tokens",
    "parse_tokens",
    "SubgraphClient",
    "select_universe",
]
