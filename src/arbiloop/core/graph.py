"""Rate graph and line graph construction."""
import math
from typing import Dict, Iterable, Iterator, List, Mapping, Tuple, Union
from loguru import logger
from arbiloop.models import Token, Pool, LABEL_SEPARATOR, edge_label
from arbiloop.infrastructure.error_handling import DataFormatError, ErrorHandler


class Graph:
    """Directed weighted graph with O(1) edge lookup.

    Nodes and edges keep insertion order, so every traversal is deterministic.
    """

    def __init__(self):
        self._successors: Dict[str, List[str]] = {}
        self._weights: Dict[Tuple[str, str], float] = {}

    def add_node(self, node: str):
        if node not in self._successors:
            self._successors[node] = []

    def add_edge(self, from_node: str, to_node: str, weight: float):
        """Add or overwrite the edge from_node -> to_node."""
        self.add_node(from_node)
        self.add_node(to_node)
        key = (from_node, to_node)
        if key not in self._weights:
            self._successors[from_node].append(to_node)
        self._weights[key] = weight

    @property
    def nodes(self) -> List[str]:
        return list(self._successors)

    def successors(self, node: str) -> List[str]:
        return self._successors.get(node, [])

    def has_edge(self, from_node: str, to_node: str) -> bool:
        return (from_node, to_node) in self._weights

    def weight(self, from_node: str, to_node: str) -> float:
        return self._weights[(from_node, to_node)]

    def edges(self) -> Iterator[Tuple[str, str, float]]:
        """Yield (from, to, weight) grouped by source node."""
        for from_node, targets in self._successors.items():
            for to_node in targets:
                yield from_node, to_node, self._weights[(from_node, to_node)]

    @property
    def node_count(self) -> int:
        return len(self._successors)

    @property
    def edge_count(self) -> int:
        return len(self._weights)

    def __contains__(self, node: str) -> bool:
        return node in self._successors

    def __len__(self) -> int:
        return self.node_count


def rate_weight(price: float, fee_rate: float) -> float:
    """-ln of the fee-adjusted rate; +inf when nothing comes out."""
    rate = (1 - fee_rate) * price
    if rate <= 0:
        return math.inf
    return -math.log(rate)


def build_rate_graph(
    universe: Iterable[Union[Token, str]],
    pools: Iterable[Union[Pool, Mapping]],
    fee_rate: float = 0.003,
    error_handler: ErrorHandler | None = None,
) -> Graph:
    """Build the token graph weighted by negative log exchange rates.

    Pools outside the universe are skipped. Malformed pool records are
    dropped one by one; a build with no usable pool is an empty graph.
    """
    graph = Graph()
    token_ids = [t.id if isinstance(t, Token) else str(t) for t in universe]
    for token_id in token_ids:
        graph.add_node(token_id)

    used = dropped = 0
    for record in pools:
        try:
            pool = record if isinstance(record, Pool) else Pool.from_record(record)
            for token in (pool.token0, pool.token1):
                if LABEL_SEPARATOR in token.id:
                    raise DataFormatError(
                        f"Token id {token.id!r} contains {LABEL_SEPARATOR!r}"
                    )
        except DataFormatError as e:
            dropped += 1
            if error_handler:
                error_handler.record_error(e)
            logger.debug(f"Dropping malformed pool: {e}")
            continue

        a, b = pool.token0.id, pool.token1.id
        if a not in graph or b not in graph or a == b:
            continue
        if graph.has_edge(a, b):
            logger.warning(f"Ignoring duplicate pool {pool.id} for {a}/{b}")
            continue

        graph.add_edge(a, b, rate_weight(pool.token1_price, fee_rate))
        graph.add_edge(b, a, rate_weight(pool.token0_price, fee_rate))
        used += 1

    logger.info(
        f"Rate graph: {graph.node_count} tokens, {graph.edge_count} edges "
        f"from {used} pools ({dropped} malformed)"
    )
    return graph


def build_line_graph(graph: Graph) -> Graph:
    """Turn every edge A->B into a node "A-B".

    Node "A-B" links to "B-C" with the weight of B->C, except when C == A.
    """
    line_graph = Graph()

    for from_node, to_node, _ in graph.edges():
        line_graph.add_node(edge_label(from_node, to_node))

    for from_node, to_node, _ in graph.edges():
        for next_node in graph.successors(to_node):
            if next_node != from_node:
                line_graph.add_edge(
                    edge_label(from_node, to_node),
                    edge_label(to_node, next_node),
                    graph.weight(to_node, next_node),
                )

    logger.debug(
        f"Line graph: {line_graph.node_count} nodes, {line_graph.edge_count} edges"
    )
    return line_graph
