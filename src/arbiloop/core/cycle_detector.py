"""Negative cycle detection over the line graph."""
import math
from concurrent.futures import ProcessPoolExecutor
from typing import Dict, List, Optional, Sequence
from loguru import logger
from arbiloop.core.graph import Graph
from arbiloop.models import Cycle

# graph shared with pool workers, set once per process by _init_worker
_worker_graph: Optional[Graph] = None


def detect_negative_cycles(graph: Graph, source: str) -> List[Cycle]:
    """Bellman-Ford from source, then one extra pass to expose negative cycles.

    Every edge u -> v that still relaxes after |V| - 1 rounds yields one
    cycle: the predecessor walk back from u, reversed and prefixed with v.
    Walks that stop on a repeated node (or run out of predecessors) are
    returned with closed=False rather than discarded.
    """
    if source not in graph:
        return []

    nodes = graph.nodes
    edges = list(graph.edges())
    distances: Dict[str, float] = {node: math.inf for node in nodes}
    predecessors: Dict[str, Optional[str]] = {node: None for node in nodes}
    distances[source] = 0.0

    for _ in range(len(nodes) - 1):
        changed = False
        for u, v, weight in edges:
            if distances[u] + weight < distances[v]:
                distances[v] = distances[u] + weight
                predecessors[v] = u
                changed = True
        if not changed:
            break

    cycles = []
    for u, v, weight in edges:
        if distances[u] + weight < distances[v]:
            cycles.append(_reconstruct(u, v, predecessors, len(nodes)))
    return cycles


def _reconstruct(
    u: str,
    v: str,
    predecessors: Dict[str, Optional[str]],
    limit: int,
) -> Cycle:
    if u == v:
        return Cycle(nodes=(v,), closed=True)

    walk = [u]
    seen = {u}
    closed = False
    current = u

    while len(walk) < limit:
        previous = predecessors[current]
        if previous == v:
            closed = True
            break
        if previous is None or previous in seen:
            break
        walk.append(previous)
        seen.add(previous)
        current = previous

    walk.reverse()
    return Cycle(nodes=(v, *walk), closed=closed)


def _init_worker(graph: Graph):
    global _worker_graph
    _worker_graph = graph


def _detect_in_worker(source: str) -> List[Cycle]:
    return detect_negative_cycles(_worker_graph, source)


def detect_all_cycles(
    graph: Graph,
    max_workers: int = 1,
    sources: Optional[Sequence[str]] = None,
) -> List[Cycle]:
    """Run detection from every node (or the given sources).

    The same cycle is usually found from several sources; duplicates are
    kept. Results are concatenated in source order whatever the worker count.
    """
    sources = list(graph.nodes if sources is None else sources)
    if not sources:
        return []

    if max_workers <= 1 or len(sources) == 1:
        per_source = [detect_negative_cycles(graph, source) for source in sources]
    else:
        logger.debug(f"Dispatching {len(sources)} sources to {max_workers} workers")
        chunksize = max(1, len(sources) // (max_workers * 4))
        with ProcessPoolExecutor(
            max_workers=max_workers,
            initializer=_init_worker,
            initargs=(graph,),
        ) as pool:
            per_source = list(pool.map(_detect_in_worker, sources, chunksize=chunksize))

    cycles = [cycle for found in per_source for cycle in found]
    degenerate = sum(1 for cycle in cycles if not cycle.closed)
    logger.info(
        f"Detected {len(cycles)} candidate cycles from {len(sources)} sources "
        f"({degenerate} degenerate)"
    )
    return cycles
