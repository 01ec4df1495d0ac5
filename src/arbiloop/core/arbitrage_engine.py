"""Pool-graph arbitrage detection engine."""
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Union
from loguru import logger
from arbiloop.config import EngineConfig
from arbiloop.models import ArbitrageOpportunity, Cycle, Pool, Token
from arbiloop.core.graph import build_rate_graph, build_line_graph
from arbiloop.core.cycle_detector import detect_all_cycles
from arbiloop.core.optimizer import ProfitOptimizer
from arbiloop.core.collector import OpportunityCollector
from arbiloop.infrastructure.error_handling import (
    DataFormatError, ErrorHandler, PairNotFoundError
)
from arbiloop.infrastructure.performance import PerformanceMonitor


@dataclass
class ScanResult:
    """Ranked opportunities plus counters describing the run."""
    opportunities: List[ArbitrageOpportunity]
    stats: Dict[str, Any] = field(default_factory=dict)

    def top(self, n: int) -> List[ArbitrageOpportunity]:
        return self.opportunities[:n]


class ArbitrageEngine:
    """Finds profitable cycles across a snapshot of liquidity pools."""

    def __init__(
        self,
        config: EngineConfig | None = None,
        performance_monitor: PerformanceMonitor | None = None,
    ):
        """Initialise arbitrage engine."""
        self.config = config or EngineConfig()
        self.performance = performance_monitor or PerformanceMonitor()
        self.error_handler = ErrorHandler()

    def run(
        self,
        tokens: Iterable[Union[Token, Mapping, str]],
        pools: Iterable[Union[Pool, Mapping]],
    ) -> ScanResult:
        """Build the graphs, detect cycles from every source and size each one."""
        self.error_handler.reset()
        universe = self._parse_universe(tokens)
        parsed_pools = self._parse_pools(pools)

        with self.performance.measure("rate_graph"):
            rate_graph = build_rate_graph(
                universe, parsed_pools, self.config.fee_rate, self.error_handler
            )
        with self.performance.measure("line_graph"):
            line_graph = build_line_graph(rate_graph)
        with self.performance.measure("cycle_detection"):
            cycles = detect_all_cycles(line_graph, max_workers=self.config.max_workers)

        candidates = self._unique(cycles) if self.config.deduplicate else cycles
        optimizer = ProfitOptimizer(parsed_pools, self.config)
        collector = OpportunityCollector(deduplicate=self.config.deduplicate)

        with self.performance.measure("optimisation"):
            for cycle in candidates:
                try:
                    result = optimizer.optimize(cycle)
                except PairNotFoundError as e:
                    # BrokenCycleError included
                    self.error_handler.record_error(e)
                    logger.warning(f"Skipping cycle {cycle}: {e}")
                    continue
                collector.add(ArbitrageOpportunity(
                    cycle=cycle,
                    optimal_input=result.optimal_input,
                    profit=result.profit,
                    path=result.steps,
                ))

        opportunities = collector.ranked()
        stats = {
            'tokens': len(universe),
            'pools': len(parsed_pools),
            'rate_edges': rate_graph.edge_count,
            'line_nodes': line_graph.node_count,
            'line_edges': line_graph.edge_count,
            'candidate_cycles': len(cycles),
            'evaluated_cycles': len(candidates),
            'degenerate_cycles': sum(1 for c in cycles if not c.closed),
            'skipped_cycles': (
                self.error_handler.count("PairNotFoundError")
                + self.error_handler.count("BrokenCycleError")
            ),
            'malformed_pools': self.error_handler.count("DataFormatError"),
            'opportunities': len(opportunities),
        }

        logger.success(
            f"Found {len(opportunities)} profitable opportunities "
            f"from {len(candidates)} cycles"
        )
        return ScanResult(opportunities=opportunities, stats=stats)

    def _parse_universe(self, tokens) -> List[Token]:
        universe = []
        for token in tokens:
            if isinstance(token, Token):
                universe.append(token)
            elif isinstance(token, str):
                universe.append(Token(id=token))
            else:
                try:
                    universe.append(Token.from_record(token))
                except DataFormatError as e:
                    self.error_handler.record_error(e)
                    logger.debug(f"Dropping malformed token: {e}")
        return universe

    def _parse_pools(self, pools) -> List[Pool]:
        parsed = []
        for record in pools:
            if isinstance(record, Pool):
                parsed.append(record)
                continue
            try:
                parsed.append(Pool.from_record(record))
            except DataFormatError as e:
                self.error_handler.record_error(e)
                logger.debug(f"Dropping malformed pool: {e}")
        return parsed

    @staticmethod
    def _unique(cycles: List[Cycle]) -> List[Cycle]:
        seen = set()
        unique = []
        for cycle in cycles:
            if cycle.key not in seen:
                seen.add(cycle.key)
                unique.append(cycle)
        return unique
