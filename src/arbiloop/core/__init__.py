"""Core detection engine components."""

from .graph import Graph, build_rate_graph, build_line_graph
from .cycle_detector import detect_negative_cycles, detect_all_cycles
from .optimizer import ProfitOptimizer, OptimizationResult, get_amount_out
from .collector import OpportunityCollector
from .arbitrage_engine import ArbitrageEngine, ScanResult

__all__ = [
    "Graph",
    "build_rate_graph",
    "build_line_graph",
    "detect_negative_cycles",
    "detect_all_cycles",
    "ProfitOptimizer",
    "OptimizationResult",
    "get_amount_out",
    "OpportunityCollector",
    "ArbitrageEngine",
    "ScanResult",
]
