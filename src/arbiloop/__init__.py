"""
Arbiloop - cyclic arbitrage detection across constant-product liquidity pools.
"""

from .config import config, Config, EngineConfig, DatasetConfig
from .models import Token, Pool, Cycle, SwapStep, ArbitrageOpportunity
from .core import ArbitrageEngine, ScanResult

__version__ = "1.0.0"
__all__ = [
    "config",
    "Config",
    "EngineConfig",
    "DatasetConfig",
    "Token",
    "Pool",
    "Cycle",
    "SwapStep",
    "ArbitrageOpportunity",
    "ArbitrageEngine",
    "ScanResult",
]
