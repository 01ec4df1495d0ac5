"""Trade sizing for candidate cycles under constant-product slippage."""
from dataclasses import dataclass
from typing import Dict, FrozenSet, Iterable, List, Mapping, Tuple, Union
import numpy as np
from loguru import logger
from arbiloop.config import EngineConfig
from arbiloop.models import Cycle, Pool, SwapStep
from arbiloop.infrastructure.error_handling import (
    BrokenCycleError, DataFormatError, PairNotFoundError
)


def get_amount_out(
    reserve_in: float,
    reserve_out: float,
    amount_in: float,
    fee_rate: float = 0.003,
) -> float:
    """Constant-product output for amount_in, fee taken from the input side."""
    if reserve_in <= 0 or reserve_out <= 0 or amount_in <= 0:
        return 0.0
    amount_in_after_fee = amount_in * (1 - fee_rate)
    return reserve_out * amount_in_after_fee / (reserve_in + amount_in_after_fee)


@dataclass(frozen=True)
class OptimizationResult:
    """Best trade size found for one cycle."""
    optimal_input: float
    profit: float
    steps: Tuple[SwapStep, ...]


class ProfitOptimizer:
    """Simulates cycles against pool reserves and sizes the trade."""

    def __init__(
        self,
        pools: Iterable[Union[Pool, Mapping]],
        config: EngineConfig | None = None,
    ):
        self.config = config or EngineConfig()
        self.pools: Dict[FrozenSet[str], Pool] = {}

        for record in pools:
            try:
                pool = record if isinstance(record, Pool) else Pool.from_record(record)
            except DataFormatError as e:
                logger.debug(f"Optimizer skipping malformed pool: {e}")
                continue
            key = frozenset((pool.token0.id, pool.token1.id))
            if key in self.pools:
                continue
            self.pools[key] = pool

    def find_pool(self, from_token: str, to_token: str) -> Pool:
        pool = self.pools.get(frozenset((from_token, to_token)))
        if pool is None or from_token == to_token:
            raise PairNotFoundError(from_token, to_token)
        return pool

    def simulate(self, cycle: Cycle, amount: float) -> Tuple[float, List[SwapStep]]:
        """Swap amount through every hop of the cycle in order.

        Returns the amount that comes out of the last hop and the per-hop
        audit trail.
        """
        steps = []
        held = None
        for from_token, to_token in cycle.hops:
            if held is not None and from_token != held:
                raise BrokenCycleError(held, from_token, to_token)
            pool = self.find_pool(from_token, to_token)
            reserve_in, reserve_out = pool.reserves(from_token)
            amount = get_amount_out(reserve_in, reserve_out, amount, self.config.fee_rate)
            steps.append(SwapStep(from_token, to_token, amount))
            held = to_token
        return amount, steps

    def profit(self, cycle: Cycle, amount: float) -> float:
        end_amount, _ = self.simulate(cycle, amount)
        return end_amount - amount

    def optimize(self, cycle: Cycle) -> OptimizationResult:
        """Find the input that maximises output minus input.

        The profit curve is concave, so a ternary search keeps the bracket
        on the side where the marginal return is still positive.
        """
        if not cycle.is_contiguous:
            first_from, first_to = cycle.hops[0]
            raise BrokenCycleError(cycle.hops[-1][1], first_from, first_to)

        low, high = 0.0, self.config.upper_bound
        iterations = 0
        while high - low > self.config.tolerance and iterations < self.config.max_iterations:
            third = (high - low) / 3
            left, right = low + third, high - third
            if self.profit(cycle, left) < self.profit(cycle, right):
                low = left
            else:
                high = right
            iterations += 1

        optimal_input = (low + high) / 2
        end_amount, steps = self.simulate(cycle, optimal_input)
        profit = end_amount - optimal_input

        if profit <= 0:
            optimal_input = 0.0
            end_amount, steps = self.simulate(cycle, optimal_input)
            profit = end_amount - optimal_input

        logger.debug(
            f"Cycle {cycle}: input {optimal_input:.6f}, profit {profit:.6f} "
            f"after {iterations} iterations"
        )
        return OptimizationResult(optimal_input, profit, tuple(steps))

    def grid_search(self, cycle: Cycle, high: float, points: int = 10001) -> OptimizationResult:
        """Brute-force optimum over an even grid on [0, high]."""
        best_input, best_profit = 0.0, 0.0
        for amount in np.linspace(0.0, high, points):
            profit = self.profit(cycle, float(amount))
            if profit > best_profit:
                best_input, best_profit = float(amount), profit
        _, steps = self.simulate(cycle, best_input)
        return OptimizationResult(best_input, best_profit, tuple(steps))
