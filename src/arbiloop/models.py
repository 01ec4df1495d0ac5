"""Data models for pool-based cyclic arbitrage."""
import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Tuple
from arbiloop.infrastructure.error_handling import DataFormatError

LABEL_SEPARATOR = "-"


def edge_label(from_token: str, to_token: str) -> str:
    """Line-graph node label for the directed edge from_token -> to_token."""
    return f"{from_token}{LABEL_SEPARATOR}{to_token}"


def split_label(label: str) -> Tuple[str, str]:
    """Inverse of edge_label."""
    from_token, sep, to_token = label.partition(LABEL_SEPARATOR)
    if not sep or not from_token or not to_token:
        raise DataFormatError(f"Not an edge label: {label!r}")
    return from_token, to_token


def parse_amount(value: Any, field_name: str) -> float:
    """Parse a non-negative finite number, as found in subgraph records."""
    if isinstance(value, bool):
        raise DataFormatError(f"{field_name} is not a number: {value!r}")
    try:
        amount = float(value)
    except (TypeError, ValueError):
        raise DataFormatError(f"{field_name} is not a number: {value!r}") from None
    if not math.isfinite(amount) or amount < 0:
        raise DataFormatError(f"{field_name} must be a non-negative real: {value!r}")
    return amount


@dataclass(frozen=True)
class Token:
    """A token the engine may route through."""
    id: str
    symbol: str = ""
    name: str = ""

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "Token":
        """Build a token from an {id, symbol, name} record."""
        if not isinstance(record, Mapping) or not record.get("id"):
            raise DataFormatError(f"Token record has no id: {record!r}")
        return cls(
            id=str(record["id"]),
            symbol=str(record.get("symbol") or ""),
            name=str(record.get("name") or ""),
        )

    def to_dict(self) -> Dict[str, str]:
        return {"id": self.id, "symbol": self.symbol, "name": self.name}

    def __str__(self) -> str:
        return self.symbol or self.id


@dataclass(frozen=True)
class Pool:
    """A constant-product liquidity pool snapshot.

    token1_price is the amount of token1 paid per token0 at spot and
    token0_price the amount of token0 per token1, matching the Uniswap V2
    subgraph fields of the same names.
    """
    id: str
    token0: Token
    token1: Token
    reserve0: float
    reserve1: float
    token0_price: float
    token1_price: float
    reserve_usd: float = 0.0

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "Pool":
        """Parse a raw pair record, raising DataFormatError on bad fields."""
        if not isinstance(record, Mapping):
            raise DataFormatError(f"Pool record is not a mapping: {record!r}")

        pool_id = str(record.get("id", ""))
        try:
            token0 = Token.from_record(record.get("token0"))
            token1 = Token.from_record(record.get("token1"))
        except DataFormatError as e:
            raise DataFormatError(f"Pool {pool_id}: {e}") from e

        reserve_usd = record.get("reserveUSD")
        return cls(
            id=pool_id,
            token0=token0,
            token1=token1,
            reserve0=parse_amount(record.get("reserve0"), "reserve0"),
            reserve1=parse_amount(record.get("reserve1"), "reserve1"),
            token0_price=parse_amount(record.get("token0Price"), "token0Price"),
            token1_price=parse_amount(record.get("token1Price"), "token1Price"),
            reserve_usd=0.0 if reserve_usd is None else parse_amount(reserve_usd, "reserveUSD"),
        )

    def has_token(self, token_id: str) -> bool:
        return token_id in (self.token0.id, self.token1.id)

    def price(self, from_token: str, to_token: str) -> float:
        """Spot amount of to_token received per unit of from_token."""
        if from_token == self.token0.id and to_token == self.token1.id:
            return self.token1_price
        if from_token == self.token1.id and to_token == self.token0.id:
            return self.token0_price
        raise KeyError(f"Pool {self.id} does not trade {from_token} for {to_token}")

    def reserves(self, from_token: str) -> Tuple[float, float]:
        """(reserve_in, reserve_out) for a swap that sells from_token."""
        if from_token == self.token0.id:
            return self.reserve0, self.reserve1
        if from_token == self.token1.id:
            return self.reserve1, self.reserve0
        raise KeyError(f"Pool {self.id} does not hold {from_token}")


@dataclass(frozen=True)
class Cycle:
    """A candidate cycle as a sequence of line-graph node labels.

    closed is False for the degenerate variant, where the predecessor walk
    stopped on a repeated node instead of returning to the closing node.
    """
    nodes: Tuple[str, ...]
    closed: bool = True

    @property
    def hops(self) -> List[Tuple[str, str]]:
        return [split_label(label) for label in self.nodes]

    @property
    def start_token(self) -> str:
        return split_label(self.nodes[0])[0]

    @property
    def tokens(self) -> List[str]:
        """Token path, e.g. ['A', 'B', 'C', 'A'] for a contiguous cycle."""
        hops = self.hops
        return [hops[0][0]] + [to_token for _, to_token in hops]

    @property
    def is_contiguous(self) -> bool:
        """Every hop starts where the previous one ended, wrapping around."""
        hops = self.hops
        return all(
            hops[i][1] == hops[(i + 1) % len(hops)][0]
            for i in range(len(hops))
        )

    @property
    def key(self) -> Tuple[str, ...]:
        """Rotation-invariant identity, used to collapse duplicates."""
        rotations = [
            self.nodes[i:] + self.nodes[:i]
            for i in range(len(self.nodes))
        ]
        return min(rotations)

    def __len__(self) -> int:
        return len(self.nodes)

    def __str__(self) -> str:
        return " -> ".join(self.nodes)


@dataclass(frozen=True)
class SwapStep:
    """One hop of a simulated cycle and the amount it produced."""
    from_token: str
    to_token: str
    amount: float

    def to_dict(self) -> Dict[str, Any]:
        return {"from": self.from_token, "to": self.to_token, "amount": self.amount}


@dataclass(frozen=True)
class ArbitrageOpportunity:
    """A profitable cycle with its optimal trade size."""
    cycle: Cycle
    optimal_input: float
    profit: float
    path: Tuple[SwapStep, ...] = field(default_factory=tuple)

    @property
    def start_token(self) -> str:
        return self.cycle.start_token

    @property
    def final_amount(self) -> float:
        return self.path[-1].amount if self.path else self.optimal_input

    def to_dict(self) -> Dict[str, Any]:
        """Serialise to the {cycle, optimalInput, profit, path} output shape."""
        return {
            "cycle": list(self.cycle.nodes),
            "optimalInput": self.optimal_input,
            "profit": self.profit,
            "path": [step.to_dict() for step in self.path],
        }

    def __str__(self) -> str:
        path_str = " → ".join(self.cycle.tokens)
        return f"{path_str} | Input: {self.optimal_input:.6f} | Profit: {self.profit:.6f}"
