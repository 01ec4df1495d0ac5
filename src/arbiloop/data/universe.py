"""Selection of a bounded token universe from the most liquid pools."""
from typing import Any, Dict, Iterable, List, Mapping, Tuple
from loguru import logger
from arbiloop.config import DatasetConfig
from arbiloop.models import Token, parse_amount
from arbiloop.infrastructure.error_handling import DataFormatError


def _distinct_tokens(pools: List[Mapping[str, Any]]) -> Dict[str, Mapping[str, Any]]:
    tokens: Dict[str, Mapping[str, Any]] = {}
    for pool in pools:
        for side in ("token0", "token1"):
            token = pool[side]
            tokens.setdefault(token["id"], token)
    return tokens


def select_universe(
    records: Iterable[Mapping[str, Any]],
    config: DatasetConfig | None = None,
) -> Tuple[List[Token], List[Mapping[str, Any]]]:
    """Pick the top pools by TVL and the tokens they touch.

    Pools under min_tvl are discarded, the rest sorted by TVL and cut to
    target_pool_count. The lowest-TVL pool is then dropped until no more
    than target_token_count distinct tokens remain.
    """
    config = config or DatasetConfig()

    ranked = []
    for record in records:
        try:
            tvl = parse_amount(record.get("reserveUSD"), "reserveUSD")
            Token.from_record(record.get("token0"))
            Token.from_record(record.get("token1"))
        except (DataFormatError, AttributeError) as e:
            logger.debug(f"Skipping pool {record!r:.80}: {e}")
            continue
        if tvl >= config.min_tvl:
            ranked.append((tvl, record))

    ranked.sort(key=lambda item: item[0], reverse=True)
    selected = [record for _, record in ranked[:config.target_pool_count]]

    tokens = _distinct_tokens(selected)
    while len(tokens) > config.target_token_count and selected:
        selected.pop()
        tokens = _distinct_tokens(selected)

    universe = [Token.from_record(record) for record in tokens.values()]
    logger.info(f"Selected {len(universe)} tokens from {len(selected)} pools")
    return universe, selected
