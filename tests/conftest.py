"""Shared fixtures for the arbitrage test suite."""
import pytest
from arbiloop.config import EngineConfig
from arbiloop.models import Token


def make_pool(pool_id, token0, token1, reserve0, reserve1, reserve_usd=None):
    """Pair record in subgraph shape with spot prices derived from reserves."""
    reserve0, reserve1 = float(reserve0), float(reserve1)
    record = {
        'id': pool_id,
        'token0': {'id': token0, 'symbol': token0, 'name': f"Token {token0}"},
        'token1': {'id': token1, 'symbol': token1, 'name': f"Token {token1}"},
        'reserve0': str(reserve0),
        'reserve1': str(reserve1),
        'token0Price': str(reserve0 / reserve1 if reserve1 else 0.0),
        'token1Price': str(reserve1 / reserve0 if reserve0 else 0.0),
    }
    if reserve_usd is not None:
        record['reserveUSD'] = str(reserve_usd)
    return record


@pytest.fixture
def pool_factory():
    """Expose make_pool to tests."""
    return make_pool


@pytest.fixture
def engine_config():
    """Engine configuration with the reference defaults."""
    return EngineConfig(
        fee_rate=0.003,
        tolerance=1e-8,
        upper_bound=1e20,
        max_iterations=500,
        max_workers=1,
        top_n=10,
        deduplicate=True,
    )


@pytest.fixture
def abc_tokens():
    """Three-token universe."""
    return [
        Token(id='A', symbol='A', name='Token A'),
        Token(id='B', symbol='B', name='Token B'),
        Token(id='C', symbol='C', name='Token C'),
    ]


@pytest.fixture
def abc_pools():
    """A-B, B-C and C-A pools whose A -> C -> B -> A loop doubles the input at spot."""
    return [
        make_pool('ab', 'A', 'B', 1000, 2000),
        make_pool('bc', 'B', 'C', 1000, 500),
        make_pool('ca', 'C', 'A', 2000, 1000),
    ]


@pytest.fixture
def balanced_pools():
    """Pools whose spot prices agree, so every loop loses the fees."""
    return [
        make_pool('ab', 'A', 'B', 1000, 2000),
        make_pool('bc', 'B', 'C', 2000, 500),
        make_pool('ca', 'C', 'A', 500, 1000),
    ]
