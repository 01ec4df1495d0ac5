"""Configuration management for Arbiloop."""
import os
from pydantic import BaseModel, Field
from dotenv import load_dotenv

load_dotenv()

DEFAULT_SUBGRAPH_URL = (
    "https://gateway.thegraph.com/api/{api_key}/subgraphs/id/"
    "EYCKATKGBKLWvSfwvBjzfCBmGwYNdVkduYXVivCsLRFu"
)


class EngineConfig(BaseModel):
    """Detection and optimisation parameters."""
    fee_rate: float = Field(
        default_factory=lambda: float(os.getenv("FEE_RATE", "0.003")),
        ge=0.0,
        lt=1.0,
    )
    tolerance: float = Field(
        default_factory=lambda: float(os.getenv("SEARCH_TOLERANCE", "1e-8")),
        gt=0.0,
    )
    upper_bound: float = Field(
        default_factory=lambda: float(os.getenv("SEARCH_UPPER_BOUND", "1e20")),
        gt=0.0,
    )
    # float spacing near large optima can exceed the tolerance
    max_iterations: int = Field(
        default_factory=lambda: int(os.getenv("SEARCH_MAX_ITERATIONS", "500")),
        gt=0,
    )
    max_workers: int = Field(
        default_factory=lambda: int(os.getenv("MAX_WORKERS", "1")),
        ge=1,
    )
    top_n: int = Field(default_factory=lambda: int(os.getenv("TOP_N", "10")), ge=1)
    deduplicate: bool = Field(
        default_factory=lambda: os.getenv("DEDUPLICATE_CYCLES", "true").lower() == "true"
    )


class DatasetConfig(BaseModel):
    """Where pool data comes from and how the token universe is chosen."""
    pairs_file: str = Field(
        default_factory=lambda: os.getenv("PAIRS_FILE", "uniswap_v2_pairs.json")
    )
    tokens_file: str = Field(
        default_factory=lambda: os.getenv("TOKENS_FILE", "selected_tokens.json")
    )
    subgraph_url: str = Field(
        default_factory=lambda: os.getenv("SUBGRAPH_URL", DEFAULT_SUBGRAPH_URL)
    )
    subgraph_api_key: str = Field(
        default_factory=lambda: os.getenv("SUBGRAPH_API_KEY", "")
    )
    batch_size: int = Field(
        default_factory=lambda: int(os.getenv("BATCH_SIZE", "1000")), gt=0
    )
    request_timeout: float = Field(
        default_factory=lambda: float(os.getenv("REQUEST_TIMEOUT", "30"))
    )
    min_tvl: float = Field(
        default_factory=lambda: float(os.getenv("MIN_TVL", "20000"))
    )
    target_token_count: int = Field(
        default_factory=lambda: int(os.getenv("TARGET_TOKEN_COUNT", "100"))
    )
    target_pool_count: int = Field(
        default_factory=lambda: int(os.getenv("TARGET_POOL_COUNT", "400"))
    )

    @property
    def resolved_subgraph_url(self) -> str:
        """Subgraph endpoint with the API key filled in."""
        return self.subgraph_url.format(api_key=self.subgraph_api_key)


class Config(BaseModel):
    """Main application configuration."""
    engine: EngineConfig = Field(default_factory=EngineConfig)
    dataset: DatasetConfig = Field(default_factory=DatasetConfig)
    log_level: str = Field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))


# used by the command line entry point; core components take config explicitly
config = Config()
