"""JSON persistence for pool records and the token universe."""
import json
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Union
from loguru import logger
from arbiloop.models import Token
from arbiloop.infrastructure.error_handling import DataFormatError


def _read_list(path: Union[str, Path]) -> List[Any]:
    path = Path(path)
    with path.open("r", encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise DataFormatError(f"{path} is not valid JSON: {e}") from e
    if not isinstance(data, list):
        raise DataFormatError(f"{path} must hold a JSON list, got {type(data).__name__}")
    return data


def _write_list(path: Union[str, Path], records: List[Any]) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        json.dump(records, f, indent=2)
    return path


def load_pools(path: Union[str, Path]) -> List[Dict[str, Any]]:
    """Raw pair records; field validation happens when the graph is built."""
    records = _read_list(path)
    logger.info(f"Loaded {len(records)} pool records from {path}")
    return records


def save_pools(path: Union[str, Path], records: Iterable[Mapping[str, Any]]) -> Path:
    records = [dict(r) for r in records]
    saved = _write_list(path, records)
    logger.info(f"Saved {len(records)} pool records to {saved}")
    return saved


def parse_tokens(records: Iterable[Mapping[str, Any]]) -> List[Token]:
    """Tokens from {id, symbol, name} records, raising on a record without id."""
    return [Token.from_record(record) for record in records]


def load_tokens(path: Union[str, Path]) -> List[Token]:
    tokens = parse_tokens(_read_list(path))
    logger.info(f"Loaded {len(tokens)} tokens from {path}")
    return tokens


def save_tokens(path: Union[str, Path], tokens: Iterable[Union[Token, Mapping[str, Any]]]) -> Path:
    records = [t.to_dict() if isinstance(t, Token) else dict(t) for t in tokens]
    saved = _write_list(path, records)
    logger.info(f"Saved {len(records)} tokens to {saved}")
    return saved
