"""HTTP request paths and query parameters of the fetch service."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Mapping, Optional, Tuple, TypeVar

# HTTP GET path for proving blocks from a start block number (`start_block_num`, optional `count`)
HTTP_PROVE_BLOCK_BY_NUMBER_PATH = "/prove_block_by_number"

# HTTP GET path for proving the latest blocks (optional `count`)
HTTP_PROVE_LATEST_BLOCK_PATH = "/prove_latest_block"

# HTTP GET path for reproducing blocks from a start block number (`start_block_num`, optional `count`)
HTTP_REPRODUCE_BLOCK_BY_NUMBER_PATH = "/reproduce_block_by_number"

_U64_MAX = 2**64 - 1

B = TypeVar("B", bound="ProveBlockByNumberParams")
R = TypeVar("R", bound="ReproduceBlockByNumberParams")
L = TypeVar("L", bound="ProveLatestBlockParams")


def _check_u64(name: str, value: Optional[int]) -> None:
    if value is None:
        return
    if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= _U64_MAX:
        raise ValueError(f"{name} must be an unsigned 64-bit integer, got {value!r}")


def _parse_u64(name: str, value: object) -> int:
    text = str(value)
    if not (text.isascii() and text.isdigit()) or int(text) > _U64_MAX:
        raise ValueError(f"invalid value for {name}: {value!r}")
    return int(text)


def _optional_count(query: Mapping[str, object]) -> Optional[int]:
    return _parse_u64("count", query["count"]) if "count" in query else None


def _start_count_query(start_block_num: int, count: Optional[int]) -> Dict[str, int]:
    query = {"start_block_num": start_block_num}
    if count is not None:
        query["count"] = count
    return query


def _parse_start_count(query: Mapping[str, object]) -> Tuple[int, Optional[int]]:
    if "start_block_num" not in query:
        raise ValueError("missing field `start_block_num`")
    return _parse_u64("start_block_num", query["start_block_num"]), _optional_count(query)


@dataclass(frozen=True)
class ProveBlockByNumberParams:
    """Prove `count` blocks starting at `start_block_num`."""

    start_block_num: int
    count: Optional[int] = None

    def __post_init__(self) -> None:
        _check_u64("start_block_num", self.start_block_num)
        _check_u64("count", self.count)

    def to_query(self) -> Dict[str, int]:
        """Query parameters, leaving out an unset count."""
        return _start_count_query(self.start_block_num, self.count)

    @classmethod
    def from_query(cls: type[B], query: Mapping[str, object]) -> B:
        """Build from decoded query parameters; unknown keys are ignored."""
        return cls(*_parse_start_count(query))


@dataclass(frozen=True)
class ReproduceBlockByNumberParams:
    """Reproduce `count` blocks starting at `start_block_num` from saved inputs."""

    start_block_num: int
    count: Optional[int] = None

    def __post_init__(self) -> None:
        _check_u64("start_block_num", self.start_block_num)
        _check_u64("count", self.count)

    def to_query(self) -> Dict[str, int]:
        """Query parameters, leaving out an unset count."""
        return _start_count_query(self.start_block_num, self.count)

    @classmethod
    def from_query(cls: type[R], query: Mapping[str, object]) -> R:
        """Build from decoded query parameters; unknown keys are ignored."""
        return cls(*_parse_start_count(query))


@dataclass(frozen=True)
class ProveLatestBlockParams:
    """Prove the next `count` latest blocks."""

    count: Optional[int] = None

    def __post_init__(self) -> None:
        _check_u64("count", self.count)

    def to_query(self) -> Dict[str, int]:
        """Query parameters, leaving out an unset count."""
        return {} if self.count is None else {"count": self.count}

    @classmethod
    def from_query(cls: type[L], query: Mapping[str, object]) -> L:
        """Build from decoded query parameters; unknown keys are ignored."""
        return cls(_optional_count(query))