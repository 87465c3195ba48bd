"""Messages passed between the service tasks."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

from ethproofs.channel import UnboundedChannel
from ethproofs.fetch import (
    ProveBlockByNumberParams,
    ProveLatestBlockParams,
    ReproduceBlockByNumberParams,
)
from ethproofs.inputs import ProvingInputs
from ethproofs.report import BlockProvingReport

# default value of the `count` request parameter
DEFAULT_PARAM_COUNT = 1


@dataclass
class WatchMsg:
    """Register a watcher that is sent every block proving report."""

    sender: UnboundedChannel


@dataclass(frozen=True)
class ProveFromStart:
    """Prove `count` blocks starting at `start_block_number`."""

    start_block_number: int
    count: int


@dataclass(frozen=True)
class ProveLatest:
    """Prove the next `count` latest blocks."""

    count: int


@dataclass(frozen=True)
class ReproduceFromStart:
    """Reproduce `count` blocks starting at `start_block_number` from saved inputs."""

    start_block_number: int
    count: int


FetchMsg = Union[ProveFromStart, ProveLatest, ReproduceFromStart]
FETCH_MSG_TYPES = (ProveFromStart, ProveLatest, ReproduceFromStart)


@dataclass
class ProvingMsg:
    """Inputs of a fetched block, ready to be sent for proving."""

    fetch_report: BlockProvingReport
    proving_inputs: ProvingInputs


@dataclass
class ProvedMsg:
    """Proving result returned by the proving cluster."""

    success: bool = False
    block_number: int = 0
    cycles: int = 0
    proving_milliseconds: int = 0
    proof: Optional[bytes] = None


ReportMsg = BlockProvingReport

BlockMsg = Union[
    WatchMsg,
    ProveFromStart,
    ProveLatest,
    ReproduceFromStart,
    ProvingMsg,
    ProvedMsg,
    BlockProvingReport,
]


def _count_or_default(count: Optional[int]) -> int:
    return DEFAULT_PARAM_COUNT if count is None else count


def fetch_msg_from_params(params: object) -> FetchMsg:
    """Turn HTTP request parameters into the matching fetch message."""
    if isinstance(params, ProveBlockByNumberParams):
        return ProveFromStart(params.start_block_num, _count_or_default(params.count))
    if isinstance(params, ProveLatestBlockParams):
        return ProveLatest(_count_or_default(params.count))
    if isinstance(params, ReproduceBlockByNumberParams):
        return ReproduceFromStart(params.start_block_num, _count_or_default(params.count))
    raise TypeError(f"unsupported request parameters: {params!r}")