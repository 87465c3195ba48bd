"""Block fetcher configuration and the fetcher that replays saved proving inputs."""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from ethproofs.channel import ChannelClosed, UnboundedChannel
from ethproofs.inputs import ProvingInputs
from ethproofs.messages import ProvingMsg, ReproduceFromStart
from ethproofs.report import BlockProvingReport

logger = logging.getLogger(__name__)


@dataclass
class BlockFetcherConfig:
    """Settings shared by the block fetchers."""

    # check the generated inputs by emulation
    is_input_emulated: bool
    # base directory for saving input files; nothing is saved if unset
    input_dump_dir: Optional[Path]
    # base directory for loading input files when reproducing blocks
    input_load_dir: Optional[Path]
    rpc_http_url: str
    rpc_ws_url: str
    subblock_elf_path: Path
    agg_elf_path: Path

    def __post_init__(self) -> None:
        if self.input_dump_dir is not None:
            self.input_dump_dir = Path(self.input_dump_dir)
        if self.input_load_dir is not None:
            self.input_load_dir = Path(self.input_load_dir)
        self.subblock_elf_path = Path(self.subblock_elf_path)
        self.agg_elf_path = Path(self.agg_elf_path)


class ReproducingFromStartFetcher:
    """Loads saved inputs of a range of blocks and sends them for proving."""

    def __init__(self, config: BlockFetcherConfig, fetch_receiver: UnboundedChannel, proving_sender) -> None:
        self.config = config
        self.fetch_receiver = fetch_receiver
        self.proving_sender = proving_sender

    def run(self) -> "asyncio.Task[None]":
        """Start the fetcher task; it ends when its receiver is closed."""
        logger.info("reproducing-from-start-fetcher: start")
        return asyncio.get_running_loop().create_task(self._serve())

    async def _serve(self) -> None:
        async for msg in self.fetch_receiver:
            if not isinstance(msg, ReproduceFromStart):
                logger.error("reproducing-from-start-fetcher: received a wrong message %r", msg)
                continue
            start, count = msg.start_block_number, msg.count
            logger.info(
                "reproducing-from-start-fetcher: received from-start fetch message of "
                "start_block_number = %d, count = %d",
                start,
                count,
            )
            for block_number in range(start, start + count):
                logger.info(
                    "reproducing-from-start-fetcher: starting for fetching block %d", block_number
                )
                try:
                    self.load_block(block_number)
                except (OSError, ValueError, ChannelClosed) as err:
                    logger.error(
                        "reproducing-from-start-fetcher: failed to fetch block-%d %r",
                        block_number,
                        err,
                    )
                else:
                    logger.info(
                        "reproducing-from-start-fetcher: succeeded for fetching block %d",
                        block_number,
                    )

    def load_block(self, block_number: int) -> None:
        """Load the saved inputs of one block and send a proving message."""
        load_dir = self.config.input_load_dir
        if load_dir is None:
            raise RuntimeError("reproducing-from-start-fetcher: `input_load_dir` is unset")
        start_time = time.monotonic()
        proving_inputs = ProvingInputs.load_from_dir(block_number, load_dir)
        data_fetch_milliseconds = int((time.monotonic() - start_time) * 1000)

        fetch_report = BlockProvingReport(block_number, data_fetch_milliseconds)
        self.proving_sender.send(ProvingMsg(fetch_report, proving_inputs))