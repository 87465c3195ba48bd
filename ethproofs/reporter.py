"""Reporter task: fans block proving reports out to registered watchers."""

from __future__ import annotations

import asyncio
import copy
import logging
from typing import List

from ethproofs.channel import ChannelClosed, UnboundedChannel
from ethproofs.messages import WatchMsg
from ethproofs.report import BlockProvingReport

logger = logging.getLogger(__name__)


def _notify(watcher: UnboundedChannel, report: BlockProvingReport) -> bool:
    try:
        watcher.send(copy.copy(report))
    except ChannelClosed:
        return False
    return True


class BlockReporter:
    """Collects watchers and sends each block report to all of them."""

    def __init__(self, comm_receiver: UnboundedChannel) -> None:
        self.comm_receiver = comm_receiver

    def run(self) -> "asyncio.Task[None]":
        """Start the reporter task; it ends when its receiver is closed."""
        logger.info("reporter: start")
        return asyncio.get_running_loop().create_task(self._serve())

    async def _serve(self) -> None:
        # watchers whose channel is closed are dropped on the next notification
        watchers: List[UnboundedChannel] = []
        async for msg in self.comm_receiver:
            if isinstance(msg, WatchMsg):
                watchers.append(msg.sender)
                logger.info(
                    "reporter: added a new websocket watcher, the current watcher number is %d",
                    len(watchers),
                )
            elif isinstance(msg, BlockProvingReport):
                watchers = [watcher for watcher in watchers if _notify(watcher, msg)]
                logger.info(
                    "reporter: notified the proved block %d to watcher number %d",
                    msg.block_number,
                    len(watchers),
                )
            else:
                logger.error("reporter: received a wrong message %r", msg)
        logger.info("reporter: stopped")