"""Main scheduler routing messages between the service tasks.

The flow is: fetch service (HTTP) -> fetcher -> proving client -> proving
cluster -> proof service -> reporter -> fetch service (websocket).
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable

from ethproofs.channel import ChannelClosed, DuplexEndpoint, UnboundedChannel
from ethproofs.messages import FETCH_MSG_TYPES, ProvedMsg, ProvingMsg, WatchMsg
from ethproofs.report import BlockProvingReport

logger = logging.getLogger(__name__)


def _forward(target, msg: object, failure: str) -> None:
    try:
        target.send(msg)
    except ChannelClosed as err:
        raise RuntimeError(f"scheduler: {failure}") from err


class Scheduler:
    """Coordinates the fetch service, proof service, fetcher, proving client and reporter."""

    def __init__(
        self,
        fetch_service_receiver: UnboundedChannel,
        proof_service_receiver: UnboundedChannel,
        fetcher_endpoint: DuplexEndpoint,
        proving_client_endpoint: DuplexEndpoint,
        reporter_sender: UnboundedChannel,
    ) -> None:
        self.fetch_service_receiver = fetch_service_receiver
        self.proof_service_receiver = proof_service_receiver
        self.fetcher_endpoint = fetcher_endpoint
        self.proving_client_endpoint = proving_client_endpoint
        self.reporter_sender = reporter_sender

    def run(self) -> "asyncio.Task[None]":
        """Start routing in a task; it fails once any source channel closes."""
        logger.info("scheduler: start")
        return asyncio.get_running_loop().create_task(self._serve())

    async def _serve(self) -> None:
        pumps = [
            (self.fetch_service_receiver.recv, "fetch-service", self._from_fetch_service),
            (self.proof_service_receiver.recv, "proof-service", self._from_proof_service),
            (self.fetcher_endpoint.recv, "fetcher thread", self._from_fetcher),
            (self.proving_client_endpoint.recv, "proving-client thread", self._from_proving_client),
        ]
        tasks = [asyncio.create_task(self._pump(*pump)) for pump in pumps]
        try:
            done, _ = await asyncio.wait(tasks, return_when=asyncio.FIRST_EXCEPTION)
            for task in done:
                task.result()
        finally:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)

    @staticmethod
    async def _pump(
        recv: Callable[[], Awaitable[object]],
        source: str,
        route: Callable[[object], None],
    ) -> None:
        while True:
            try:
                msg = await recv()
            except ChannelClosed as err:
                raise RuntimeError(f"scheduler: received an error message from {source}") from err
            route(msg)

    def _from_fetch_service(self, msg: object) -> None:
        if isinstance(msg, FETCH_MSG_TYPES):
            _forward(self.fetcher_endpoint, msg, "failed to send a fetch message to fetcher thread")
        elif isinstance(msg, WatchMsg):
            _forward(self.reporter_sender, msg, "failed to send a watch message to reporter thread")
        else:
            logger.error("scheduler: received a wrong message from fetch-service %r", msg)

    def _from_proof_service(self, msg: object) -> None:
        if isinstance(msg, ProvedMsg):
            _forward(
                self.proving_client_endpoint,
                msg,
                "failed to send a proved message to proving-client thread",
            )
        else:
            logger.error("scheduler: received a wrong message from proof-service %r", msg)

    def _from_fetcher(self, msg: object) -> None:
        if isinstance(msg, ProvingMsg):
            _forward(
                self.proving_client_endpoint,
                msg,
                "failed to send a proving message to proving-client thread",
            )
        else:
            logger.error("scheduler: received a wrong message from fetcher thread %r", msg)

    def _from_proving_client(self, msg: object) -> None:
        if isinstance(msg, BlockProvingReport):
            _forward(self.reporter_sender, msg, "failed to send a report message to reporter thread")
        else:
            logger.error("scheduler: received a wrong message from proving-client thread %r", msg)