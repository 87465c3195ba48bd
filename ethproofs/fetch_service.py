"""HTTP and websocket fetch service: accepts proving requests and streams block reports."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Union

from aiohttp import WSMsgType, web

from ethproofs.channel import ChannelClosed, UnboundedChannel
from ethproofs.fetch import (
    HTTP_PROVE_BLOCK_BY_NUMBER_PATH,
    HTTP_PROVE_LATEST_BLOCK_PATH,
    HTTP_REPRODUCE_BLOCK_BY_NUMBER_PATH,
    ProveBlockByNumberParams,
    ProveLatestBlockParams,
    ReproduceBlockByNumberParams,
)
from ethproofs.messages import WatchMsg, fetch_msg_from_params
from ethproofs.report import BlockProvingReport
from ethproofs.utils import SocketAddr, parse_socket_addr

logger = logging.getLogger(__name__)

WS_WELCOME_MESSAGE = "fetch-service: websocket client connected"

Handler = Callable[[web.Request], Awaitable[web.StreamResponse]]


@dataclass
class FetchServiceConfig:
    """Fetch service settings."""

    # socket address to bind
    addr: Union[SocketAddr, str]

    def __post_init__(self) -> None:
        if isinstance(self.addr, str):
            self.addr = parse_socket_addr(self.addr)


async def _forward_reports(watcher: UnboundedChannel, ws: web.WebSocketResponse) -> None:
    async for msg in watcher:
        if not isinstance(msg, BlockProvingReport):
            break
        try:
            await ws.send_bytes(msg.to_bytes())
        except (ConnectionError, RuntimeError):
            logger.warning("fetch-service: websocket connection may be closed")
            break


class FetchService:
    """Accepts proving requests over HTTP and streams block reports over websockets."""

    def __init__(self, config: FetchServiceConfig, comm_sender: UnboundedChannel) -> None:
        self.config = config
        # channel to the main scheduler
        self.comm_sender = comm_sender

    def prove_block_by_number(self, params: ProveBlockByNumberParams) -> None:
        """Forward a prove-by-number request; raises ChannelClosed if the scheduler is gone."""
        self.comm_sender.send(fetch_msg_from_params(params))

    def prove_latest_block(self, params: ProveLatestBlockParams) -> None:
        """Forward a prove-latest request; raises ChannelClosed if the scheduler is gone."""
        self.comm_sender.send(fetch_msg_from_params(params))

    def reproduce_block_by_number(self, params: ReproduceBlockByNumberParams) -> None:
        """Forward a reproduce-by-number request; raises ChannelClosed if the scheduler is gone."""
        self.comm_sender.send(fetch_msg_from_params(params))

    async def handle_ws(self, request: web.Request) -> web.WebSocketResponse:
        """Register a report watcher and stream every block report to the websocket client."""
        logger.info("fetch-service: received a new websocket connection")
        # pings from the client are answered with pongs by the websocket response itself
        ws = web.WebSocketResponse()
        await ws.prepare(request)

        watcher: UnboundedChannel = UnboundedChannel()
        try:
            logger.info("fetch-service: registering a block proving monitor to receive block reports")
            self.comm_sender.send(WatchMsg(watcher))
        except ChannelClosed as err:
            logger.error("fetch-service: websocket returns an error %s", err)
            await ws.close()
            return ws

        forwarder = None
        try:
            logger.info("fetch-service: sending a websocket welcome message")
            await ws.send_str(WS_WELCOME_MESSAGE)
            forwarder = asyncio.create_task(_forward_reports(watcher, ws))

            logger.info("fetch-service: handling the websocket messages from client")
            async for msg in ws:
                if msg.type == WSMsgType.ERROR:
                    logger.info("fetch-service: websocket error %s", ws.exception())
                    break
                logger.info("fetch-service: received trivial websocket message %r", msg)
        finally:
            logger.info("fetch-service: closing the related tasks in websocket")
            if forwarder is not None:
                forwarder.cancel()
                await asyncio.gather(forwarder, return_exceptions=True)
            watcher.close()
            logger.info("fetch-service: websocket disconnected")
        return ws

    def _route(self, params_type, action: Callable[[object], None], name: str) -> Handler:
        async def handler(request: web.Request) -> web.Response:
            try:
                params = params_type.from_query(request.query)
            except ValueError as err:
                return web.Response(
                    status=400, text=f"Failed to deserialize query string: {err}"
                )
            logger.info("fetch-service: received %s with params %r", name, params)
            try:
                action(params)
            except ChannelClosed as err:
                return web.Response(status=500, text=str(err))
            return web.Response(text="OK")

        return handler

    def create_app(self) -> web.Application:
        """Build the web application: `/` for websockets plus the three request paths."""
        app = web.Application()
        app.router.add_get("/", self.handle_ws)
        app.router.add_get(
            HTTP_PROVE_BLOCK_BY_NUMBER_PATH,
            self._route(ProveBlockByNumberParams, self.prove_block_by_number, "prove_block_by_number"),
        )
        app.router.add_get(
            HTTP_PROVE_LATEST_BLOCK_PATH,
            self._route(ProveLatestBlockParams, self.prove_latest_block, "prove_latest_block"),
        )
        app.router.add_get(
            HTTP_REPRODUCE_BLOCK_BY_NUMBER_PATH,
            self._route(
                ReproduceBlockByNumberParams,
                self.reproduce_block_by_number,
                "reproduce_block_by_number",
            ),
        )
        return app

    def run(self) -> "asyncio.Task[None]":
        """Serve on the configured address in a task; cancelling the task shuts it down."""
        logger.info("fetch-service: start")
        return asyncio.get_running_loop().create_task(self._serve())

    async def _serve(self) -> None:
        addr = self.config.addr
        runner = web.AppRunner(self.create_app())
        await runner.setup()
        try:
            site = web.TCPSite(runner, str(addr.ip), addr.port)
            await site.start()
            logger.info("fetch-service: listening on %s", addr)
            await asyncio.Event().wait()
        finally:
            await runner.cleanup()
            logger.info("fetch-service: stopped")