"""Client side of the fetch service: HTTP requests and waiting for block reports."""

from __future__ import annotations

import asyncio
import logging
import os
from typing import List, Optional, Union
from urllib.parse import urljoin, urlsplit

import aiohttp
from aiohttp import WSMsgType

from ethproofs.fetch import (
    HTTP_PROVE_BLOCK_BY_NUMBER_PATH,
    HTTP_PROVE_LATEST_BLOCK_PATH,
    HTTP_REPRODUCE_BLOCK_BY_NUMBER_PATH,
    ProveBlockByNumberParams,
    ProveLatestBlockParams,
    ReproduceBlockByNumberParams,
)
from ethproofs.report import BlockProvingReport

logger = logging.getLogger(__name__)

# seconds between websocket ping messages
WS_PING_INTERVAL = 15

PathLike = Union[str, "os.PathLike[str]"]


def _endpoint_url(base_url: str, path: str) -> str:
    base = str(base_url)
    parts = urlsplit(base)
    if not parts.scheme or not parts.netloc:
        raise ValueError(f"invalid base URL: {base!r}")
    return urljoin(base, path)


async def _send_request(http_url: str, path: str, params) -> int:
    url = _endpoint_url(http_url, path)
    query = {key: str(value) for key, value in params.to_query().items()}
    logger.info("sending HTTP request: url = %s, params = %r", url, query)
    async with aiohttp.ClientSession() as session:
        async with session.get(url, params=query) as response:
            return response.status


async def prove_block_by_number(http_url: str, params: ProveBlockByNumberParams) -> int:
    """GET `/prove_block_by_number`; returns the HTTP status without raising on it."""
    return await _send_request(http_url, HTTP_PROVE_BLOCK_BY_NUMBER_PATH, params)


async def prove_latest_block(http_url: str, params: ProveLatestBlockParams) -> int:
    """GET `/prove_latest_block`; returns the HTTP status without raising on it."""
    return await _send_request(http_url, HTTP_PROVE_LATEST_BLOCK_PATH, params)


async def reproduce_block_by_number(http_url: str, params: ReproduceBlockByNumberParams) -> int:
    """GET `/reproduce_block_by_number`; returns the HTTP status without raising on it."""
    return await _send_request(http_url, HTTP_REPRODUCE_BLOCK_BY_NUMBER_PATH, params)


async def _keep_alive(ws: aiohttp.ClientWebSocketResponse) -> None:
    while True:
        await asyncio.sleep(WS_PING_INTERVAL)
        try:
            await ws.ping()
        except (ConnectionError, RuntimeError) as err:
            logger.error("websocket-client: failed to send ping message %s", err)
            return


async def wait_for_proving_complete(
    ws_url: str,
    block_count: int,
    report_path: Optional[PathLike] = None,
) -> List[BlockProvingReport]:
    """Collect block reports until `block_count` arrive or the server closes.

    Each report is appended to the CSV file at `report_path` if one is given,
    otherwise logged. The received reports are returned.
    """
    url = str(ws_url)
    logger.info("websocket-client: connecting to %s", url)
    reports: List[BlockProvingReport] = []

    async with aiohttp.ClientSession() as session:
        async with session.ws_connect(url) as ws:
            logger.info("websocket-client: connected")
            pinger = asyncio.create_task(_keep_alive(ws))
            try:
                async for msg in ws:
                    if msg.type == WSMsgType.BINARY:
                        report = BlockProvingReport.from_bytes(msg.data)
                        reports.append(report)
                        if report_path is not None:
                            report.append_to_csv(report_path)
                        else:
                            logger.info("websocket-client: received proving result %s", report)
                        # only the number of reports is checked
                        if block_count <= 1:
                            break
                        block_count -= 1
                    elif msg.type == WSMsgType.ERROR:
                        raise ConnectionError(f"websocket-client: connection error {ws.exception()}")
                    else:
                        logger.info("websocket-client: received other message %r", msg)
                if ws.closed:
                    logger.info("websocket-client: closed by server %s", ws.close_code)
            finally:
                pinger.cancel()
                await asyncio.gather(pinger, return_exceptions=True)
                logger.info("websocket-client: sending a Close message before exit")
                await ws.close()

    logger.info("websocket-client: disconnected")
    return reports