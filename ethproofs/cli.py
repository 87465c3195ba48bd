"""Command-line clients that request block proving and wait for the reports."""

from __future__ import annotations

import argparse
import asyncio
import os
import sys
from pathlib import Path
from typing import Awaitable, Callable, Optional, Sequence
from urllib.parse import urlsplit

import aiohttp
from dotenv import find_dotenv, load_dotenv

from ethproofs.fetch import (
    ProveBlockByNumberParams,
    ProveLatestBlockParams,
    ReproduceBlockByNumberParams,
)
from ethproofs.fetch_client import (
    prove_block_by_number,
    prove_latest_block,
    reproduce_block_by_number,
    wait_for_proving_complete,
)
from ethproofs.logger import setup_logger

DEFAULT_HTTP_URL = "http://127.0.0.1:8080"
DEFAULT_WS_URL = "ws://127.0.0.1:8080"
DEFAULT_REPORT_PATH = "proving_report.csv"

_U64_MAX = 2**64 - 1


def _u64(text: str) -> int:
    if not (text.isascii() and text.isdigit()) or int(text) > _U64_MAX:
        raise argparse.ArgumentTypeError(f"invalid unsigned integer: {text!r}")
    return int(text)


def _url(text: str) -> str:
    parts = urlsplit(text)
    if not parts.scheme or not parts.netloc:
        raise argparse.ArgumentTypeError(f"invalid URL: {text!r}")
    return text


def _parse_args(
    argv: Optional[Sequence[str]],
    prog: str,
    start_help: Optional[str],
    count_help: str,
) -> argparse.Namespace:
    path = find_dotenv(usecwd=True)
    if path:
        load_dotenv(path)
    setup_logger()

    parser = argparse.ArgumentParser(prog=prog)
    if start_help is not None:
        parser.add_argument("--start-block-num", type=_u64, required=True, help=start_help)
    parser.add_argument("--count", type=_u64, default=1, help=count_help)
    parser.add_argument(
        "--report-path",
        type=Path,
        default=Path(DEFAULT_REPORT_PATH),
        help="CSV file path containing the proving result",
    )
    parser.add_argument(
        "--http-url",
        type=_url,
        default=os.environ.get("FETCH_HTTP_URL", DEFAULT_HTTP_URL),
        help="Fetch service HTTP URL (env FETCH_HTTP_URL)",
    )
    parser.add_argument(
        "--ws-url",
        type=_url,
        default=os.environ.get("FETCH_WS_URL", DEFAULT_WS_URL),
        help="Fetch service websocket URL (env FETCH_WS_URL)",
    )
    return parser.parse_args(argv)


def _execute(
    request: Callable[[str, object], Awaitable[int]],
    args: argparse.Namespace,
    params: object,
) -> int:
    async def flow() -> None:
        await request(args.http_url, params)
        await wait_for_proving_complete(args.ws_url, args.count, args.report_path)

    try:
        asyncio.run(flow())
    except (aiohttp.ClientError, OSError, ValueError) as err:
        print(f"error: {err}", file=sys.stderr)
        return 1
    return 0


def prove_block_by_number_main(argv: Optional[Sequence[str]] = None) -> int:
    """Request proving blocks from a start number and wait for their reports."""
    args = _parse_args(
        argv,
        "prove-block-by-number",
        "Requested start block number to prove",
        "Number of requested blocks",
    )
    params = ProveBlockByNumberParams(args.start_block_num, args.count)
    return _execute(prove_block_by_number, args, params)


def prove_latest_block_main(argv: Optional[Sequence[str]] = None) -> int:
    """Request proving the latest blocks and wait for their reports."""
    args = _parse_args(argv, "prove-latest-block", None, "Number of requested latest blocks")
    params = ProveLatestBlockParams(args.count)
    return _execute(prove_latest_block, args, params)


def reproduce_block_by_number_main(argv: Optional[Sequence[str]] = None) -> int:
    """Request reproducing blocks from a start number and wait for their reports."""
    args = _parse_args(
        argv,
        "reproduce-block-by-number",
        "Requested start block number to reproduce",
        "Number of requested blocks",
    )
    params = ReproduceBlockByNumberParams(args.start_block_num, args.count)
    return _execute(reproduce_block_by_number, args, params)