import asyncio
from pathlib import Path

import pytest

from ethproofs.channel import ChannelClosed, ChannelEmpty, UnboundedChannel
from ethproofs.inputs import ProvingInputs
from ethproofs.messages import ProveLatest, ProvingMsg, ReproduceFromStart
from ethproofs.reproducing import BlockFetcherConfig, ReproducingFromStartFetcher

TIMEOUT = 1.0


def _config(load_dir):
    return BlockFetcherConfig(
        is_input_emulated=False,
        input_dump_dir=None,
        input_load_dir=load_dir,
        rpc_http_url="http://localhost:8545",
        rpc_ws_url="ws://localhost:8546",
        subblock_elf_path="data/subblock-elf",
        agg_elf_path="data/aggregator-elf",
    )


def _inputs(block_number):
    return ProvingInputs(block_number, b"public", b"aggregate", [b"sub0", b"sub1"])


async def _stop(task):
    task.cancel()
    await asyncio.gather(task, return_exceptions=True)


def test_config_converts_paths(tmp_path):
    config = _config(str(tmp_path))
    assert config.input_load_dir == tmp_path
    assert config.subblock_elf_path == Path("data/subblock-elf")
    assert config.input_dump_dir is None


def test_load_block_sends_proving_message(tmp_path):
    _inputs(42).dump_to_dir(tmp_path)
    proving = UnboundedChannel()
    fetcher = ReproducingFromStartFetcher(_config(tmp_path), UnboundedChannel(), proving)
    fetcher.load_block(42)
    msg = proving.try_recv()
    assert isinstance(msg, ProvingMsg)
    assert msg.proving_inputs == _inputs(42)
    assert msg.fetch_report.block_number == 42
    assert msg.fetch_report.success is False
    assert msg.fetch_report.data_fetch_milliseconds >= 0


def test_load_missing_block_raises(tmp_path):
    proving = UnboundedChannel()
    fetcher = ReproducingFromStartFetcher(_config(tmp_path), UnboundedChannel(), proving)
    with pytest.raises(FileNotFoundError):
        fetcher.load_block(42)
    with pytest.raises(ChannelEmpty):
        proving.try_recv()


def test_load_without_load_dir_raises():
    fetcher = ReproducingFromStartFetcher(_config(None), UnboundedChannel(), UnboundedChannel())
    with pytest.raises(RuntimeError, match="input_load_dir"):
        fetcher.load_block(1)


def test_load_to_closed_sender_raises(tmp_path):
    _inputs(7).dump_to_dir(tmp_path)
    proving = UnboundedChannel()
    proving.close()
    fetcher = ReproducingFromStartFetcher(_config(tmp_path), UnboundedChannel(), proving)
    with pytest.raises(ChannelClosed):
        fetcher.load_block(7)


@pytest.mark.asyncio
async def test_run_loads_range_and_skips_missing_blocks(tmp_path):
    _inputs(100).dump_to_dir(tmp_path)
    _inputs(102).dump_to_dir(tmp_path)
    fetch, proving = UnboundedChannel(), UnboundedChannel()
    task = ReproducingFromStartFetcher(_config(tmp_path), fetch, proving).run()
    try:
        fetch.send(ReproduceFromStart(100, 3))
        first = await asyncio.wait_for(proving.recv(), TIMEOUT)
        second = await asyncio.wait_for(proving.recv(), TIMEOUT)
        assert first.proving_inputs == _inputs(100)
        assert second.proving_inputs == _inputs(102)
        assert not task.done()
    finally:
        await _stop(task)


@pytest.mark.asyncio
async def test_run_ignores_wrong_messages(tmp_path):
    _inputs(5).dump_to_dir(tmp_path)
    fetch, proving = UnboundedChannel(), UnboundedChannel()
    task = ReproducingFromStartFetcher(_config(tmp_path), fetch, proving).run()
    try:
        fetch.send(ProveLatest(1))
        fetch.send(ReproduceFromStart(5, 1))
        msg = await asyncio.wait_for(proving.recv(), TIMEOUT)
        assert msg.fetch_report.block_number == 5
        with pytest.raises(ChannelEmpty):
            proving.try_recv()
    finally:
        await _stop(task)


@pytest.mark.asyncio
async def test_run_stops_when_receiver_closes(tmp_path):
    fetch = UnboundedChannel()
    task = ReproducingFromStartFetcher(_config(tmp_path), fetch, UnboundedChannel()).run()
    fetch.close()
    assert await asyncio.wait_for(task, TIMEOUT) is None


@pytest.mark.asyncio
async def test_run_fails_without_load_dir():
    fetch = UnboundedChannel()
    task = ReproducingFromStartFetcher(_config(None), fetch, UnboundedChannel()).run()
    fetch.send(ReproduceFromStart(1, 1))
    done, _ = await asyncio.wait({task}, timeout=TIMEOUT)
    assert done == {task}
    error = task.exception()
    assert isinstance(error, RuntimeError)
    assert "input_load_dir" in str(error)