import asyncio

import pytest

from ethproofs.channel import ChannelEmpty, DuplexChannel, UnboundedChannel
from ethproofs.inputs import ProvingInputs
from ethproofs.messages import ProvedMsg, ProveLatest, ProvingMsg, ReproduceFromStart, WatchMsg
from ethproofs.report import BlockProvingReport
from ethproofs.scheduler import Scheduler

TIMEOUT = 1.0


class Wiring:
    def __init__(self):
        self.fetch_service = UnboundedChannel()
        self.proof_service = UnboundedChannel()
        self.fetcher = DuplexChannel()
        self.proving = DuplexChannel()
        self.reporter = UnboundedChannel()

    def ends(self):
        return (
            self.fetch_service,
            self.proof_service,
            self.fetcher.endpoint2,
            self.proving.endpoint2,
            self.reporter,
        )


async def _stop(task):
    task.cancel()
    await asyncio.gather(task, return_exceptions=True)


@pytest.mark.asyncio
async def test_fetch_message_goes_to_fetcher():
    wiring = Wiring()
    task = Scheduler(*wiring.ends()).run()
    try:
        wiring.fetch_service.send(ProveLatest(2))
        received = await asyncio.wait_for(wiring.fetcher.endpoint1.recv(), TIMEOUT)
        assert received == ProveLatest(2)
    finally:
        await _stop(task)


@pytest.mark.asyncio
async def test_watch_message_goes_to_reporter():
    wiring = Wiring()
    task = Scheduler(*wiring.ends()).run()
    try:
        watch = WatchMsg(UnboundedChannel())
        wiring.fetch_service.send(watch)
        received = await asyncio.wait_for(wiring.reporter.recv(), TIMEOUT)
        assert received is watch
    finally:
        await _stop(task)


@pytest.mark.asyncio
async def test_proved_message_goes_to_proving_client():
    wiring = Wiring()
    task = Scheduler(*wiring.ends()).run()
    try:
        proved = ProvedMsg(success=True, block_number=3, proof=b"\x01")
        wiring.proof_service.send(proved)
        received = await asyncio.wait_for(wiring.proving.endpoint1.recv(), TIMEOUT)
        assert received is proved
    finally:
        await _stop(task)


@pytest.mark.asyncio
async def test_proving_message_goes_from_fetcher_to_proving_client():
    wiring = Wiring()
    task = Scheduler(*wiring.ends()).run()
    try:
        msg = ProvingMsg(BlockProvingReport(block_number=4), ProvingInputs(4, b"p", b"a", [b"s"]))
        wiring.fetcher.endpoint1.send(msg)
        received = await asyncio.wait_for(wiring.proving.endpoint1.recv(), TIMEOUT)
        assert received is msg
    finally:
        await _stop(task)


@pytest.mark.asyncio
async def test_report_goes_from_proving_client_to_reporter():
    wiring = Wiring()
    task = Scheduler(*wiring.ends()).run()
    try:
        report = BlockProvingReport(block_number=5)
        wiring.proving.endpoint1.send(report)
        received = await asyncio.wait_for(wiring.reporter.recv(), TIMEOUT)
        assert received is report
    finally:
        await _stop(task)


@pytest.mark.asyncio
async def test_wrong_message_is_dropped_and_routing_continues():
    wiring = Wiring()
    task = Scheduler(*wiring.ends()).run()
    try:
        wiring.fetch_service.send(BlockProvingReport(block_number=6))
        wiring.fetch_service.send(ReproduceFromStart(6, 1))
        received = await asyncio.wait_for(wiring.fetcher.endpoint1.recv(), TIMEOUT)
        assert received == ReproduceFromStart(6, 1)
        with pytest.raises(ChannelEmpty):
            wiring.reporter.try_recv()
        assert not task.done()
    finally:
        await _stop(task)


@pytest.mark.asyncio
async def test_closed_source_fails_the_scheduler():
    wiring = Wiring()
    task = Scheduler(*wiring.ends()).run()
    wiring.fetch_service.close()
    done, _ = await asyncio.wait({task}, timeout=TIMEOUT)
    assert done == {task}
    error = task.exception()
    assert isinstance(error, RuntimeError)
    assert "fetch-service" in str(error)


@pytest.mark.asyncio
async def test_closed_destination_fails_the_scheduler():
    wiring = Wiring()
    task = Scheduler(*wiring.ends()).run()
    wiring.reporter.close()
    wiring.proving.endpoint1.send(BlockProvingReport(block_number=7))
    done, _ = await asyncio.wait({task}, timeout=TIMEOUT)
    assert done == {task}
    error = task.exception()
    assert isinstance(error, RuntimeError)
    assert "reporter" in str(error)