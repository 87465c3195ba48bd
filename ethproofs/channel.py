"""Unbounded asynchronous message channels used to connect the service tasks."""

from __future__ import annotations

import asyncio
from collections import deque
from contextlib import suppress
from typing import Deque, Generic, TypeVar

T = TypeVar("T")
U = TypeVar("U")


class ChannelClosed(Exception):
    """Raised when sending on a closed channel or receiving from a closed, drained one."""


class ChannelEmpty(Exception):
    """Raised by a non-blocking receive when no message is waiting."""


class UnboundedChannel(Generic[T]):
    """A one-directional FIFO channel: sending never blocks, receiving awaits."""

    def __init__(self) -> None:
        self._items: Deque[T] = deque()
        self._waiters: Deque[asyncio.Future] = deque()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def __len__(self) -> int:
        return len(self._items)

    def send(self, msg: T) -> None:
        """Queue a message; raises ChannelClosed once the channel is closed."""
        if self._closed:
            raise ChannelClosed("failed to send msg: channel closed")
        self._items.append(msg)
        self._wake_one()

    async def recv(self) -> T:
        """Wait for the next message; raises ChannelClosed when closed and drained."""
        while not self._items:
            if self._closed:
                raise ChannelClosed("channel closed")
            waiter = asyncio.get_running_loop().create_future()
            self._waiters.append(waiter)
            try:
                await waiter
            except asyncio.CancelledError:
                # a wake-up delivered to a cancelled receiver goes to the next one
                if waiter.done() and not waiter.cancelled():
                    self._wake_one()
                raise
            finally:
                with suppress(ValueError):
                    self._waiters.remove(waiter)
        return self._items.popleft()

    def try_recv(self) -> T:
        """Return a waiting message at once, or raise ChannelEmpty / ChannelClosed."""
        if self._items:
            return self._items.popleft()
        if self._closed:
            raise ChannelClosed("channel closed")
        raise ChannelEmpty("channel empty")

    def close(self) -> None:
        """Refuse further messages; queued ones can still be received."""
        self._closed = True
        while self._waiters:
            waiter = self._waiters.popleft()
            if not waiter.done():
                waiter.set_result(None)

    def __aiter__(self) -> "UnboundedChannel[T]":
        return self

    async def __anext__(self) -> T:
        try:
            return await self.recv()
        except ChannelClosed:
            raise StopAsyncIteration from None

    def _wake_one(self) -> None:
        while self._waiters:
            waiter = self._waiters.popleft()
            if not waiter.done():
                waiter.set_result(None)
                return


class DuplexEndpoint(Generic[T, U]):
    """One side of a duplex channel: sends T outwards and receives U."""

    def __init__(self, outgoing: UnboundedChannel[T], incoming: UnboundedChannel[U]) -> None:
        self.outgoing = outgoing
        self.incoming = incoming

    def send(self, msg: T) -> None:
        """Send a message to the opposite endpoint."""
        self.outgoing.send(msg)

    async def recv(self) -> U:
        """Wait for a message from the opposite endpoint."""
        return await self.incoming.recv()

    def __aiter__(self) -> UnboundedChannel[U]:
        return self.incoming.__aiter__()


class DuplexChannel(Generic[T, U]):
    """Two linked endpoints: endpoint1 sends T and receives U, endpoint2 the reverse."""

    def __init__(self) -> None:
        forward: UnboundedChannel[T] = UnboundedChannel()
        backward: UnboundedChannel[U] = UnboundedChannel()
        self.endpoint1: DuplexEndpoint[T, U] = DuplexEndpoint(forward, backward)
        self.endpoint2: DuplexEndpoint[U, T] = DuplexEndpoint(backward, forward)