"""Asyncio channels, scheduler, reporter, fetch service and clients for block proving."""

__version__ = "0.1.0"