"""Lifecycle interface for background pollers owned by the dashboard app."""

from __future__ import annotations

from abc import ABC, abstractmethod


class Service(ABC):
    """A background job with an explicit start/stop lifecycle.

    Usable as an async context manager: entering starts the service,
    leaving stops it.
    """

    @property
    @abstractmethod
    def service_name(self) -> str:
        ...

    @abstractmethod
    async def start(self) -> None:
        """Schedule the background work and return without waiting for it."""

    @abstractmethod
    async def stop(self) -> None:
        """Stop scheduled work. Safe to call on a service that never started."""

    @abstractmethod
    async def health_check(self) -> bool:
        """True while the background work is scheduled."""

    async def __aenter__(self) -> Service:
        await self.start()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.stop()
