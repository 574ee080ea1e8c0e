"""
Abstract base class for printer transport channels.

A channel accepts an encoded byte stream and either delivers it or raises
TransportError. Both real hardware channels and the mock used by the
simulator and tests follow this contract.
"""

from abc import ABC, abstractmethod
from enum import Enum


class Platform(str, Enum):
    """Host environment the printer core runs in."""

    NATIVE = "native"
    WEB = "web"  # browser-hosted: no Bluetooth, no raw TCP


class PrinterChannel(ABC):
    """Abstract base class for a printer transport channel."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable channel description for logs."""
        ...

    @abstractmethod
    async def send(self, data: bytes) -> None:
        """
        Deliver data to the printer.

        Raises:
            TransportError: if the underlying write fails
        """
        ...

    @abstractmethod
    async def close(self) -> None:
        """Release any open handle. Safe to call when nothing is open."""
        ...

    @property
    def is_open(self) -> bool:
        """Whether a handle is currently held open."""
        return False
