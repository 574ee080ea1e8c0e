"""Hardware abstraction layer for tillprint."""

from .base import Platform, PrinterChannel

__all__ = [
    "Platform",
    "PrinterChannel",
]
