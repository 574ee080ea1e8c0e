"""Printer error taxonomy.

Formatting never raises; every precondition a transport or channel enforces
surfaces as one of these exceptions.
"""


class PrinterError(Exception):
    """Base class for all printer errors."""


class NotConnected(PrinterError):
    """A print was attempted before a successful connect."""

    def __init__(self, message: str = "Printer not connected"):
        super().__init__(message)


class UnsupportedOnPlatform(PrinterError):
    """The channel is unavailable in the current host environment."""


class NoDeviceConfigured(PrinterError):
    """A Bluetooth send was attempted without a device address."""

    def __init__(self, message: str = "No Bluetooth device configured"):
        super().__init__(message)


class NotConfigured(PrinterError):
    """A network send was attempted without an IP address and port."""

    def __init__(self, message: str = "Network printer not configured"):
        super().__init__(message)


class TransportError(PrinterError):
    """The underlying channel write failed."""
