"""Printing module for tillprint - ESC/POS receipt generation and delivery."""

from tillprint.printing.commands import Alignment
from tillprint.printing.layout import LineLayout, get_price_prefix
from tillprint.printing.receipt import ReceiptFormatter
from tillprint.printing.transport import PrinterTransport, RawSocketWarning, create_transport
from tillprint.printing.manager import PrintManager, PrintJob

__all__ = [
    # Layout
    "Alignment",
    "LineLayout",
    "get_price_prefix",
    # Receipt
    "ReceiptFormatter",
    # Delivery
    "PrinterTransport",
    "RawSocketWarning",
    "create_transport",
    "PrintManager",
    "PrintJob",
]
