"""Receipt formatter for completed transactions.

Renders a Transaction three ways:
- ESC/POS control-code receipt for the physical printer
- Plain-text receipt for channels that cannot interpret control codes
- Diagnostic test receipt for checking a channel end to end

The control-code and plain-text layouts are deliberately independent; they
share only the line width. The plain-text receipt always prints a "Change"
line, while the control-code receipt omits it when there is no cashback.
"""

import logging
from datetime import datetime
from typing import Callable, List, Optional

from tillprint.models import (
    LineSize,
    PaperWidth,
    ReceiptLine,
    ReceiptSettings,
    Transaction,
)
from tillprint.printing import commands
from tillprint.printing.commands import Alignment
from tillprint.printing.layout import (
    LineLayout,
    format_money,
    format_quantity,
    item_display_name,
)

logger = logging.getLogger(__name__)

DEFAULT_SITE_NAME = "RECEIPT"
DEFAULT_FOOTER = "Thank you for your visit!"
DEFAULT_TEXT_FOOTER = ("Thank you", "for visiting us!")

# Width of the right-hand amount column in the plain-text layout
TEXT_AMOUNT_WIDTH = 7
CRLF = "\r\n"


class ReceiptFormatter(LineLayout):
    """Pure transformation of transactions into printer byte streams.

    The paper width is fixed for the lifetime of the formatter.
    """

    def __init__(
        self,
        paper_width: PaperWidth = PaperWidth.MM_80,
        encoding: str = "utf-8",
        clock: Callable[[], datetime] = datetime.now,
    ):
        super().__init__(paper_width)
        self.encoding = encoding
        self._clock = clock

    # ------------------------------------------------------------------
    # Control-code receipt
    # ------------------------------------------------------------------

    @staticmethod
    def _local_time(ts: datetime) -> datetime:
        """Aware timestamps print in the till's local zone; naive ones as given."""
        return ts.astimezone() if ts.tzinfo is not None else ts

    def _encode(self, text: str) -> bytes:
        return text.encode(self.encoding, errors="replace")

    def _line(self, text: str) -> bytes:
        return self._encode(text) + commands.LF

    def _wrapped(self, text: str, max_chars: int = 0) -> bytes:
        return b"".join(self._line(line) for line in self.wrap_text(text, max_chars))

    def _sized_lines(self, lines: List[ReceiptLine]) -> bytes:
        """Custom header/footer lines at their size tier, then back to normal."""
        out = []
        for line in lines:
            # Double-size glyphs take two columns each
            max_chars = self.chars_per_line // 2 if line.size is LineSize.LARGE else 0
            out.append(commands.text_size(line.size))
            out.append(self._wrapped(line.text, max_chars))
        out.append(commands.text_size(LineSize.NORMAL))
        return b"".join(out)

    def generate_receipt(
        self,
        transaction: Transaction,
        site_name: Optional[str] = None,
        is_reprint: bool = False,
        receipt_settings: Optional[ReceiptSettings] = None,
    ) -> bytes:
        """Render a transaction to ESC/POS bytes.

        Args:
            transaction: The completed transaction
            site_name: Header text when no custom header lines are set
            is_reprint: Print the reprint marker under the header
            receipt_settings: Custom header and footer lines

        Returns:
            ESC/POS command bytes ready to send to the printer
        """
        out: List[bytes] = []

        out.append(commands.init())
        out.append(commands.align(Alignment.CENTER))

        if receipt_settings and receipt_settings.header_lines:
            out.append(self._sized_lines(receipt_settings.header_lines))
        else:
            out.append(commands.double_size(True))
            out.append(self._wrapped(site_name or DEFAULT_SITE_NAME, self.chars_per_line // 2))
            out.append(commands.double_size(False))

        if is_reprint:
            out.append(commands.bold(True))
            out.append(self._line("*** REPRINT ***"))
            out.append(commands.bold(False))

        out.append(commands.feed(1))

        out.append(commands.align(Alignment.LEFT))
        out.append(self._line(self.divider("=")))

        ts = self._local_time(transaction.timestamp)
        out.append(self._line(self.format_line("Date:", ts.strftime("%d/%m/%Y"))))
        out.append(self._line(self.format_line("Time:", ts.strftime("%H:%M:%S"))))
        out.append(self._line(self.format_line("Transaction:", transaction.id[:16])))
        out.append(self._line(self.format_line("Operator:", transaction.operator_name)))
        if transaction.table_name:
            out.append(self._line(self.format_line("Table:", transaction.table_name)))

        out.append(self._line(self.divider("=")))

        items = transaction.items or []
        out.append(commands.bold(True))
        out.append(self._line(f"Items ({len(items)})"))
        out.append(commands.bold(False))
        out.append(self._line(self.divider("-")))

        for item in items:
            out.append(self._wrapped(item_display_name(item.product_name, item.price_label)))
            quantity_line = f"{format_quantity(item.quantity)} × {format_money(abs(item.unit_price))}"
            out.append(self._line(self.format_line(quantity_line, format_money(abs(item.line_total)))))

        out.append(self._line(self.divider("-")))
        out.append(self._line(self.format_line("Subtotal", format_money(abs(transaction.subtotal)))))

        if transaction.discount and transaction.discount > 0:
            out.append(self._line(self.format_line("Discount", f"-{format_money(transaction.discount)}")))

        if transaction.gratuity and transaction.gratuity > 0:
            out.append(self._line(self.format_line("Gratuity", f"+{format_money(transaction.gratuity)}")))

        vat_total = sum((transaction.vat_breakdown or {}).values())
        if vat_total > 0:
            out.append(self._line(self.format_line("VAT", format_money(vat_total))))

        out.append(self._line(self.divider("=")))
        out.append(commands.bold(True))
        out.append(commands.double_width(True))
        out.append(self._line(self.format_line("TOTAL", format_money(abs(transaction.total)))))
        out.append(commands.double_width(False))
        out.append(commands.bold(False))
        out.append(self._line(self.divider("=")))

        payments = transaction.payments or []
        if payments:
            out.append(commands.bold(True))
            out.append(self._line("Payment Methods:"))
            out.append(commands.bold(False))
            for payment in payments:
                out.append(self._line(self.format_line(f"  {payment.tender_name}", format_money(payment.amount))))
        else:
            out.append(commands.bold(True))
            out.append(self._wrapped(f"Payment Method: {transaction.tender_name}"))
            out.append(commands.bold(False))

        if transaction.cashback and transaction.cashback > 0:
            out.append(commands.feed(1))
            last_tender = payments[-1].tender_name if payments else transaction.tender_name
            label = "CHANGE" if last_tender == "Cash" else "CASHBACK"
            out.append(commands.bold(True))
            out.append(self._line(self.format_line(label, format_money(transaction.cashback))))
            out.append(commands.bold(False))

        if transaction.is_refund:
            out.append(commands.feed(1))
            out.append(commands.align(Alignment.CENTER))
            out.append(commands.bold(True))
            out.append(self._line("*** REFUND ***"))
            out.append(commands.bold(False))
            out.append(commands.align(Alignment.LEFT))

        out.append(commands.feed(1))
        out.append(commands.align(Alignment.CENTER))

        if receipt_settings and receipt_settings.footer_lines:
            out.append(self._sized_lines(receipt_settings.footer_lines))
        else:
            out.append(self._line(DEFAULT_FOOTER))

        out.append(commands.feed(3))
        out.append(commands.cut())

        data = b"".join(out)
        logger.debug(f"Rendered receipt {transaction.id}: {len(data)} bytes")
        return data

    def generate_test_receipt(self) -> bytes:
        """Diagnostic receipt: paper width, line width and the current time."""
        now = self._clock()
        out = [
            commands.init(),
            commands.align(Alignment.CENTER),
            commands.double_size(True),
            self._line("TEST PRINT"),
            commands.double_size(False),
            commands.feed(1),
            commands.align(Alignment.LEFT),
            self._line(self.divider("=")),
            self._line(f"Paper Width: {self.paper_width.value}"),
            self._line(f"Characters per line: {self.chars_per_line}"),
            self._line(f"Date: {now.strftime('%d/%m/%Y, %H:%M:%S')}"),
            self._line(self.divider("=")),
            commands.align(Alignment.CENTER),
            commands.bold(True),
            self._line("Printer Test Successful!"),
            commands.bold(False),
            commands.feed(3),
            commands.cut(),
        ]
        return b"".join(out)

    # ------------------------------------------------------------------
    # Plain-text receipt
    # ------------------------------------------------------------------

    def _amount_row(self, left: str, amount: float) -> str:
        width = self.chars_per_line - TEXT_AMOUNT_WIDTH
        return self.pad_right(left, width) + self.pad_left(format_money(amount), TEXT_AMOUNT_WIDTH)

    def generate_receipt_text(
        self,
        transaction: Transaction,
        site_name: Optional[str] = None,
        receipt_settings: Optional[ReceiptSettings] = None,
        terminal_id: Optional[str] = None,
        terminal_name: Optional[str] = None,
    ) -> str:
        """Render a transaction as padded plain text with CRLF line endings.

        Used where control codes cannot be interpreted, e.g. a card
        terminal's own printer or an on-screen preview.
        """
        width = self.chars_per_line
        lines: List[str] = []

        if receipt_settings and receipt_settings.header_lines:
            lines.extend(self.center_text(line.text) for line in receipt_settings.header_lines)
        else:
            lines.append(self.center_text(site_name or DEFAULT_SITE_NAME))

        lines.append(self.divider("="))
        lines.append("")

        for item in transaction.items or []:
            name = item_display_name(item.product_name, item.price_label)
            lines.append(self._amount_row(f"{format_quantity(item.quantity)} x {name}", abs(item.line_total)))

        lines.append("")
        subtotal = abs(transaction.subtotal)
        lines.append(self._amount_row("Total (inc VAT): ", subtotal))
        lines.append(self._amount_row("Subtotal: ", subtotal))
        lines.append(self.divider("="))

        if transaction.payments:
            for payment in transaction.payments:
                lines.append(self.pad_right(f"Paid By: {payment.tender_name}", width))
                lines.append(self.pad_right(f"Amount Paid: {format_money(payment.amount)}", width))
        else:
            lines.append(self.pad_right(f"Paid By: {transaction.tender_name}", width))
            lines.append(self.pad_right(f"Amount Paid: {format_money(abs(transaction.total))}", width))

        cashback = transaction.cashback if transaction.cashback and transaction.cashback > 0 else 0.0
        lines.append(self.pad_right(f"Change: {format_money(cashback)}", width))
        lines.append(self.divider("="))

        for code, amount in (transaction.vat_breakdown or {}).items():
            lines.append(self.pad_right(f"CODE = {code} - STANDARD: {format_money(amount)}", width))
            lines.append(self.pad_right(f"VAT Total: {format_money(amount)}", width))

        lines.append(self.divider("="))
        lines.append(f"Served by: {transaction.operator_name}")
        if terminal_id and terminal_name:
            lines.append(f"Terminal ID: {terminal_id} - {terminal_name}")
        lines.append(f"Transaction ID: {transaction.id}")

        ts = self._local_time(transaction.timestamp)
        lines.append(f"Time/Date: {ts.strftime('%H:%M')} / {ts.strftime('%d/%m/%Y')}")
        lines.append(self.divider("="))
        lines.append("")

        if receipt_settings and receipt_settings.footer_lines:
            lines.extend(self.center_text(line.text) for line in receipt_settings.footer_lines)
        else:
            lines.extend(self.center_text(text) for text in DEFAULT_TEXT_FOOTER)

        return CRLF.join(lines) + CRLF
