"""Tests for the ESC/POS receipt and the diagnostic test receipt."""

import time
from datetime import datetime, timezone

import pytest

from tillprint.models import (
    BasketItem,
    LineSize,
    PaperWidth,
    ReceiptLine,
    ReceiptSettings,
    Transaction,
)
from tillprint.printing import commands
from tillprint.printing.receipt import ReceiptFormatter

from conftest import make_transaction, receipt_lines, split_payments


@pytest.fixture
def formatter():
    return ReceiptFormatter(PaperWidth.MM_80)


class TestGenerateReceipt:
    def test_framing(self, formatter, transaction):
        data = formatter.generate_receipt(transaction, "The Crown")
        assert data.startswith(commands.init() + commands.align(commands.Alignment.CENTER))
        assert data.endswith(commands.feed(3) + commands.cut())

    def test_header_and_metadata(self, formatter, transaction):
        lines = receipt_lines(formatter.generate_receipt(transaction, "The Crown"))
        assert lines[0] == "The Crown"
        assert lines[1] == "=" * 48
        assert formatter.format_line("Date:", "15/03/2024") in lines
        assert formatter.format_line("Time:", "14:30:05") in lines
        assert formatter.format_line("Transaction:", "TXN-20240315-000") in lines
        assert formatter.format_line("Operator:", "Alice") in lines
        assert not any(line.startswith("Table:") for line in lines)

    def test_site_name_is_double_size(self, formatter, transaction):
        data = formatter.generate_receipt(transaction, "The Crown")
        assert commands.double_size(True) + b"The Crown\n" + commands.double_size(False) in data

    def test_default_site_name(self, formatter, transaction):
        lines = receipt_lines(formatter.generate_receipt(transaction))
        assert lines[0] == "RECEIPT"

    def test_table_line(self, formatter):
        lines = receipt_lines(formatter.generate_receipt(make_transaction(table_name="Table 4")))
        assert formatter.format_line("Table:", "Table 4") in lines

    def test_items(self, formatter, transaction):
        lines = receipt_lines(formatter.generate_receipt(transaction))
        assert "Items (2)" in lines
        start = lines.index("DBL Gin & Tonic")
        assert lines[start + 1] == formatter.format_line("2 × £3.50", "£7.00")
        assert lines[start + 2] == "Crisps"
        assert lines[start + 3] == formatter.format_line("1 × £1.20", "£1.20")

    def test_multiplication_sign_is_encoded(self, formatter, transaction):
        assert "×".encode("utf-8") in formatter.generate_receipt(transaction)

    def test_refund_amounts_are_absolute(self, formatter):
        txn = make_transaction(
            items=[BasketItem("Crisps", "Standard", -1, -1.20, -1.20)],
            subtotal=-1.20,
            total=-1.20,
            is_refund=True,
        )
        lines = receipt_lines(formatter.generate_receipt(txn))
        assert formatter.format_line("1 × £1.20", "£1.20") in lines
        assert formatter.format_line("Subtotal", "£1.20") in lines
        assert formatter.format_line("TOTAL", "£1.20") in lines
        assert "*** REFUND ***" in lines

    def test_totals(self, formatter, transaction):
        lines = receipt_lines(formatter.generate_receipt(transaction))
        assert formatter.format_line("Subtotal", "£8.20") in lines
        assert formatter.format_line("VAT", "£1.37") in lines
        assert formatter.format_line("TOTAL", "£8.20") in lines
        assert not any(line.startswith("Discount") for line in lines)
        assert not any(line.startswith("Gratuity") for line in lines)

    def test_total_is_bold_double_width(self, formatter, transaction):
        data = formatter.generate_receipt(transaction)
        total = formatter.format_line("TOTAL", "£8.20").encode("utf-8")
        assert commands.bold(True) + commands.double_width(True) + total in data

    def test_discount_and_gratuity(self, formatter):
        txn = make_transaction(discount=1.0, gratuity=2.0)
        lines = receipt_lines(formatter.generate_receipt(txn))
        assert formatter.format_line("Discount", "-£1.00") in lines
        assert formatter.format_line("Gratuity", "+£2.00") in lines

    def test_vat_sums_breakdown(self, formatter):
        txn = make_transaction(vat_breakdown={"A": 1.00, "B": 0.50})
        lines = receipt_lines(formatter.generate_receipt(txn))
        assert formatter.format_line("VAT", "£1.50") in lines

    @pytest.mark.parametrize("vat", [{}, {"Z": 0.0}, None])
    def test_vat_omitted_when_zero(self, formatter, vat):
        lines = receipt_lines(formatter.generate_receipt(make_transaction(vat_breakdown=vat)))
        assert not any(line.startswith("VAT") for line in lines)

    def test_single_payment(self, formatter, transaction):
        lines = receipt_lines(formatter.generate_receipt(transaction))
        assert "Payment Method: Card" in lines
        assert "Payment Methods:" not in lines
        assert not any(line.startswith(("CHANGE", "CASHBACK")) for line in lines)

    def test_split_payments_without_cashback(self, formatter):
        txn = make_transaction(
            tender_name="Split",
            payments=split_payments(("Cash", 5.00), ("Card", 3.20)),
        )
        lines = receipt_lines(formatter.generate_receipt(txn))
        assert "Payment Methods:" in lines
        start = lines.index("Payment Methods:")
        assert lines[start + 1] == formatter.format_line("  Cash", "£5.00")
        assert lines[start + 2] == formatter.format_line("  Card", "£3.20")
        assert not any(line.startswith("Payment Method:") for line in lines)
        assert not any(line.startswith(("CHANGE", "CASHBACK")) for line in lines)

    def test_change_when_paid_in_cash(self, formatter):
        txn = make_transaction(tender_name="Cash", cashback=2.50)
        lines = receipt_lines(formatter.generate_receipt(txn))
        assert formatter.format_line("CHANGE", "£2.50") in lines

    def test_cashback_when_paid_by_card(self, formatter):
        txn = make_transaction(tender_name="Card", cashback=2.50)
        lines = receipt_lines(formatter.generate_receipt(txn))
        assert formatter.format_line("CASHBACK", "£2.50") in lines

    def test_change_label_follows_last_payment(self, formatter):
        txn = make_transaction(
            tender_name="Split",
            payments=split_payments(("Card", 5.00), ("Cash", 10.00)),
            cashback=6.80,
        )
        lines = receipt_lines(formatter.generate_receipt(txn))
        assert formatter.format_line("CHANGE", "£6.80") in lines

        txn.payments.reverse()
        lines = receipt_lines(formatter.generate_receipt(txn))
        assert formatter.format_line("CASHBACK", "£6.80") in lines

    def test_reprint_marker(self, formatter, transaction):
        lines = receipt_lines(formatter.generate_receipt(transaction, "The Crown", is_reprint=True))
        assert lines[1] == "*** REPRINT ***"
        assert "*** REPRINT ***" not in receipt_lines(formatter.generate_receipt(transaction))

    def test_default_footer(self, formatter, transaction):
        lines = receipt_lines(formatter.generate_receipt(transaction))
        assert lines[-2] == "Thank you for your visit!"
        assert lines[-1] == ""

    def test_custom_header_replaces_site_name(self, formatter, transaction):
        settings = ReceiptSettings(header_lines=[
            ReceiptLine("The Crown", LineSize.LARGE),
            ReceiptLine("High Street"),
        ])
        data = formatter.generate_receipt(transaction, "Ignored", receipt_settings=settings)
        assert b"\x1b!\x30The Crown\n\x1b!\x00High Street\n\x1b!\x00" in data
        assert "Ignored" not in receipt_lines(data)

    def test_custom_footer(self, formatter, transaction):
        settings = ReceiptSettings(footer_lines=[ReceiptLine("See you soon", LineSize.SMALL)])
        lines = receipt_lines(formatter.generate_receipt(transaction, receipt_settings=settings))
        assert "See you soon" in lines
        assert "Thank you for your visit!" not in lines

    def test_empty_settings_use_defaults(self, formatter, transaction):
        lines = receipt_lines(formatter.generate_receipt(transaction, "The Crown", receipt_settings=ReceiptSettings()))
        assert lines[0] == "The Crown"
        assert "Thank you for your visit!" in lines

    def test_no_items(self, formatter):
        lines = receipt_lines(formatter.generate_receipt(make_transaction(items=[])))
        assert "Items (0)" in lines

    def test_same_input_same_bytes(self, formatter, transaction):
        first = formatter.generate_receipt(transaction, "The Crown", True)
        second = formatter.generate_receipt(transaction, "The Crown", True)
        assert first == second


LONG = "Extraordinarily Long Name That Goes On And On Well Past The Edge Of Any Roll"


@pytest.mark.parametrize("paper_width", list(PaperWidth))
@pytest.mark.parametrize("txn", [
    make_transaction(),
    make_transaction(
        operator_name=LONG,
        table_name=LONG,
        id="X" * 60,
        items=[BasketItem(LONG, "Venti", 12, 1234.56, 14814.72)],
        subtotal=14814.72,
        total=14814.72,
        discount=999.99,
        gratuity=123.45,
        cashback=50.0,
        tender_name=LONG,
        is_refund=True,
    ),
    make_transaction(payments=split_payments((LONG, 1.0), ("Cash", 1234567.89)), cashback=1.0),
])
def test_no_line_wider_than_paper(paper_width, txn):
    formatter = ReceiptFormatter(paper_width)
    settings = ReceiptSettings(
        header_lines=[ReceiptLine(LONG, LineSize.LARGE), ReceiptLine(LONG)],
        footer_lines=[ReceiptLine(LONG, LineSize.SMALL)],
    )
    for receipt_settings in (None, settings):
        data = formatter.generate_receipt(txn, LONG, True, receipt_settings)
        for line in receipt_lines(data):
            assert len(line) <= formatter.chars_per_line, line


@pytest.fixture
def london_time(monkeypatch):
    if not hasattr(time, "tzset"):
        pytest.skip("time.tzset is unavailable on this platform")
    monkeypatch.setenv("TZ", "Europe/London")
    time.tzset()
    yield
    monkeypatch.undo()
    time.tzset()


class TestLocalTime:
    def test_utc_timestamp_printed_in_local_time(self, formatter, london_time):
        txn = make_transaction(timestamp=datetime(2024, 7, 1, 23, 30, tzinfo=timezone.utc))
        lines = receipt_lines(formatter.generate_receipt(txn))
        assert formatter.format_line("Date:", "02/07/2024") in lines
        assert formatter.format_line("Time:", "00:30:00") in lines

    def test_winter_time_matches_utc(self, formatter, london_time):
        txn = make_transaction(timestamp=datetime(2024, 1, 15, 9, 0, tzinfo=timezone.utc))
        lines = receipt_lines(formatter.generate_receipt(txn))
        assert formatter.format_line("Time:", "09:00:00") in lines

    def test_text_receipt_uses_local_time(self, formatter, london_time):
        txn = Transaction.from_dict({"id": "T", "timestamp": "2024-07-01T23:30:00.000Z"})
        text = formatter.generate_receipt_text(txn)
        assert "Time/Date: 00:30 / 02/07/2024" in text.split("\r\n")

    def test_naive_timestamp_printed_as_given(self, formatter, london_time):
        txn = make_transaction(timestamp=datetime(2024, 7, 1, 23, 30))
        lines = receipt_lines(formatter.generate_receipt(txn))
        assert formatter.format_line("Date:", "01/07/2024") in lines
        assert formatter.format_line("Time:", "23:30:00") in lines


class TestTestReceipt:
    def test_contents(self):
        formatter = ReceiptFormatter(PaperWidth.MM_58, clock=lambda: datetime(2024, 3, 15, 9, 5, 1))
        data = formatter.generate_test_receipt()
        lines = receipt_lines(data)

        assert lines[0] == "TEST PRINT"
        assert "Paper Width: 58mm" in lines
        assert "Characters per line: 32" in lines
        assert "Date: 15/03/2024, 09:05:01" in lines
        assert "Printer Test Successful!" in lines
        assert data.startswith(commands.init())
        assert data.endswith(commands.feed(3) + commands.cut())

    def test_title_is_double_size(self):
        data = ReceiptFormatter().generate_test_receipt()
        assert commands.double_size(True) + b"TEST PRINT\n" in data
        assert "Characters per line: 48" in receipt_lines(data)
