"""Tests for the fixed-width line primitives and ESC/POS command bytes."""

import pytest

from tillprint.models import DrawerVoltage, LineSize, PaperWidth
from tillprint.printing import commands
from tillprint.printing.commands import Alignment
from tillprint.printing.layout import (
    LineLayout,
    format_money,
    format_quantity,
    get_price_prefix,
    item_display_name,
)


class TestPricePrefix:
    @pytest.mark.parametrize("label,expected", [
        ("Standard", ""),
        ("Double", "DBL"),
        ("double", "DBL"),
        ("Small", "SML"),
        ("LARGE", "LRG"),
        ("Half", "HALF"),
        ("Schooner", "2/3PT"),
        ("125ml", "125ml"),
        ("175ml", "175ml"),
        ("250ml", "250ml"),
        ("Venti", "Venti"),
    ])
    def test_prefix(self, label, expected):
        assert get_price_prefix(label) == expected

    def test_display_name_with_prefix(self):
        assert item_display_name("Gin", "Double") == "DBL Gin"

    def test_display_name_standard_has_no_leading_space(self):
        assert item_display_name("Gin", "Standard") == "Gin"


class TestFormatting:
    def test_money(self):
        assert format_money(3.5) == "£3.50"
        assert format_money(0) == "£0.00"

    def test_quantity(self):
        assert format_quantity(2) == "2"
        assert format_quantity(2.0) == "2"
        assert format_quantity(-3) == "3"
        assert format_quantity(0.5) == "0.5"

    def test_large_quantity_is_not_in_exponent_form(self):
        assert format_quantity(1234567) == "1234567"
        assert format_quantity(1234567.0) == "1234567"
        assert format_quantity(-2500000) == "2500000"
        assert format_quantity(1234567.5) == "1234567.5"


class TestLineLayout:
    def test_chars_per_line(self):
        assert LineLayout(PaperWidth.MM_58).chars_per_line == 32
        assert LineLayout(PaperWidth.MM_80).chars_per_line == 48
        assert LineLayout("58mm").chars_per_line == 32

    def test_format_line_58mm(self):
        layout = LineLayout(PaperWidth.MM_58)
        line = layout.format_line("Subtotal", "£12.50")
        assert line == "Subtotal" + " " * 18 + "£12.50"
        assert len(line) == 32

    def test_format_line_truncates_left(self):
        layout = LineLayout(PaperWidth.MM_58)
        line = layout.format_line("A" * 40, "£1.00")
        assert len(line) == 32
        assert line == "A" * 24 + "..." + "£1.00"

    def test_format_line_clamps_long_right(self):
        layout = LineLayout(PaperWidth.MM_58)
        line = layout.format_line("Operator:", "B" * 50)
        assert len(line) <= 32
        assert line.endswith("...")

    @pytest.mark.parametrize("left_len", [0, 1, 10, 31, 32, 33, 100])
    @pytest.mark.parametrize("right_len", [0, 5, 27, 28, 29, 60])
    def test_format_line_never_exceeds_width(self, left_len, right_len):
        layout = LineLayout(PaperWidth.MM_58)
        assert len(layout.format_line("L" * left_len, "R" * right_len)) <= 32

    def test_center_text(self):
        layout = LineLayout(PaperWidth.MM_80)
        assert layout.center_text("HI") == " " * 23 + "HI"

    def test_center_text_too_long_unchanged(self):
        layout = LineLayout(PaperWidth.MM_58)
        text = "X" * 40
        assert layout.center_text(text) == text

    def test_padding(self):
        layout = LineLayout()
        assert layout.pad_right("ab", 5) == "ab   "
        assert layout.pad_left("ab", 5) == "   ab"
        assert layout.pad_right("abcdef", 3) == "abcdef"

    def test_divider(self):
        assert LineLayout(PaperWidth.MM_58).divider("=") == "=" * 32

    def test_wrap_text(self):
        layout = LineLayout(PaperWidth.MM_58)
        lines = layout.wrap_text("The Quick Brown Fox Jumps Over The Lazy Dog Again")
        assert lines == ["The Quick Brown Fox Jumps Over", "The Lazy Dog Again"]

    def test_wrap_text_breaks_long_words(self):
        layout = LineLayout(PaperWidth.MM_58)
        lines = layout.wrap_text("X" * 70)
        assert lines == ["X" * 32, "X" * 32, "X" * 6]

    def test_wrap_text_custom_width(self):
        layout = LineLayout(PaperWidth.MM_80)
        assert all(len(line) <= 24 for line in layout.wrap_text("word " * 30, 24))

    def test_wrap_text_empty(self):
        assert LineLayout().wrap_text("") == [""]


class TestCommands:
    def test_init_and_align(self):
        assert commands.init() == b"\x1b@"
        assert commands.align(Alignment.CENTER) == b"\x1ba\x01"
        assert commands.align(Alignment.LEFT) == b"\x1ba\x00"

    def test_emphasis(self):
        assert commands.bold(True) == b"\x1bE\x01"
        assert commands.bold(False) == b"\x1bE\x00"
        assert commands.underline(True) == b"\x1b-\x01"

    def test_print_modes(self):
        assert commands.double_size(True) == b"\x1b!\x30"
        assert commands.double_width(True) == b"\x1b!\x20"
        assert commands.double_height(True) == b"\x1b!\x10"
        assert commands.double_size(False) == b"\x1b!\x00"

    def test_text_size(self):
        assert commands.text_size(LineSize.LARGE) == b"\x1b!\x30"
        assert commands.text_size(LineSize.NORMAL) == b"\x1b!\x00"
        assert commands.text_size(LineSize.SMALL) == b"\x1b!\x00"

    def test_feed_and_cut(self):
        assert commands.feed(3) == b"\x1bd\x03"
        assert commands.cut() == b"\x1dVA\x03"

    def test_drawer_pulse(self):
        assert commands.cash_drawer_pulse(DrawerVoltage.V12) == bytes([0x1B, 0x70, 0x00, 0x19, 0xFA])
        assert commands.cash_drawer_pulse(DrawerVoltage.V24) == bytes([0x1B, 0x70, 0x01, 0x19, 0xFA])
