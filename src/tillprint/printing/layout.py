"""Fixed-width line primitives for thermal receipts.

Every receipt is a character grid whose width is fixed by the paper roll:
32 columns on 58mm paper, 48 on 80mm.
"""

import logging
from typing import List

from tillprint.models import PaperWidth

logger = logging.getLogger(__name__)

# Canonical lower-case price tiers and their printed tags
PRICE_PREFIXES = {
    "standard": "",
    "double": "DBL",
    "small": "SML",
    "large": "LRG",
    "half": "HALF",
    "schooner": "2/3PT",
}


def get_price_prefix(label: str) -> str:
    """Short tag printed before an item name for its price tier.

    Known tiers match case-insensitively; anything else (including the
    wine measures 125ml/175ml/250ml) is printed as given.
    """
    return PRICE_PREFIXES.get(label.lower(), label)


def item_display_name(product_name: str, price_label: str) -> str:
    prefix = get_price_prefix(price_label)
    return f"{prefix} {product_name}" if prefix else product_name


def format_money(amount: float) -> str:
    return f"£{amount:.2f}"


def format_quantity(quantity: float) -> str:
    """Whole quantities print without a decimal point, never in exponent form."""
    quantity = abs(quantity)
    if float(quantity).is_integer():
        return str(int(quantity))
    return str(float(quantity))


class LineLayout:
    """Padding, centring and two-column lines on a fixed-width grid."""

    def __init__(self, paper_width: PaperWidth = PaperWidth.MM_80):
        self.paper_width = PaperWidth(paper_width)
        self.chars_per_line = self.paper_width.chars_per_line

    def pad_right(self, text: str, width: int) -> str:
        return text + " " * max(0, width - len(text))

    def pad_left(self, text: str, width: int) -> str:
        return " " * max(0, width - len(text)) + text

    def center_text(self, text: str) -> str:
        """Left-pad text to centre it. Over-long text is left as is."""
        padding = max(0, (self.chars_per_line - len(text)) // 2)
        return " " * padding + text

    def format_line(self, left: str, right: str) -> str:
        """Right-justify ``right`` and fit ``left`` in the remaining columns.

        A left column that does not fit is cut and ends in "...", so the
        result is never wider than ``chars_per_line``.
        """
        # Right column may not crowd out the left ellipsis
        max_right = self.chars_per_line - 4
        if len(right) > max_right:
            right = right[:max(0, max_right - 3)] + "..."

        left_width = self.chars_per_line - len(right)
        if len(left) > left_width:
            left = left[:max(0, left_width - 3)] + "..."

        return self.pad_right(left, left_width) + right

    def divider(self, char: str = "-") -> str:
        return char * self.chars_per_line

    def wrap_text(self, text: str, max_chars: int = 0) -> List[str]:
        """Word-wrap text to the grid width (or ``max_chars``)."""
        max_chars = max_chars or self.chars_per_line
        lines: List[str] = []

        for raw in text.splitlines() or [""]:
            words = raw.split()
            if not words:
                lines.append("")
                continue

            current = ""
            for word in words:
                while len(word) > max_chars:
                    if current:
                        lines.append(current)
                        current = ""
                    lines.append(word[:max_chars])
                    word = word[max_chars:]

                if not current:
                    current = word
                elif len(current) + 1 + len(word) <= max_chars:
                    current = f"{current} {word}"
                else:
                    lines.append(current)
                    current = word

            if current:
                lines.append(current)

        return lines
