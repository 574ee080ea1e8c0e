"""ESC/POS command bytes.

Only the subset the receipt layouts use: init, alignment, emphasis,
print-mode sizes, feed, cut and the cash-drawer pulse.
"""

from enum import Enum

from tillprint.models import DrawerVoltage, LineSize

ESC = b'\x1b'
GS = b'\x1d'
LF = b'\x0a'

# ESC ! n print-mode bits
MODE_NORMAL = 0x00
MODE_DOUBLE_HEIGHT = 0x10
MODE_DOUBLE_WIDTH = 0x20
MODE_DOUBLE_SIZE = MODE_DOUBLE_HEIGHT | MODE_DOUBLE_WIDTH


class Alignment(Enum):
    """Text alignment options."""

    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"


def init() -> bytes:
    """ESC @ - initialize printer."""
    return ESC + b'@'


def align(alignment: Alignment) -> bytes:
    """ESC a n - set justification."""
    align_byte = {
        Alignment.LEFT: b'\x00',
        Alignment.CENTER: b'\x01',
        Alignment.RIGHT: b'\x02',
    }
    return ESC + b'a' + align_byte.get(alignment, b'\x00')


def bold(enabled: bool) -> bytes:
    return ESC + b'E' + (b'\x01' if enabled else b'\x00')


def underline(enabled: bool) -> bytes:
    return ESC + b'-' + (b'\x01' if enabled else b'\x00')


def print_mode(mode: int) -> bytes:
    """ESC ! n - select print mode."""
    return ESC + b'!' + bytes([mode & 0xFF])


def double_width(enabled: bool) -> bytes:
    return print_mode(MODE_DOUBLE_WIDTH if enabled else MODE_NORMAL)


def double_height(enabled: bool) -> bytes:
    return print_mode(MODE_DOUBLE_HEIGHT if enabled else MODE_NORMAL)


def double_size(enabled: bool) -> bytes:
    return print_mode(MODE_DOUBLE_SIZE if enabled else MODE_NORMAL)


def text_size(size: LineSize) -> bytes:
    """Map a header/footer size tier to a print mode.

    Small and normal share the base size in this dialect.
    """
    if size is LineSize.LARGE:
        return print_mode(MODE_DOUBLE_SIZE)
    return print_mode(MODE_NORMAL)


def feed(lines: int = 1) -> bytes:
    """ESC d n - print and feed n lines."""
    return ESC + b'd' + bytes([max(0, min(lines, 255))])


def cut() -> bytes:
    """GS V A n - feed to cutter and partial cut."""
    return GS + b'V' + b'\x41' + b'\x03'


def cash_drawer_pulse(voltage: DrawerVoltage) -> bytes:
    """ESC p m t1 t2 - kick the drawer; m selects the 12v/24v connector pin."""
    pin = 0x01 if voltage is DrawerVoltage.V24 else 0x00
    return bytes([0x1B, 0x70, pin, 0x19, 0xFA])
