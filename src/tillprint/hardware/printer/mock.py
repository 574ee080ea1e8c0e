"""Mock printer channel for the simulator and tests."""

import logging
import re
from typing import List, Optional

from tillprint.hardware.base import PrinterChannel

logger = logging.getLogger(__name__)

# ESC/GS followed by an opcode and its parameter byte(s)
_CONTROL_SEQUENCE = re.compile(rb"\x1bp[\x00-\xff]{3}|\x1b@|\x1b[aE\-!d][\x00-\xff]|\x1dVA[\x00-\xff]")


def strip_control_codes(data: bytes, encoding: str = "utf-8") -> str:
    """Readable text of an ESC/POS stream, for previews and logs."""
    return _CONTROL_SEQUENCE.sub(b"", data).decode(encoding, errors="replace")


class MockChannel(PrinterChannel):
    """Records every payload instead of writing to hardware."""

    def __init__(self, label: str = "mock", fail_with: Optional[Exception] = None):
        self._label = label
        self.fail_with = fail_with
        self.sent: List[bytes] = []
        self.closed = 0

    @property
    def name(self) -> str:
        return self._label

    async def send(self, data: bytes) -> None:
        if self.fail_with is not None:
            raise self.fail_with
        self.sent.append(bytes(data))
        logger.debug(f"Mock send ({self._label}): {len(data)} bytes")
        logger.debug("=== MOCK PRINT ===\n%s", strip_control_codes(data))

    async def close(self) -> None:
        self.closed += 1
