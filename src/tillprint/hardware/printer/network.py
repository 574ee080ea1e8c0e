"""Network (raw TCP) receipt printer channel.

Most Ethernet/Wi-Fi thermal printers (Epson, Star, Bixolon) accept raw
ESC/POS on TCP port 9100. The socket is opened lazily on the first send and
kept until the channel is closed.
"""

import asyncio
import logging
from typing import Optional

from tillprint.errors import NotConfigured, TransportError, UnsupportedOnPlatform
from tillprint.hardware.base import Platform, PrinterChannel

logger = logging.getLogger(__name__)


class NetworkChannel(PrinterChannel):
    """Streams ESC/POS bytes to a printer's raw TCP port."""

    DEFAULT_PORT = 9100

    def __init__(
        self,
        ip_address: Optional[str],
        port: Optional[int] = DEFAULT_PORT,
        platform: Platform = Platform.NATIVE,
        connect_timeout: float = 5.0,
        chunk_size: int = 1024,
    ):
        self._ip_address = ip_address
        self._port = port
        self._platform = platform
        self._connect_timeout = connect_timeout
        self._chunk_size = chunk_size
        self._writer: Optional[asyncio.StreamWriter] = None

    @property
    def name(self) -> str:
        return f"network:{self._ip_address}:{self._port}"

    @property
    def is_open(self) -> bool:
        return self._writer is not None

    async def _open(self) -> None:
        try:
            _, self._writer = await asyncio.wait_for(
                asyncio.open_connection(self._ip_address, self._port),
                timeout=self._connect_timeout,
            )
        except (OSError, asyncio.TimeoutError) as e:
            raise TransportError(f"Cannot connect to {self._ip_address}:{self._port}: {e}") from e
        logger.info(f"Network printer connected at {self._ip_address}:{self._port}")

    async def send(self, data: bytes) -> None:
        if not self._ip_address or not self._port:
            raise NotConfigured()
        if self._platform is Platform.WEB:
            raise UnsupportedOnPlatform(
                "Network printing on web requires browser extensions or native apps"
            )

        if self._writer is None:
            await self._open()

        logger.debug(f"Sending {len(data)} bytes to {self._ip_address}:{self._port}")
        try:
            for i in range(0, len(data), self._chunk_size):
                self._writer.write(data[i:i + self._chunk_size])
                await self._writer.drain()
        except (OSError, ConnectionError) as e:
            await self.close()
            raise TransportError(f"Network write failed: {e}") from e

    async def close(self) -> None:
        if self._writer is None:
            return
        writer, self._writer = self._writer, None
        writer.close()
        try:
            await writer.wait_closed()
        except (OSError, ConnectionError) as e:
            logger.debug(f"Socket close note: {e}")
        logger.info(f"Network printer {self._ip_address}:{self._port} disconnected")
