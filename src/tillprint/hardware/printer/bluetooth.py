"""Bluetooth (SPP) receipt printer channel.

Bluetooth thermal printers expose the Serial Port Profile. The host binds the
paired device to an RFCOMM serial port (``rfcomm bind 0 <address>`` on
Linux, an outgoing COM port on Windows) and this channel writes ESC/POS bytes
to that port with pyserial.

Override the port with env var: TILLPRINT_BLUETOOTH_PORT=/dev/rfcomm1
"""

import asyncio
import logging
from typing import List, Optional

import serial
from serial.tools import list_ports

from tillprint.errors import NoDeviceConfigured, TransportError, UnsupportedOnPlatform
from tillprint.hardware.base import Platform, PrinterChannel
from tillprint.models import ConnectionType, PrinterDevice

logger = logging.getLogger(__name__)

# Port description fragments that identify Bluetooth serial links
_BLUETOOTH_PORT_HINTS = ("rfcomm", "bluetooth", "bthenum")


class BluetoothChannel(PrinterChannel):
    """Writes to a Bluetooth printer through its bound RFCOMM serial port."""

    DEFAULT_PORT = "/dev/rfcomm0"
    DEFAULT_BAUD = 9600

    def __init__(
        self,
        device_address: Optional[str],
        device_name: Optional[str] = None,
        port: str = DEFAULT_PORT,
        baud: int = DEFAULT_BAUD,
        platform: Platform = Platform.NATIVE,
        chunk_size: int = 256,
        chunk_delay: float = 0.01,
    ):
        self._address = device_address
        self._device_name = device_name
        self._port = port
        self._baud = baud
        self._platform = platform
        self._chunk_size = chunk_size
        self._chunk_delay = chunk_delay
        self._serial = None

    @staticmethod
    def is_supported(platform: Platform) -> bool:
        """Bluetooth needs a native host; browsers have no serial access."""
        return platform is not Platform.WEB

    @staticmethod
    def discover() -> List[PrinterDevice]:
        """List serial ports that look like bound Bluetooth links."""
        devices = []
        for info in list_ports.comports():
            haystack = f"{info.device} {info.description} {info.hwid}".lower()
            if any(hint in haystack for hint in _BLUETOOTH_PORT_HINTS):
                devices.append(PrinterDevice(
                    name=info.description or info.device,
                    address=info.serial_number or info.device,
                    type=ConnectionType.BLUETOOTH,
                ))
        logger.info(f"Found {len(devices)} Bluetooth serial port(s)")
        return devices

    @property
    def name(self) -> str:
        return f"bluetooth:{self._device_name or self._address} via {self._port}"

    @property
    def is_open(self) -> bool:
        return self._serial is not None

    def _open(self) -> None:
        try:
            # serial_for_url accepts plain device paths as well as pyserial URLs
            self._serial = serial.serial_for_url(
                self._port,
                baudrate=self._baud,
                bytesize=serial.EIGHTBITS,
                parity=serial.PARITY_NONE,
                stopbits=serial.STOPBITS_ONE,
                timeout=2.0,
            )
        except (serial.SerialException, OSError, ValueError) as e:
            raise TransportError(f"Cannot open Bluetooth port {self._port}: {e}") from e
        logger.info(f"Bluetooth printer {self._address} opened on {self._port}")

    async def send(self, data: bytes) -> None:
        if not self.is_supported(self._platform):
            raise UnsupportedOnPlatform("Bluetooth printing not supported on web")
        if not self._address:
            raise NoDeviceConfigured()

        if self._serial is None:
            self._open()

        logger.debug(f"Sending {len(data)} bytes via Bluetooth")
        try:
            # Send in chunks to avoid overrunning the printer's buffer
            for i in range(0, len(data), self._chunk_size):
                self._serial.write(data[i:i + self._chunk_size])
                self._serial.flush()
                if self._chunk_delay:
                    await asyncio.sleep(self._chunk_delay)
        except (serial.SerialException, OSError) as e:
            await self.close()
            raise TransportError(f"Bluetooth write failed: {e}") from e

    async def close(self) -> None:
        if self._serial is not None:
            self._serial.close()
            self._serial = None
            logger.info("Bluetooth printer port closed")
