"""Printer transport: persisted connection settings and byte routing.

PrinterTransport is the single owner of the process-wide PrinterSettings.
Callers share one instance by reference. Calls are not serialised: concurrent
connect/disconnect calls race (last writer to storage wins) and concurrent
prints may interleave bytes on the channel. Use PrintManager to queue jobs.
"""

from __future__ import annotations

import asyncio
import logging
import warnings
from typing import Any, Callable, List, Optional, Tuple

from tillprint.config.settings import AppSettings
from tillprint.core.events import Event, EventBus, EventType
from tillprint.core.storage import SettingsStore
from tillprint.errors import NotConnected, UnsupportedOnPlatform
from tillprint.hardware.base import Platform, PrinterChannel
from tillprint.hardware.printer import BluetoothChannel, NetworkChannel, create_channel
from tillprint.models import (
    ConnectionType,
    PrinterDevice,
    PrinterSettings,
    ReceiptSettings,
    Transaction,
)
from tillprint.printing import commands
from tillprint.printing.receipt import ReceiptFormatter

logger = logging.getLogger(__name__)

PRINTER_SETTINGS_KEY = "printerSettings"

ChannelFactory = Callable[[ConnectionType, PrinterSettings], PrinterChannel]


class RawSocketWarning(UserWarning):
    """Raw TCP from a browser host is likely to be blocked."""


class PrinterTransport:
    """Owns printer settings, connection lifecycle and channel routing."""

    def __init__(
        self,
        store: SettingsStore,
        channel_factory: ChannelFactory,
        platform: Platform = Platform.NATIVE,
        encoding: str = "utf-8",
        event_bus: Optional[EventBus] = None,
    ) -> None:
        self._store = store
        self._channel_factory = channel_factory
        self._platform = platform
        self._encoding = encoding
        self._event_bus = event_bus
        self._settings = PrinterSettings()
        self._channel: Optional[PrinterChannel] = None
        self._channel_key: Optional[Tuple[Any, ...]] = None

    # ------------------------------------------------------------------
    # Settings
    # ------------------------------------------------------------------

    async def load_settings(self) -> PrinterSettings:
        """Load persisted settings, falling back to defaults on any failure."""
        try:
            stored = await self._store.get_item(PRINTER_SETTINGS_KEY)
            if stored:
                self._settings = PrinterSettings.model_validate_json(stored)
                logger.info(f"Loaded printer settings: {self._settings.model_dump(mode='json')}")
        except (OSError, ValueError) as e:
            logger.error(f"Error loading printer settings, using defaults: {e}")
            self._settings = PrinterSettings()
        return self.get_settings()

    async def save_settings(self, settings: PrinterSettings) -> None:
        """Persist settings, then adopt them.

        Raises:
            OSError: storage write failed; in-memory settings are unchanged
        """
        try:
            await self._store.set_item(PRINTER_SETTINGS_KEY, settings.model_dump_json(by_alias=True))
        except OSError as e:
            logger.error(f"Error saving printer settings: {e}")
            raise
        self._settings = settings.model_copy()
        logger.info("Printer settings saved")
        await self._emit(EventType.SETTINGS_SAVED, self._settings.model_dump(mode="json"))

    async def update_settings(self, **changes: Any) -> PrinterSettings:
        """Validate and persist a partial change (paper width, drawer, ...)."""
        settings = PrinterSettings.model_validate({**self._settings.model_dump(), **changes})
        await self.save_settings(settings)
        return self.get_settings()

    def get_settings(self) -> PrinterSettings:
        """Snapshot of the current settings."""
        return self._settings.model_copy()

    def is_connected(self) -> bool:
        return self._settings.is_connected

    # ------------------------------------------------------------------
    # Connection lifecycle
    # ------------------------------------------------------------------

    async def scan_bluetooth_devices(self) -> List[PrinterDevice]:
        if not BluetoothChannel.is_supported(self._platform):
            logger.warning("Bluetooth scanning is not available on this platform")
            return []

        logger.info("Scanning for Bluetooth devices...")
        return await asyncio.to_thread(BluetoothChannel.discover)

    async def connect_bluetooth(self, device_address: str, device_name: str) -> bool:
        """Record a Bluetooth printer as the connected device.

        Raises:
            UnsupportedOnPlatform: the host has no Bluetooth; nothing changes
        """
        if not BluetoothChannel.is_supported(self._platform):
            raise UnsupportedOnPlatform("Bluetooth connection is not available on web")

        logger.info(f"Connecting to Bluetooth device: {device_address}")
        await self.save_settings(self._settings.model_copy(update={
            "device_address": device_address,
            "device_name": device_name,
            "is_connected": True,
        }))
        logger.info("Connected to Bluetooth device")
        await self._emit(EventType.PRINTER_CONNECTED, {"type": "bluetooth", "address": device_address})
        return True

    async def connect_network(self, ip_address: str, port: int = NetworkChannel.DEFAULT_PORT) -> bool:
        """Record a network printer as the connected device.

        The socket itself is opened on the first send. On a web host this
        warns with RawSocketWarning but still succeeds.
        """
        logger.info(f"Connecting to network printer: {ip_address}:{port}")

        if self._platform is Platform.WEB:
            message = (
                "Network printer connection on web requires CORS configuration on "
                "your printer. The connection will be attempted but may fail due "
                "to browser security restrictions."
            )
            logger.warning(message)
            warnings.warn(message, RawSocketWarning, stacklevel=2)

        await self.save_settings(self._settings.model_copy(update={
            "ip_address": ip_address,
            "port": port,
            "is_connected": True,
        }))
        logger.info("Network printer configured")
        await self._emit(EventType.PRINTER_CONNECTED, {"type": "network", "address": f"{ip_address}:{port}"})
        return True

    async def disconnect(self) -> None:
        await self._close_channel()
        await self.save_settings(self._settings.model_copy(update={"is_connected": False}))
        logger.info("Disconnected")
        await self._emit(EventType.PRINTER_DISCONNECTED, {})

    async def auto_connect(self) -> bool:
        """Re-apply the stored connection at startup when auto-connect is on.

        Returns:
            True if a connection was re-established
        """
        settings = self._settings
        if not settings.auto_connect:
            return False

        if settings.connection_type is ConnectionType.BLUETOOTH and settings.device_address:
            return await self.connect_bluetooth(settings.device_address, settings.device_name or "")
        if settings.connection_type is ConnectionType.NETWORK and settings.ip_address and settings.port:
            return await self.connect_network(settings.ip_address, settings.port)

        logger.info("Auto-connect enabled but no stored endpoint")
        return False

    # ------------------------------------------------------------------
    # Printing
    # ------------------------------------------------------------------

    def _formatter(self) -> ReceiptFormatter:
        return ReceiptFormatter(self._settings.paper_width, encoding=self._encoding)

    async def print_receipt(
        self,
        transaction: Transaction,
        site_name: Optional[str] = None,
        is_reprint: bool = False,
        receipt_settings: Optional[ReceiptSettings] = None,
    ) -> None:
        """Render and send a transaction receipt.

        Raises:
            NotConnected: no printer connected; nothing is sent
            PrinterError: the channel rejected the data
        """
        if not self._settings.is_connected:
            raise NotConnected()

        data = self._formatter().generate_receipt(transaction, site_name, is_reprint, receipt_settings)
        try:
            await self.send_data(data)
        except Exception as e:
            logger.error(f"Print error: {e}")
            raise
        logger.info(f"Receipt {'reprinted' if is_reprint else 'printed'} successfully")

    async def print_test_receipt(self) -> None:
        if not self._settings.is_connected:
            raise NotConnected()

        try:
            await self.send_data(self._formatter().generate_test_receipt())
        except Exception as e:
            logger.error(f"Test print error: {e}")
            raise
        logger.info("Test receipt printed successfully")

    async def open_cash_drawer(self) -> None:
        """Kick the cash drawer. Best effort: silent when disabled, logged when offline."""
        if not self._settings.cash_drawer_enabled:
            logger.info("Cash drawer is disabled in settings")
            return

        if not self._settings.is_connected:
            logger.warning("Cannot open cash drawer: printer not connected")
            return

        try:
            await self.send_data(commands.cash_drawer_pulse(self._settings.cash_drawer_voltage))
        except Exception as e:
            logger.error(f"Failed to open cash drawer: {e}")
            raise
        logger.info("Cash drawer opened")
        await self._emit(EventType.DRAWER_OPENED, {"voltage": self._settings.cash_drawer_voltage.value})

    async def send_data(self, data: bytes) -> None:
        """Route bytes to the channel for the configured connection type."""
        channel = await self._channel_for_settings()
        logger.debug(f"Sending {len(data)} bytes via {channel.name}")
        await channel.send(data)

    async def _channel_for_settings(self) -> PrinterChannel:
        s = self._settings
        key = (s.connection_type, s.device_address, s.ip_address, s.port)
        if self._channel is not None and self._channel_key != key:
            await self._close_channel()
        if self._channel is None:
            self._channel = self._channel_factory(s.connection_type, s)
            self._channel_key = key
        return self._channel

    async def _close_channel(self) -> None:
        if self._channel is not None:
            channel, self._channel = self._channel, None
            self._channel_key = None
            await channel.close()

    async def _emit(self, event_type: EventType, data: dict) -> None:
        if self._event_bus is not None:
            await self._event_bus.emit_async(Event(event_type, data=data, source="printer_transport"))


def create_transport(
    app_settings: AppSettings,
    event_bus: Optional[EventBus] = None,
) -> PrinterTransport:
    """Build a transport wired to the settings file and real (or mock) channels."""

    def factory(connection_type: ConnectionType, settings: PrinterSettings) -> PrinterChannel:
        return create_channel(connection_type, settings, app_settings)

    return PrinterTransport(
        store=SettingsStore(app_settings.settings_file),
        channel_factory=factory,
        platform=app_settings.platform,
        encoding=app_settings.receipt_encoding,
        event_bus=event_bus,
    )
