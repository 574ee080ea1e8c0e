"""Printer transport channels for tillprint."""

import logging

from tillprint.config.settings import AppSettings
from tillprint.hardware.base import PrinterChannel
from tillprint.hardware.printer.bluetooth import BluetoothChannel
from tillprint.hardware.printer.mock import MockChannel
from tillprint.hardware.printer.network import NetworkChannel
from tillprint.models import ConnectionType, PrinterSettings

logger = logging.getLogger(__name__)


def create_channel(
    connection_type: ConnectionType,
    settings: PrinterSettings,
    app_settings: AppSettings,
) -> PrinterChannel:
    """Factory function to create the channel for a connection type.

    Args:
        connection_type: Which transport to build
        settings: Persisted printer settings holding the endpoint
        app_settings: Process settings (platform, ports, timeouts)

    Returns:
        Channel instance; a MockChannel in simulator mode
    """
    if app_settings.is_simulator:
        logger.info(f"Simulator mode, using mock {connection_type.value} channel")
        return MockChannel(label=f"mock-{connection_type.value}")

    if connection_type is ConnectionType.BLUETOOTH:
        return BluetoothChannel(
            device_address=settings.device_address,
            device_name=settings.device_name,
            port=app_settings.bluetooth_port,
            baud=app_settings.bluetooth_baudrate,
            platform=app_settings.platform,
        )
    return NetworkChannel(
        ip_address=settings.ip_address,
        port=settings.port,
        platform=app_settings.platform,
        connect_timeout=app_settings.network_connect_timeout,
        chunk_size=app_settings.network_chunk_size,
    )


__all__ = [
    "PrinterChannel",
    "BluetoothChannel",
    "NetworkChannel",
    "MockChannel",
    "create_channel",
]
