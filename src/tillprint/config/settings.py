"""
Application settings using Pydantic.

Settings are loaded from environment variables with .env file support.
These are process settings (where data lives, which host platform we run
on); the printer's own connection settings are persisted separately by
PrinterTransport.
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from tillprint.hardware.base import Platform


class AppSettings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_prefix="TILLPRINT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Environment
    env: Literal["simulator", "hardware"] = "hardware"
    platform: Platform = Platform.NATIVE
    debug: bool = False

    # Paths
    data_path: Path = Field(default_factory=lambda: Path.home() / ".tillprint")

    # Receipt rendering
    site_name: str = "RECEIPT"
    receipt_encoding: str = "utf-8"

    # Bluetooth SPP link
    bluetooth_port: str = "/dev/rfcomm0"
    bluetooth_baudrate: int = 9600

    # Raw TCP
    network_connect_timeout: float = Field(default=5.0, gt=0)
    network_chunk_size: int = Field(default=1024, gt=0)

    @property
    def is_simulator(self) -> bool:
        """Check if running without printer hardware."""
        return self.env == "simulator"

    @property
    def settings_file(self) -> Path:
        """JSON key-value file holding persisted printer settings."""
        return self.data_path / "settings.json"


@lru_cache
def get_settings() -> AppSettings:
    """Get cached settings instance."""
    return AppSettings()
