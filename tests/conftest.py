# Shared fixtures for tillprint tests

from datetime import datetime

import pytest

from tillprint.config.settings import get_settings
from tillprint.core.events import EventBus
from tillprint.core.storage import SettingsStore
from tillprint.hardware.printer.mock import MockChannel, strip_control_codes
from tillprint.models import BasketItem, ConnectionType, PaymentRecord, Transaction
from tillprint.printing.transport import PrinterTransport


def make_transaction(**overrides) -> Transaction:
    """A two-item card sale; keyword arguments replace fields."""
    fields = dict(
        id="TXN-20240315-0001-ABCDEF",
        timestamp=datetime(2024, 3, 15, 14, 30, 5),
        operator_name="Alice",
        items=[
            BasketItem("Gin & Tonic", "Double", 2, 3.50, 7.00),
            BasketItem("Crisps", "Standard", 1, 1.20, 1.20),
        ],
        subtotal=8.20,
        vat_breakdown={"A": 1.37},
        total=8.20,
        tender_name="Card",
    )
    fields.update(overrides)
    return Transaction(**fields)


def receipt_lines(data: bytes) -> list:
    """Printable lines of an ESC/POS receipt, control codes removed."""
    return strip_control_codes(data).split("\n")


def split_payments(*pairs) -> list:
    return [PaymentRecord(name, amount) for name, amount in pairs]


class ChannelFactory:
    """Hands out one MockChannel per connection type and records requests."""

    def __init__(self):
        self.channels = {
            ConnectionType.BLUETOOTH: MockChannel("mock-bluetooth"),
            ConnectionType.NETWORK: MockChannel("mock-network"),
        }
        self.requests = []

    def __call__(self, connection_type, settings):
        self.requests.append((connection_type, settings.model_copy()))
        return self.channels[connection_type]

    @property
    def total_sends(self) -> int:
        return sum(len(c.sent) for c in self.channels.values())


@pytest.fixture
def transaction():
    return make_transaction()


@pytest.fixture
def store(tmp_path):
    return SettingsStore(tmp_path / "settings.json")


@pytest.fixture
def channel_factory():
    return ChannelFactory()


@pytest.fixture
def event_bus():
    return EventBus()


@pytest.fixture
def transport(store, channel_factory, event_bus):
    return PrinterTransport(store, channel_factory, event_bus=event_bus)


@pytest.fixture
def app_env(tmp_path, monkeypatch):
    """Simulator-mode process settings rooted in a temp directory."""
    monkeypatch.setenv("TILLPRINT_ENV", "simulator")
    monkeypatch.setenv("TILLPRINT_DATA_PATH", str(tmp_path / "data"))
    monkeypatch.chdir(tmp_path)
    get_settings.cache_clear()
    yield tmp_path
    get_settings.cache_clear()
