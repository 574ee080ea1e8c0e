"""Value objects for receipts and printer configuration.

Transactions and receipt settings are plain dataclasses supplied by the
order-management layer. Printer settings are a pydantic model because they
round-trip through durable storage and must be validated on load.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

logger = logging.getLogger(__name__)

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


class LineSize(str, Enum):
    """Size tier of a custom header or footer line."""

    SMALL = "small"
    NORMAL = "normal"
    LARGE = "large"


class ConnectionType(str, Enum):
    """Transport channel the printer is reached through."""

    BLUETOOTH = "bluetooth"
    NETWORK = "network"


class PaperWidth(str, Enum):
    """Receipt roll width."""

    MM_58 = "58mm"
    MM_80 = "80mm"

    @property
    def chars_per_line(self) -> int:
        return 32 if self is PaperWidth.MM_58 else 48


class DrawerVoltage(str, Enum):
    """Cash-drawer solenoid voltage tier."""

    V12 = "12v"
    V24 = "24v"


def _as_float(value: Any, default: float = 0.0) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def _optional_float(value: Any) -> Optional[float]:
    if value is None:
        return None
    return _as_float(value)


def _parse_timestamp(value: Any) -> datetime:
    """Parse an ISO timestamp, falling back to the epoch."""
    if isinstance(value, datetime):
        return value
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            logger.warning(f"Unparseable transaction timestamp: {value!r}")
    return _EPOCH


@dataclass
class BasketItem:
    """A single line of a transaction."""

    product_name: str
    price_label: str = "Standard"
    quantity: float = 1
    unit_price: float = 0.0
    line_total: float = 0.0

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BasketItem":
        product = data.get("product") or {}
        selected = data.get("selectedPrice") or {}
        return cls(
            product_name=str(product.get("name", "")),
            price_label=str(selected.get("label", "Standard")),
            quantity=_as_float(data.get("quantity")),
            unit_price=_as_float(selected.get("price")),
            line_total=_as_float(data.get("lineTotal")),
        )


@dataclass
class PaymentRecord:
    """One tender of a (possibly split) payment."""

    tender_name: str
    amount: float
    tender_id: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PaymentRecord":
        return cls(
            tender_name=str(data.get("tenderName", "")),
            amount=_as_float(data.get("amount")),
            tender_id=data.get("tenderId"),
        )


@dataclass
class Transaction:
    """A completed retail transaction, read-only to the printer core.

    VAT amounts in ``vat_breakdown`` are already included in ``subtotal``
    and ``total``; they are displayed, never re-derived.
    """

    id: str
    timestamp: datetime
    operator_name: str
    items: List[BasketItem] = field(default_factory=list)
    subtotal: float = 0.0
    vat_breakdown: Dict[str, float] = field(default_factory=dict)
    total: float = 0.0
    tender_name: str = ""
    table_name: Optional[str] = None
    payments: Optional[List[PaymentRecord]] = None
    discount: Optional[float] = None
    gratuity: Optional[float] = None
    cashback: Optional[float] = None
    is_refund: bool = False

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Transaction":
        """Build a transaction from the camelCase record used by the POS screens."""
        vat = data.get("vatBreakdown") or {}
        payments = data.get("payments")
        return cls(
            id=str(data.get("id", "")),
            timestamp=_parse_timestamp(data.get("timestamp")),
            operator_name=str(data.get("operatorName", "")),
            items=[BasketItem.from_dict(item) for item in data.get("items") or []],
            subtotal=_as_float(data.get("subtotal")),
            vat_breakdown={str(code): _as_float(amount) for code, amount in vat.items()},
            total=_as_float(data.get("total")),
            tender_name=str(data.get("tenderName", "")),
            table_name=data.get("tableName") or None,
            payments=[PaymentRecord.from_dict(p) for p in payments] if payments else None,
            discount=_optional_float(data.get("discount")),
            gratuity=_optional_float(data.get("gratuity")),
            cashback=_optional_float(data.get("cashback")),
            is_refund=bool(data.get("isRefund", False)),
        )


@dataclass
class ReceiptLine:
    """A custom header or footer line."""

    text: str
    size: LineSize = LineSize.NORMAL


@dataclass
class ReceiptSettings:
    """Custom header and footer lines; empty lists select the defaults."""

    header_lines: List[ReceiptLine] = field(default_factory=list)
    footer_lines: List[ReceiptLine] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ReceiptSettings":
        def lines(key: str) -> List[ReceiptLine]:
            result = []
            for line in data.get(key) or []:
                try:
                    size = LineSize(str(line.get("size", "normal")).lower())
                except ValueError:
                    size = LineSize.NORMAL
                result.append(ReceiptLine(text=str(line.get("text", "")), size=size))
            return result

        return cls(header_lines=lines("headerLines"), footer_lines=lines("footerLines"))


class PrinterSettings(BaseModel):
    """Persisted printer configuration.

    Stored as a single flat JSON record with camelCase keys.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    connection_type: ConnectionType = ConnectionType.BLUETOOTH
    paper_width: PaperWidth = PaperWidth.MM_80
    device_name: Optional[str] = None
    device_address: Optional[str] = None
    ip_address: Optional[str] = None
    port: Optional[int] = None
    is_connected: bool = False
    auto_connect: bool = False
    cash_drawer_enabled: bool = False
    cash_drawer_voltage: DrawerVoltage = DrawerVoltage.V12


@dataclass
class PrinterDevice:
    """A printer found by device discovery."""

    name: str
    address: str
    type: ConnectionType = ConnectionType.BLUETOOTH
