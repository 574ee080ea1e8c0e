"""
Command-line entry point for tillprint.

Drives the printer transport from a shell: connect, print a transaction
exported as JSON, preview a receipt, or kick the cash drawer.
"""

import argparse
import asyncio
import json
import logging
import sys
from typing import Any, Dict, Optional

from dotenv import load_dotenv

from tillprint.config.settings import AppSettings, get_settings
from tillprint.errors import PrinterError
from tillprint.models import ConnectionType, ReceiptSettings, Transaction
from tillprint.hardware.printer.mock import strip_control_codes
from tillprint.printing.receipt import ReceiptFormatter
from tillprint.printing.transport import create_transport

logger = logging.getLogger(__name__)


def setup_logging(debug: bool = False) -> None:
    """Configure logging."""
    level = logging.DEBUG if debug else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S"
    )


def _load_json(path: str) -> Dict[str, Any]:
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def _load_receipt_input(path: str) -> tuple[Transaction, Optional[ReceiptSettings]]:
    """Read a transaction file; an optional "receiptSettings" key sits beside it."""
    data = _load_json(path)
    receipt_settings = None
    if "transaction" in data:
        if data.get("receiptSettings"):
            receipt_settings = ReceiptSettings.from_dict(data["receiptSettings"])
        data = data["transaction"]
    return Transaction.from_dict(data), receipt_settings


def boxed(text: str, width: int) -> str:
    """Frame receipt text the width of the paper roll."""
    lines = ["+" + "-" * width + "+"]
    for line in text.rstrip("\n").split("\n"):
        lines.append("|" + line.ljust(width) + "|")
    lines.append("+" + "-" * width + "+")
    return "\n".join(lines)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="tillprint", description="Thermal receipt printing for POS tills")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("status", help="Show persisted printer settings")

    p = sub.add_parser("connect-network", help="Use a raw TCP printer")
    p.add_argument("ip_address")
    p.add_argument("--port", type=int, default=9100)

    p = sub.add_parser("connect-bluetooth", help="Use a Bluetooth printer")
    p.add_argument("address")
    p.add_argument("name")

    sub.add_parser("disconnect", help="Disconnect the printer")
    sub.add_parser("test-print", help="Print a diagnostic receipt")

    p = sub.add_parser("print", help="Print a transaction JSON file")
    p.add_argument("file")
    p.add_argument("--site-name")
    p.add_argument("--reprint", action="store_true")

    p = sub.add_parser("preview", help="Show a receipt without printing")
    p.add_argument("file")
    p.add_argument("--site-name")
    p.add_argument("--text", action="store_true", help="Plain-text layout instead of ESC/POS")
    p.add_argument("--paper-width", choices=["58mm", "80mm"])

    sub.add_parser("open-drawer", help="Kick the cash drawer")
    return parser


async def run(args: argparse.Namespace, app_settings: AppSettings) -> int:
    transport = create_transport(app_settings)
    settings = await transport.load_settings()
    site_name = getattr(args, "site_name", None) or app_settings.site_name

    if args.command in ("print", "test-print", "open-drawer") and not settings.is_connected:
        await transport.auto_connect()

    if args.command == "status":
        print(json.dumps(settings.model_dump(mode="json", by_alias=True), indent=2))

    elif args.command == "connect-network":
        await transport.update_settings(connection_type=ConnectionType.NETWORK)
        await transport.connect_network(args.ip_address, args.port)
        print(f"Connected to network printer {args.ip_address}:{args.port}")

    elif args.command == "connect-bluetooth":
        await transport.update_settings(connection_type=ConnectionType.BLUETOOTH)
        await transport.connect_bluetooth(args.address, args.name)
        print(f"Connected to Bluetooth printer {args.name} ({args.address})")

    elif args.command == "disconnect":
        await transport.disconnect()
        print("Printer disconnected")

    elif args.command == "test-print":
        await transport.print_test_receipt()
        print("Test receipt sent to printer")

    elif args.command == "print":
        transaction, receipt_settings = _load_receipt_input(args.file)
        await transport.print_receipt(transaction, site_name, args.reprint, receipt_settings)
        print(f"Receipt {transaction.id} sent to printer")

    elif args.command == "preview":
        transaction, receipt_settings = _load_receipt_input(args.file)
        formatter = ReceiptFormatter(
            args.paper_width or settings.paper_width,
            encoding=app_settings.receipt_encoding,
        )
        if args.text:
            sys.stdout.write(formatter.generate_receipt_text(transaction, site_name, receipt_settings))
        else:
            data = formatter.generate_receipt(transaction, site_name, False, receipt_settings)
            print(boxed(strip_control_codes(data, app_settings.receipt_encoding), formatter.chars_per_line))

    elif args.command == "open-drawer":
        await transport.open_cash_drawer()

    return 0


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point."""
    load_dotenv()

    args = build_parser().parse_args(argv)
    app_settings = get_settings()
    setup_logging(args.debug or app_settings.debug)

    try:
        return asyncio.run(run(args, app_settings))
    except PrinterError as e:
        logger.error(str(e))
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except (OSError, ValueError) as e:
        logger.error(f"Cannot read input: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
