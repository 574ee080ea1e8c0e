"""Print manager: sequential queue in front of a PrinterTransport."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional

from tillprint.core.events import EventBus, Event, EventType
from tillprint.models import ReceiptSettings, Transaction
from tillprint.printing.transport import PrinterTransport

logger = logging.getLogger(__name__)


@dataclass
class PrintJob:
    """A queued receipt print."""

    transaction: Transaction
    site_name: Optional[str] = None
    is_reprint: bool = False
    receipt_settings: Optional[ReceiptSettings] = None
    open_drawer: bool = False


class PrintManager:
    """Queue-based printing manager for receipts.

    Jobs run one at a time, so bytes from two receipts never interleave on
    the channel. Results are reported on the event bus; a failed job does
    not stop the queue.
    """

    def __init__(self, transport: PrinterTransport, event_bus: EventBus) -> None:
        self._transport = transport
        self._event_bus = event_bus
        self._queue: asyncio.Queue[PrintJob] = asyncio.Queue()
        self._task: Optional[asyncio.Task[None]] = None
        self._running = False

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    async def start(self) -> None:
        """Start processing queued jobs."""
        if self._running:
            return
        self._running = True
        self._task = asyncio.create_task(self._run())

    async def stop(self) -> None:
        """Stop the print manager; queued jobs are left unprocessed."""
        self._running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

    def submit(self, job: PrintJob) -> None:
        """Queue a print job."""
        self._queue.put_nowait(job)
        logger.info(f"Queued print job for transaction {job.transaction.id}")

    async def join(self) -> None:
        """Wait until every queued job has been processed."""
        await self._queue.join()

    async def _run(self) -> None:
        """Process print jobs sequentially."""
        while self._running:
            job = await self._queue.get()
            transaction_id = job.transaction.id
            try:
                await self._event_bus.emit_async(Event(
                    EventType.PRINT_START,
                    data={"transaction_id": transaction_id},
                    source="print_manager",
                ))
                await self._transport.print_receipt(
                    job.transaction,
                    site_name=job.site_name,
                    is_reprint=job.is_reprint,
                    receipt_settings=job.receipt_settings,
                )
                if job.open_drawer:
                    await self._transport.open_cash_drawer()

                await self._event_bus.emit_async(Event(
                    EventType.PRINT_COMPLETE,
                    data={"transaction_id": transaction_id},
                    source="print_manager",
                ))

            except Exception as exc:
                logger.error(f"Print failed: {exc}")
                await self._event_bus.emit_async(Event(
                    EventType.PRINT_ERROR,
                    data={"transaction_id": transaction_id, "error": str(exc)},
                    source="print_manager",
                ))
            finally:
                self._queue.task_done()
