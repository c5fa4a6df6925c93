"""Capture service: single-consumer inbox in front of a ``CaptureSession``.

Host notifications are submitted as messages and applied one at a time by
a background task on the event loop.  Debounce timers are scheduled on the
same loop (``AsyncioTimerService``), so edit handling and flushes never
interleave and the session needs no locks.

Usage::

    service = CaptureService(session)
    await service.start()
    service.submit(OpenDocumentMessage(document="a.py", text=""))
    ...
    await service.stop(flush_pending=True)
"""

from __future__ import annotations

import asyncio
import logging

from .models import (
    EditMessage,
    HostMessage,
    OpenDocumentMessage,
    SessionMarkerMessage,
    SetLoggingMessage,
)
from .session import CaptureSession

logger = logging.getLogger(__name__)


class CaptureService:
    """Owns the session and the task that drains its inbox."""

    def __init__(self, session: CaptureSession) -> None:
        self.session = session
        self._inbox: asyncio.Queue[HostMessage] = asyncio.Queue()
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        self._task = asyncio.create_task(self._loop(), name="capture-service")
        logger.info("Capture service started.")

    def submit(self, message: HostMessage) -> None:
        """Queue a host message for processing."""
        self._inbox.put_nowait(message)

    async def join(self) -> None:
        """Wait until every submitted message has been applied."""
        await self._inbox.join()

    async def stop(self, *, flush_pending: bool = False) -> None:
        """Drain the inbox and stop; optionally flush the open episode."""
        if self._task is None:
            return
        await self._inbox.join()
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        if flush_pending:
            self.session.flush_now()
        logger.info("Capture service stopped.")

    # -- internal ----------------------------------------------------

    async def _loop(self) -> None:
        while True:
            message = await self._inbox.get()
            try:
                self._dispatch(message)
            except Exception:
                logger.exception("Failed to apply %s message", message.type)
            finally:
                self._inbox.task_done()

    def _dispatch(self, message: HostMessage) -> None:
        session = self.session
        if isinstance(message, EditMessage):
            session.handle_edit(
                message.document, message.changes, message.text, message.prior_text
            )
        elif isinstance(message, OpenDocumentMessage):
            session.open_document(message.document, message.text)
        elif isinstance(message, SetLoggingMessage):
            session.set_enabled(message.enabled)
        elif isinstance(message, SessionMarkerMessage):
            session.write_marker()
        else:
            logger.warning("Unknown message type: %r", message)
