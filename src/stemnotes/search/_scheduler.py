"""IndexScheduler — debounced background indexing of saved notes."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import TYPE_CHECKING

from stemnotes.config import INDEX_DEBOUNCE
from stemnotes.exceptions import StemError

if TYPE_CHECKING:
    from stemnotes.search._pipeline import RetrievalPipeline

logger = logging.getLogger(__name__)


class IndexScheduler:
    """Re-indexes a note a short while after its last save.

    Each note has at most one pending job.  Scheduling a note again
    cancels its pending job and restarts the delay, so a burst of saves
    produces a single embedding request.  Failures are logged and
    dropped: indexing never fails the edit that triggered it.
    """

    def __init__(
        self,
        pipeline: RetrievalPipeline,
        *,
        debounce: float = INDEX_DEBOUNCE,
    ) -> None:
        self._pipeline = pipeline
        self._debounce = debounce
        self._pending: dict[str, asyncio.Task[None]] = {}

    def schedule(self, note_id: str, text: str, model: str | None = None) -> None:
        """Queue *note_id* for indexing after the debounce delay."""
        previous = self._pending.pop(note_id, None)
        if previous is not None and not previous.done():
            previous.cancel()

        task = asyncio.get_running_loop().create_task(self._run(note_id, text, model))
        self._pending[note_id] = task
        task.add_done_callback(lambda t, nid=note_id: self._forget(nid, t))

    def cancel(self, note_id: str) -> bool:
        """Cancel the pending job for *note_id*.  Returns True if one was pending."""
        task = self._pending.pop(note_id, None)
        if task is None or task.done():
            return False
        task.cancel()
        return True

    def pending(self) -> list[str]:
        """Return ids of notes with a job that has not finished yet."""
        return [nid for nid, task in self._pending.items() if not task.done()]

    async def flush(self) -> None:
        """Wait for every pending job to finish."""
        while self._pending:
            tasks = list(self._pending.values())
            await asyncio.gather(*tasks, return_exceptions=True)
            for nid, task in list(self._pending.items()):
                if task.done():
                    del self._pending[nid]

    async def cancel_all(self) -> None:
        """Cancel every pending job and wait for the cancellations to land."""
        tasks = list(self._pending.values())
        self._pending.clear()
        for task in tasks:
            task.cancel()
        for task in tasks:
            with contextlib.suppress(asyncio.CancelledError):
                await task

    @property
    def debounce(self) -> float:
        return self._debounce

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    async def _run(self, note_id: str, text: str, model: str | None) -> None:
        if self._debounce > 0:
            await asyncio.sleep(self._debounce)
        try:
            await self._pipeline.index(note_id, text, model)
        except StemError:
            logger.warning("Background indexing failed for note %s", note_id, exc_info=True)

    def _forget(self, note_id: str, task: asyncio.Task[None]) -> None:
        if self._pending.get(note_id) is task:
            del self._pending[note_id]
