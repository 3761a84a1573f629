"""EventBus and event types linking the note store to the search index."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import Enum

logger = logging.getLogger(__name__)


class EventType(Enum):
    """Note mutations the search index reacts to."""

    NOTE_SAVED = "note_saved"
    NOTE_DELETED = "note_deleted"


@dataclass(frozen=True, slots=True)
class NoteEvent:
    """Immutable record of a note mutation.

    Attributes:
        event_type: The kind of mutation that occurred.
        note_id: Identifier of the affected note.
        content: Note content after the save (saves only), None otherwise.
    """

    event_type: EventType
    note_id: str
    content: str | None = None


NoteHandler = Callable[[NoteEvent], Awaitable[None]]


class EventBus:
    """Routes note saves and deletions to the coroutines listening for them.

    The note service emits once a change is committed; the search index
    subscribes to keep embeddings in step with note content.  Listeners for
    one event type are awaited one after another, in the order they were
    registered.  A listener that raises is logged with its traceback and
    the remaining listeners still run; :meth:`emit` itself never raises.
    """

    def __init__(self) -> None:
        self._listeners: dict[EventType, list[NoteHandler]] = {et: [] for et in EventType}

    def register(self, event_type: EventType, handler: NoteHandler) -> None:
        """Listen for *event_type* with the coroutine function *handler*."""
        self._listeners[event_type].append(handler)

    def unregister(self, event_type: EventType, handler: NoteHandler) -> bool:
        """Stop *handler* listening for *event_type*.  False if it was not listening."""
        listeners = self._listeners[event_type]
        if handler not in listeners:
            return False
        listeners.remove(handler)
        return True

    async def emit(self, event: NoteEvent) -> None:
        """Await every listener registered for ``event.event_type``."""
        for handler in list(self._listeners[event.event_type]):
            try:
                await handler(event)
            except Exception:
                logger.warning(
                    "Note %s: %s listener %s failed",
                    event.note_id,
                    event.event_type.value,
                    getattr(handler, "__qualname__", repr(handler)),
                    exc_info=True,
                )

    @property
    def handler_count(self) -> int:
        """Number of listeners registered, summed over event types."""
        return sum(len(listeners) for listeners in self._listeners.values())

    def clear(self) -> None:
        """Drop every listener."""
        for listeners in self._listeners.values():
            listeners.clear()
