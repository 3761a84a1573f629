"""Tests for NoteService — note CRUD and change events."""

from __future__ import annotations

import pytest

from stemnotes.events import EventType, NoteEvent
from stemnotes.exceptions import NoteNotFoundError
from stemnotes.models import DEFAULT_TITLE

# =========================================================================
# Helpers
# =========================================================================


@pytest.fixture
def recorded(event_bus) -> list[NoteEvent]:
    events: list[NoteEvent] = []

    async def record(event: NoteEvent) -> None:
        events.append(event)

    event_bus.register(EventType.NOTE_SAVED, record)
    event_bus.register(EventType.NOTE_DELETED, record)
    return events


# =========================================================================
# CRUD
# =========================================================================


class TestCreate:
    @pytest.mark.asyncio
    async def test_create_defaults(self, notes):
        note = await notes.create()
        assert note.id
        assert note.title == DEFAULT_TITLE
        assert note.content is None
        assert note.is_pinned is False

    @pytest.mark.asyncio
    async def test_create_and_get(self, notes):
        note = await notes.create("Groceries", "eggs", folder_id="f1")
        fetched = await notes.get(note.id)
        assert fetched is not None
        assert fetched.title == "Groceries"
        assert fetched.content == "eggs"
        assert fetched.folder_id == "f1"

    @pytest.mark.asyncio
    async def test_get_missing(self, notes):
        assert await notes.get("missing") is None


class TestUpdate:
    @pytest.mark.asyncio
    async def test_update_content_only(self, notes):
        note = await notes.create("Title", "old")
        updated = await notes.update(note.id, content="new")
        assert updated.title == "Title"
        assert updated.content == "new"

    @pytest.mark.asyncio
    async def test_update_can_clear_content(self, notes):
        note = await notes.create("Title", "old")
        updated = await notes.update(note.id, content=None)
        assert updated.content is None

    @pytest.mark.asyncio
    async def test_update_missing_raises(self, notes):
        with pytest.raises(NoteNotFoundError):
            await notes.update("missing", title="x")


class TestDelete:
    @pytest.mark.asyncio
    async def test_delete(self, notes):
        note = await notes.create("Title", "body")
        assert await notes.delete(note.id) is True
        assert await notes.get(note.id) is None

    @pytest.mark.asyncio
    async def test_delete_missing_is_noop(self, notes):
        assert await notes.delete("missing") is False


class TestListAndPin:
    @pytest.mark.asyncio
    async def test_pinned_first_then_recent(self, notes):
        first = await notes.create("first")
        second = await notes.create("second")
        third = await notes.create("third")
        await notes.toggle_pin(first.id)
        await notes.update(second.id, content="touched")

        ordered = [n.id for n in await notes.list_all()]
        assert ordered == [first.id, second.id, third.id]

    @pytest.mark.asyncio
    async def test_toggle_pin_twice(self, notes):
        note = await notes.create("t")
        assert (await notes.toggle_pin(note.id)).is_pinned is True
        assert (await notes.toggle_pin(note.id)).is_pinned is False

    @pytest.mark.asyncio
    async def test_toggle_pin_missing(self, notes):
        with pytest.raises(NoteNotFoundError):
            await notes.toggle_pin("missing")

    @pytest.mark.asyncio
    async def test_title(self, notes):
        note = await notes.create("Reading list")
        assert await notes.title(note.id) == "Reading list"
        with pytest.raises(NoteNotFoundError):
            await notes.title("missing")


# =========================================================================
# Events
# =========================================================================


class TestEvents:
    @pytest.mark.asyncio
    async def test_create_emits_saved(self, notes, recorded):
        note = await notes.create("t", "body")
        assert recorded == [NoteEvent(EventType.NOTE_SAVED, note.id, "body")]

    @pytest.mark.asyncio
    async def test_update_emits_saved(self, notes, recorded):
        note = await notes.create("t", "body")
        await notes.update(note.id, content="changed")
        assert recorded[-1] == NoteEvent(EventType.NOTE_SAVED, note.id, "changed")

    @pytest.mark.asyncio
    async def test_delete_emits_deleted(self, notes, recorded):
        note = await notes.create("t")
        await notes.delete(note.id)
        assert recorded[-1] == NoteEvent(EventType.NOTE_DELETED, note.id)

    @pytest.mark.asyncio
    async def test_delete_missing_emits_nothing(self, notes, recorded):
        await notes.delete("missing")
        assert recorded == []

    @pytest.mark.asyncio
    async def test_pin_emits_nothing(self, notes, recorded):
        note = await notes.create("t")
        recorded.clear()
        await notes.toggle_pin(note.id)
        assert recorded == []
