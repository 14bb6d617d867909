"""
Integration tests for the cursor loader.

Tests cover:
- First load on start
- Reload after committed changes
- Closing of replaced cursors
- Reset and failed loads
"""

import os
import tempfile

import pytest

from pets_data.contract import PetEntry
from pets_data.errors import UnknownUriError
from pets_data.loader import CursorLoader, QuerySpec
from pets_data.provider import PetProvider
from pets_data.config import Settings

DIR = PetEntry.CONTENT_URI


class RecordingCallbacks:
    """Loader callbacks that record every delivery."""

    def __init__(self, spec=None):
        self.spec = spec or QuerySpec(uri=DIR)
        self.cursors = []
        self.resets = 0

    def on_create_query(self):
        return self.spec

    def on_query_finished(self, cursor):
        self.cursors.append(cursor)

    def on_reset(self):
        self.resets += 1


@pytest.fixture
def provider():
    with tempfile.TemporaryDirectory() as tmpdir:
        settings = Settings(database_path=os.path.join(tmpdir, "shelter.db"), wal_mode=False)
        provider = PetProvider.open(settings)
        yield provider
        provider.close()


class TestCursorLoader:
    """Tests for CursorLoader."""

    @pytest.mark.asyncio
    async def test_start_delivers_cursor(self, provider):
        provider.insert(DIR, {"name": "Toto"})
        callbacks = RecordingCallbacks()
        loader = CursorLoader(provider, callbacks)

        await loader.start()

        assert loader.is_started
        assert loader.load_count == 1
        assert len(callbacks.cursors) == 1
        assert callbacks.cursors[0].get_count() == 1
        assert loader.cursor is callbacks.cursors[0]
        await loader.reset()

    @pytest.mark.asyncio
    async def test_start_twice_is_noop(self, provider):
        loader = CursorLoader(provider, RecordingCallbacks())

        await loader.start()
        await loader.start()

        assert loader.load_count == 1
        await loader.reset()

    @pytest.mark.asyncio
    async def test_insert_triggers_reload(self, provider):
        callbacks = RecordingCallbacks()
        loader = CursorLoader(provider, callbacks)
        await loader.start()
        first = loader.cursor

        provider.insert(DIR, {"name": "Toto"})
        await loader.wait_idle()

        assert loader.load_count == 2
        assert loader.cursor.get_count() == 1
        assert first.is_closed
        await loader.reset()

    @pytest.mark.asyncio
    async def test_item_change_reloads_directory(self, provider):
        uri = provider.insert(DIR, {"name": "Toto", "weight": 1})
        loader = CursorLoader(provider, RecordingCallbacks())
        await loader.start()

        provider.update(uri, {"weight": 2})
        await loader.wait_idle()

        assert loader.load_count == 2
        assert loader.cursor.to_pets()[0].weight == 2
        await loader.reset()

    @pytest.mark.asyncio
    async def test_burst_of_changes_settles_on_latest(self, provider):
        loader = CursorLoader(provider, RecordingCallbacks())
        await loader.start()

        for name in ("A", "B", "C"):
            provider.insert(DIR, {"name": name})
        await loader.wait_idle()

        assert loader.cursor.get_count() == 3
        assert 2 <= loader.load_count <= 4
        await loader.reset()

    @pytest.mark.asyncio
    async def test_only_current_cursor_observed(self, provider):
        """Replaced cursors drop their observer registrations."""
        loader = CursorLoader(provider, RecordingCallbacks())
        await loader.start()

        provider.insert(DIR, {"name": "A"})
        await loader.wait_idle()
        provider.insert(DIR, {"name": "B"})
        await loader.wait_idle()

        assert provider.bus.observer_count(DIR) == 1
        await loader.reset()

    @pytest.mark.asyncio
    async def test_reset(self, provider):
        callbacks = RecordingCallbacks()
        loader = CursorLoader(provider, callbacks)
        await loader.start()
        cursor = loader.cursor

        await loader.reset()

        assert callbacks.resets == 1
        assert cursor.is_closed
        assert loader.cursor is None
        assert not loader.is_started
        assert provider.bus.observer_count() == 0

    @pytest.mark.asyncio
    async def test_no_reload_after_reset(self, provider):
        loader = CursorLoader(provider, RecordingCallbacks())
        await loader.start()
        await loader.reset()

        provider.insert(DIR, {"name": "Toto"})
        await loader.wait_idle()

        assert loader.load_count == 1

    @pytest.mark.asyncio
    async def test_projection_and_sort(self, provider):
        for name in ("B", "A"):
            provider.insert(DIR, {"name": name})
        spec = QuerySpec(uri=DIR, projection=[PetEntry.COLUMN_PET_NAME], sort_order="name ASC")
        loader = CursorLoader(provider, RecordingCallbacks(spec))

        await loader.start()

        assert [row[0] for row in loader.cursor] == ["A", "B"]
        await loader.reset()

    @pytest.mark.asyncio
    async def test_failed_load_raises(self, provider):
        spec = QuerySpec(uri="content://com.example.android.pets/dogs")
        callbacks = RecordingCallbacks(spec)
        loader = CursorLoader(provider, callbacks)

        with pytest.raises(UnknownUriError):
            await loader.start()

        assert callbacks.cursors == []
        await loader.reset()
