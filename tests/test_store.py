"""Tests for setlist.playlists.store: the in-memory store."""

import json
import threading

import anyio
import pytest

from setlist.errors import ConfigurationError, ConflictError, NotFoundError
from setlist.playlists.models import TrackRef
from setlist.playlists.store import MemoryStore


class TestAccounts:
    async def test_create_and_find(self, store: MemoryStore) -> None:
        account = await store.create_account("ada", "hash")
        assert account.id == 1
        assert await store.find_account_by_username("ada") == account
        assert await store.find_account_by_username("ADA") == account
        assert await store.get_account(1) == account

    async def test_unknown_username(self, store: MemoryStore) -> None:
        assert await store.find_account_by_username("nobody") is None

    async def test_unknown_id(self, store: MemoryStore) -> None:
        with pytest.raises(NotFoundError):
            await store.get_account(99)

    async def test_username_taken(self, store: MemoryStore) -> None:
        await store.create_account("ada", "hash")
        with pytest.raises(ConflictError) as exc_info:
            await store.create_account("Ada", "other")
        assert exc_info.value.field == "username"

    async def test_ids_are_never_reused(self, store: MemoryStore) -> None:
        first = await store.create_account("ada", "h")
        await store.delete_account(first.id)
        second = await store.create_account("ada", "h")
        assert second.id == 2

    async def test_delete_cascades_to_playlists(self, store: MemoryStore) -> None:
        ada = await store.create_account("ada", "h")
        bob = await store.create_account("bob", "h")
        mine = await store.create_playlist(ada.id, "Mine")
        theirs = await store.create_playlist(bob.id, "Theirs")

        await store.delete_account(ada.id)

        with pytest.raises(NotFoundError):
            await store.get_playlist(mine.id)
        assert await store.get_playlist(theirs.id) == theirs
        assert await store.list_playlists_for_owner(ada.id) == []

    async def test_delete_unknown(self, store: MemoryStore) -> None:
        with pytest.raises(NotFoundError):
            await store.delete_account(5)


class TestPlaylists:
    async def test_create_and_list_in_order(self, store: MemoryStore) -> None:
        ada = await store.create_account("ada", "h")
        first = await store.create_playlist(ada.id, "First")
        second = await store.create_playlist(ada.id, "Second")
        assert await store.list_playlists_for_owner(ada.id) == [first, second]

    async def test_create_for_unknown_owner(self, store: MemoryStore) -> None:
        with pytest.raises(NotFoundError):
            await store.create_playlist(42, "Orphan")

    async def test_owner_scoping(self, store: MemoryStore) -> None:
        ada = await store.create_account("ada", "h")
        bob = await store.create_account("bob", "h")
        playlist = await store.create_playlist(ada.id, "Mine")

        assert await store.get_playlist(playlist.id, owner_id=ada.id) == playlist
        with pytest.raises(NotFoundError):
            await store.get_playlist(playlist.id, owner_id=bob.id)
        with pytest.raises(NotFoundError):
            await store.rename_playlist(playlist.id, "Stolen", owner_id=bob.id)
        with pytest.raises(NotFoundError):
            await store.delete_playlist(playlist.id, owner_id=bob.id)
        assert (await store.get_playlist(playlist.id)).name == "Mine"

    async def test_add_tracks_in_order(self, store: MemoryStore) -> None:
        ada = await store.create_account("ada", "h")
        playlist = await store.create_playlist(ada.id, "Mix")
        await store.add_track(playlist.id, TrackRef("One", "A"))
        updated = await store.add_track(playlist.id, TrackRef("Two", "B"))
        assert [t.title for t in updated.tracks] == ["One", "Two"]
        assert playlist.tracks == ()

    async def test_rename(self, store: MemoryStore) -> None:
        ada = await store.create_account("ada", "h")
        playlist = await store.create_playlist(ada.id, "Old")
        renamed = await store.rename_playlist(playlist.id, "New", owner_id=ada.id)
        assert renamed.name == "New"
        assert (await store.get_playlist(playlist.id)).name == "New"

    async def test_delete(self, store: MemoryStore) -> None:
        ada = await store.create_account("ada", "h")
        playlist = await store.create_playlist(ada.id, "Gone")
        await store.delete_playlist(playlist.id, owner_id=ada.id)
        with pytest.raises(NotFoundError):
            await store.get_playlist(playlist.id)


class TestPersistence:
    async def test_state_survives_reload(self, tmp_path) -> None:
        path = tmp_path / "setlist.json"
        store = MemoryStore(path)
        ada = await store.create_account("ada", "h")
        playlist = await store.create_playlist(ada.id, "Mix")
        await store.add_track(playlist.id, TrackRef("One", "A"))

        reloaded = MemoryStore(path)
        assert await reloaded.get_account(ada.id) == ada
        restored = await reloaded.get_playlist(playlist.id)
        assert restored.tracks == (TrackRef("One", "A"),)
        assert (await reloaded.create_account("bob", "h")).id == 2

    async def test_file_is_json(self, tmp_path) -> None:
        path = tmp_path / "setlist.json"
        store = MemoryStore(path)
        await store.create_account("ada", "h")
        data = json.loads(path.read_text(encoding="utf-8"))
        assert data["accounts"][0]["username"] == "ada"
        assert not (tmp_path / "setlist.json.tmp").exists()

    def test_missing_file_starts_empty(self, tmp_path) -> None:
        MemoryStore(tmp_path / "new.json")
        assert not (tmp_path / "new.json").exists()

    def test_corrupt_file(self, tmp_path) -> None:
        path = tmp_path / "setlist.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(ConfigurationError):
            MemoryStore(path)

    async def test_writes_run_off_the_event_loop(self, tmp_path, monkeypatch) -> None:
        writer_threads: list[int] = []
        original = MemoryStore._write

        def recording_write(self, version, state):
            writer_threads.append(threading.get_ident())
            original(self, version, state)

        monkeypatch.setattr(MemoryStore, "_write", recording_write)
        store = MemoryStore(tmp_path / "setlist.json")
        await store.create_account("ada", "h")

        assert writer_threads
        assert threading.get_ident() not in writer_threads

    async def test_older_snapshot_never_replaces_newer(self, tmp_path) -> None:
        path = tmp_path / "setlist.json"
        store = MemoryStore(path)
        await store.create_account("ada", "h")
        await store.create_account("bob", "h")

        # A late write carrying the first snapshot is dropped
        store._write(1, {"next_ids": {}, "accounts": [], "playlists": []})

        data = json.loads(path.read_text(encoding="utf-8"))
        assert [a["username"] for a in data["accounts"]] == ["ada", "bob"]


class TestThreadedAccess:
    """Each WSGI request thread drives the store from its own event loop."""

    def test_reads_during_concurrent_writes(self) -> None:
        store = MemoryStore()
        ada = anyio.run(store.create_account, "ada", "h")
        done = threading.Event()
        failures: list[BaseException] = []

        def write() -> None:
            try:
                for n in range(300):
                    anyio.run(store.create_playlist, ada.id, f"List {n}")
                    anyio.run(store.create_account, f"user{n}", "h")
            except Exception as exc:
                failures.append(exc)
            finally:
                done.set()

        def read() -> None:
            try:
                while not done.is_set():
                    anyio.run(store.list_playlists_for_owner, ada.id)
                    anyio.run(store.find_account_by_username, "nobody")
            except Exception as exc:
                failures.append(exc)

        threads = [threading.Thread(target=write)]
        threads += [threading.Thread(target=read) for _ in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=60)

        assert failures == []
        playlists = anyio.run(store.list_playlists_for_owner, ada.id)
        assert [p.name for p in playlists] == [f"List {n}" for n in range(300)]
