"""In-memory account and playlist store, optionally backed by a JSON file.

Every method is ``async`` so a database-backed store can replace it
without touching the controllers. Reads and mutations both run under one
``threading.Lock`` and never await while holding it, so concurrent
requests (event-loop tasks or WSGI threads) see every single-entity
operation as atomic.

When ``data_file`` is set, a snapshot of the whole state is taken under
the lock after each mutation and written (temp file, then rename) from an
anyio worker thread, so disk I/O never blocks the event loop. Snapshots
are numbered; a write never replaces the file with an older snapshot.
State is read back at startup.
"""

import json
import logging
import os
import threading
from dataclasses import asdict, replace
from pathlib import Path
from typing import Any

import anyio

from setlist.errors import ConfigurationError, ConflictError, NotFoundError
from setlist.playlists.models import Account, Playlist, TrackRef

logger = logging.getLogger("setlist.store")


class MemoryStore:
    """Accounts and playlists kept in dicts keyed by id.

    Usage::

        store = MemoryStore()
        account = await store.create_account("ada", hash_password("pw"))
        playlist = await store.create_playlist(account.id, "Road trip")
        await store.add_track(playlist.id, TrackRef("Roadrunner", "Modern Lovers"))
    """

    __slots__ = (
        "_accounts",
        "_data_file",
        "_lock",
        "_next_ids",
        "_playlists",
        "_version",
        "_write_lock",
        "_written_version",
    )

    def __init__(self, data_file: str | Path | None = None) -> None:
        self._accounts: dict[int, Account] = {}
        self._playlists: dict[int, Playlist] = {}
        self._next_ids = {"account": 1, "playlist": 1}
        self._lock = threading.Lock()
        # Guards the data file; held only by worker threads
        self._write_lock = threading.Lock()
        self._version = 0
        self._written_version = 0
        self._data_file = Path(data_file) if data_file is not None else None
        if self._data_file is not None and self._data_file.exists():
            self._load(self._data_file)

    # -- Accounts --

    async def find_account_by_username(self, username: str) -> Account | None:
        """Return the account named *username* (case-insensitive), or None."""
        wanted = username.casefold()
        with self._lock:
            return self._find_username(wanted)

    async def get_account(self, account_id: int) -> Account:
        with self._lock:
            account = self._accounts.get(account_id)
        if account is None:
            raise NotFoundError(f"No account {account_id}")
        return account

    async def create_account(self, username: str, password_hash: str) -> Account:
        """Create an account. ``ConflictError`` if the username is taken."""
        with self._lock:
            if self._find_username(username.casefold()) is not None:
                raise ConflictError("username", "This username is already taken")
            account = Account(
                id=self._take_id("account"), username=username, password_hash=password_hash
            )
            self._accounts[account.id] = account
            snapshot = self._snapshot()
        await self._persist(snapshot)
        logger.info("Created account %d", account.id)
        return account

    async def delete_account(self, account_id: int) -> None:
        """Delete an account and every playlist it owns."""
        with self._lock:
            if self._accounts.pop(account_id, None) is None:
                raise NotFoundError(f"No account {account_id}")
            owned = [pid for pid, p in self._playlists.items() if p.owner_id == account_id]
            for playlist_id in owned:
                del self._playlists[playlist_id]
            snapshot = self._snapshot()
        await self._persist(snapshot)
        logger.info("Deleted account %d and %d playlists", account_id, len(owned))

    # -- Playlists --

    async def list_playlists_for_owner(self, owner_id: int) -> list[Playlist]:
        """The owner's playlists, oldest first."""
        with self._lock:
            owned = [p for p in self._playlists.values() if p.owner_id == owner_id]
        return sorted(owned, key=lambda p: p.id)

    async def create_playlist(self, owner_id: int, name: str) -> Playlist:
        with self._lock:
            if owner_id not in self._accounts:
                raise NotFoundError(f"No account {owner_id}")
            playlist = Playlist(id=self._take_id("playlist"), owner_id=owner_id, name=name)
            self._playlists[playlist.id] = playlist
            snapshot = self._snapshot()
        await self._persist(snapshot)
        return playlist

    async def get_playlist(self, playlist_id: int, *, owner_id: int | None = None) -> Playlist:
        """Return a playlist.

        With *owner_id*, a playlist owned by someone else is reported as
        missing, exactly like one that does not exist.
        """
        with self._lock:
            return self._owned(playlist_id, owner_id)

    async def rename_playlist(
        self, playlist_id: int, name: str, *, owner_id: int | None = None
    ) -> Playlist:
        with self._lock:
            playlist = replace(self._owned(playlist_id, owner_id), name=name)
            self._playlists[playlist_id] = playlist
            snapshot = self._snapshot()
        await self._persist(snapshot)
        return playlist

    async def add_track(
        self, playlist_id: int, track: TrackRef, *, owner_id: int | None = None
    ) -> Playlist:
        """Append *track* to the end of the playlist."""
        with self._lock:
            current = self._owned(playlist_id, owner_id)
            playlist = replace(current, tracks=(*current.tracks, track))
            self._playlists[playlist_id] = playlist
            snapshot = self._snapshot()
        await self._persist(snapshot)
        return playlist

    async def delete_playlist(self, playlist_id: int, *, owner_id: int | None = None) -> None:
        with self._lock:
            self._owned(playlist_id, owner_id)
            del self._playlists[playlist_id]
            snapshot = self._snapshot()
        await self._persist(snapshot)

    # -- Internal --
    # Everything below except _persist/_write must be called holding _lock.

    def _find_username(self, wanted: str) -> Account | None:
        for account in self._accounts.values():
            if account.username.casefold() == wanted:
                return account
        return None

    def _owned(self, playlist_id: int, owner_id: int | None) -> Playlist:
        playlist = self._playlists.get(playlist_id)
        if playlist is None or (owner_id is not None and playlist.owner_id != owner_id):
            raise NotFoundError(f"No playlist {playlist_id}")
        return playlist

    def _take_id(self, kind: str) -> int:
        value = self._next_ids[kind]
        self._next_ids[kind] = value + 1
        return value

    def _snapshot(self) -> tuple[int, dict[str, Any]] | None:
        """Number and capture the current state; None when not persisting."""
        if self._data_file is None:
            return None
        self._version += 1
        return self._version, {
            "next_ids": dict(self._next_ids),
            "accounts": [asdict(a) for a in self._accounts.values()],
            "playlists": [asdict(p) for p in self._playlists.values()],
        }

    async def _persist(self, snapshot: tuple[int, dict[str, Any]] | None) -> None:
        if snapshot is None:
            return
        await anyio.to_thread.run_sync(self._write, *snapshot)

    def _write(self, version: int, state: dict[str, Any]) -> None:
        """Rewrite the data file unless a newer snapshot already landed."""
        assert self._data_file is not None
        with self._write_lock:
            if version <= self._written_version:
                return
            tmp = self._data_file.with_name(self._data_file.name + ".tmp")
            tmp.write_text(json.dumps(state, indent=2), encoding="utf-8")
            os.replace(tmp, self._data_file)
            self._written_version = version

    def _load(self, path: Path) -> None:
        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
            accounts = [Account(**item) for item in raw["accounts"]]
            playlists = [
                Playlist(
                    id=item["id"],
                    owner_id=item["owner_id"],
                    name=item["name"],
                    tracks=tuple(TrackRef(**t) for t in item["tracks"]),
                )
                for item in raw["playlists"]
            ]
            next_ids = {kind: int(raw["next_ids"][kind]) for kind in ("account", "playlist")}
        except (OSError, ValueError, KeyError, TypeError) as exc:
            msg = f"Cannot load data file {str(path)!r}: {exc}"
            raise ConfigurationError(msg) from exc

        self._accounts = {a.id: a for a in accounts}
        self._playlists = {p.id: p for p in playlists}
        self._next_ids = next_ids
        logger.info(
            "Loaded %d accounts and %d playlists from %s", len(accounts), len(playlists), path
        )
