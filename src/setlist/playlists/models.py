"""Entities stored by the playlists app.

Plain frozen dataclasses. The store hands out new instances on every
change; nothing is mutated in place.
"""

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Account:
    id: int
    username: str
    password_hash: str


@dataclass(frozen=True, slots=True)
class TrackRef:
    """A song in a playlist, referenced by title and artist."""

    title: str
    artist: str


@dataclass(frozen=True, slots=True)
class Playlist:
    """A named, ordered list of tracks owned by one account."""

    id: int
    owner_id: int
    name: str
    tracks: tuple[TrackRef, ...] = ()
