"""Playlist controllers: dashboard, create, show, add track, rename, delete.

Every controller is scoped to the signed-in account. A playlist owned by
someone else is indistinguishable from one that does not exist: 404.
"""

from setlist.actions import Helpers
from setlist.app import App
from setlist.errors import NotFoundError
from setlist.http.request import Request
from setlist.playlists.accounts import current_account, flash, page
from setlist.playlists.models import TrackRef
from setlist.playlists.store import MemoryStore
from setlist.validation import max_length, required, single_line, validate

NAME_RULES = [required, single_line, max_length(80)]
TRACK_RULES = {
    "title": [required, single_line, max_length(200)],
    "artist": [required, single_line, max_length(200)],
}


def playlist_id(request: Request) -> int:
    """The ``:id`` route parameter; anything but digits is a 404."""
    value = request.param("id")
    if not value.isdigit():
        raise NotFoundError(f"No playlist {value!r}")
    return int(value)


def register(app: App, store: MemoryStore) -> None:
    """Attach the playlist controllers to *app*."""

    @app.get("/dashboard", name="dashboard")
    async def dashboard(request: Request, helpers: Helpers):
        account = await current_account(request, store)
        if account is None:
            return helpers.redirect(app.url_for("login"))
        playlists = await store.list_playlists_for_owner(account.id)
        return helpers.view(
            "dashboard.html",
            page(request, account, playlists=playlists, form={}, errors={}),
        )

    @app.post("/playlists", name="create_playlist", form_template="dashboard.html")
    async def create(request: Request, helpers: Helpers):
        account = await current_account(request, store)
        if account is None:
            return helpers.redirect(app.url_for("login"), 303)

        form = {"name": request.form("name").strip()}
        result = validate(form, {"name": NAME_RULES})
        if not result:
            playlists = await store.list_playlists_for_owner(account.id)
            result.raise_for_errors(form, **page(request, account, playlists=playlists))

        playlist = await store.create_playlist(account.id, result.data["name"])
        return helpers.redirect(app.url_for("playlist", id=playlist.id), 303)

    @app.get("/playlists/:id", name="playlist")
    async def show(request: Request, helpers: Helpers):
        account = await current_account(request, store)
        if account is None:
            return helpers.redirect(app.url_for("login"))
        playlist = await store.get_playlist(playlist_id(request), owner_id=account.id)
        return helpers.view(
            "playlist.html",
            page(request, account, playlist=playlist, form={}, errors={}),
        )

    @app.post("/playlists/:id/tracks", name="add_track", form_template="playlist.html")
    async def add_track(request: Request, helpers: Helpers):
        account = await current_account(request, store)
        if account is None:
            return helpers.redirect(app.url_for("login"), 303)
        playlist = await store.get_playlist(playlist_id(request), owner_id=account.id)

        form = {
            "title": request.form("title").strip(),
            "artist": request.form("artist").strip(),
        }
        result = validate(form, TRACK_RULES)
        result.raise_for_errors(form, **page(request, account, playlist=playlist))

        await store.add_track(
            playlist.id,
            TrackRef(title=result.data["title"], artist=result.data["artist"]),
            owner_id=account.id,
        )
        return helpers.redirect(app.url_for("playlist", id=playlist.id), 303)

    @app.post("/playlists/:id/rename", name="rename_playlist", form_template="playlist.html")
    async def rename(request: Request, helpers: Helpers):
        account = await current_account(request, store)
        if account is None:
            return helpers.redirect(app.url_for("login"), 303)
        playlist = await store.get_playlist(playlist_id(request), owner_id=account.id)

        form = {"name": request.form("name").strip()}
        result = validate(form, {"name": NAME_RULES})
        result.raise_for_errors(form, **page(request, account, playlist=playlist))

        await store.rename_playlist(playlist.id, result.data["name"], owner_id=account.id)
        return helpers.redirect(app.url_for("playlist", id=playlist.id), 303)

    @app.post("/playlists/:id/delete", name="delete_playlist")
    async def delete(request: Request, helpers: Helpers):
        account = await current_account(request, store)
        if account is None:
            return helpers.redirect(app.url_for("login"), 303)
        playlist = await store.get_playlist(playlist_id(request), owner_id=account.id)
        await store.delete_playlist(playlist.id, owner_id=account.id)
        flash(request, f"Deleted {playlist.name}.")
        return helpers.redirect(app.url_for("dashboard"), 303)
