"""End-to-end tests for the playlist app: accounts and playlists."""

import pytest

from setlist.app import App
from setlist.errors import ConfigurationError
from setlist.playlists.app import create_app, default_config
from setlist.playlists.store import MemoryStore
from setlist.testing import TestClient

PASSWORD = "correct-horse"


async def _signup(client: TestClient, username: str = "ada", password: str = PASSWORD):
    return await client.post(
        "/signup",
        form={"username": username, "password": password, "confirm_password": password},
    )


async def _login(client: TestClient, username: str = "ada", password: str = PASSWORD):
    return await client.post("/login", form={"username": username, "password": password})


async def _signed_in(client: TestClient, username: str = "ada") -> None:
    await _signup(client, username)
    response = await _login(client, username)
    assert response.status == 303


class TestCreateApp:
    def test_requires_secret_key(self) -> None:
        with pytest.raises(ConfigurationError):
            create_app(default_config())

    def test_freezes_with_bundled_templates(self, playlist_app: App) -> None:
        playlist_app.freeze()
        assert "layout.html" in playlist_app.renderer.template_names
        assert playlist_app.url_for("playlist", id=1) == "/playlists/1"


class TestHome:
    async def test_anonymous_home(self, playlist_app: App) -> None:
        async with TestClient(playlist_app) as client:
            response = await client.get("/")
        assert response.status == 200
        assert "Create an account" in response.text
        assert "Log in" in response.text

    async def test_signed_in_home_redirects(self, playlist_app: App) -> None:
        async with TestClient(playlist_app) as client:
            await _signed_in(client)
            response = await client.get("/")
        assert response.status == 302
        assert response.location == "/dashboard"

    async def test_unknown_path_uses_error_page(self, playlist_app: App) -> None:
        async with TestClient(playlist_app) as client:
            response = await client.get("/nowhere")
        assert response.status == 404
        assert "404 Not Found" in response.text
        assert "<html" in response.text


class TestSignup:
    async def test_form_renders(self, playlist_app: App) -> None:
        async with TestClient(playlist_app) as client:
            response = await client.get("/signup")
        assert response.status == 200
        assert 'name="username"' in response.text

    async def test_success_redirects_to_login(self, playlist_app: App, store: MemoryStore) -> None:
        async with TestClient(playlist_app) as client:
            response = await _signup(client)
            assert response.status == 302
            assert response.location == "/login"

            login_page = await client.get("/login")
        assert "Account created" in login_page.text
        account = await store.find_account_by_username("ada")
        assert account is not None
        assert account.password_hash != PASSWORD

    async def test_flash_shown_once(self, playlist_app: App) -> None:
        async with TestClient(playlist_app) as client:
            await _signup(client)
            first = await client.get("/login")
            second = await client.get("/login")
        assert "Account created" in first.text
        assert "Account created" not in second.text

    async def test_taken_username(self, playlist_app: App) -> None:
        async with TestClient(playlist_app) as client:
            await _signup(client, "ada")
            response = await _signup(client, "ada")
        assert response.status == 422
        assert "This username is already taken" in response.text
        assert 'value="ada"' in response.text

    async def test_invalid_fields(self, playlist_app: App) -> None:
        async with TestClient(playlist_app) as client:
            response = await client.post(
                "/signup",
                form={"username": "a!", "password": "short", "confirm_password": "other"},
            )
        assert response.status == 422
        assert "at least 3" in response.text
        assert "Only letters, numbers, and underscores allowed" in response.text
        assert "at least 8" in response.text
        assert "short" not in response.text

    async def test_password_mismatch(self, playlist_app: App) -> None:
        async with TestClient(playlist_app) as client:
            response = await client.post(
                "/signup",
                form={"username": "ada", "password": PASSWORD, "confirm_password": "different1"},
            )
        assert response.status == 422
        assert "Passwords do not match" in response.text


class TestLogin:
    async def test_bad_credentials(self, playlist_app: App) -> None:
        async with TestClient(playlist_app) as client:
            await _signup(client)
            response = await _login(client, password="wrong-password")
        assert response.status == 422
        assert "Unknown username or wrong password" in response.text

    async def test_unknown_user(self, playlist_app: App) -> None:
        async with TestClient(playlist_app) as client:
            response = await _login(client, "ghost")
        assert response.status == 422

    async def test_login_then_dashboard(self, playlist_app: App) -> None:
        async with TestClient(playlist_app) as client:
            await _signup(client)
            response = await _login(client)
            assert response.status == 303
            assert response.location == "/dashboard"
            dashboard = await client.get("/dashboard")
        assert dashboard.status == 200
        assert "My playlists" in dashboard.text
        assert "ada" in dashboard.text

    async def test_logout(self, playlist_app: App) -> None:
        async with TestClient(playlist_app) as client:
            await _signed_in(client)
            response = await client.post("/logout")
            assert response.status == 303
            assert response.location == "/"
            dashboard = await client.get("/dashboard")
        assert dashboard.status == 302


class TestDashboard:
    async def test_requires_login(self, playlist_app: App) -> None:
        async with TestClient(playlist_app) as client:
            response = await client.get("/dashboard")
        assert response.status == 302
        assert response.location == "/login"

    async def test_forged_session_is_anonymous(self, playlist_app: App) -> None:
        async with TestClient(playlist_app) as client:
            response = await client.get(
                "/dashboard", headers={"cookie": "setlist_session=eyJhY2NvdW50X2lkIjoxfQ.x.y"}
            )
        assert response.status == 302


class TestPlaylists:
    async def test_create_add_rename_delete(self, playlist_app: App) -> None:
        async with TestClient(playlist_app) as client:
            await _signed_in(client)

            created = await client.post("/playlists", form={"name": "Road trip"})
            assert created.status == 303
            assert created.location == "/playlists/1"

            added = await client.post(
                "/playlists/1/tracks", form={"title": "Roadrunner", "artist": "The Modern Lovers"}
            )
            assert added.status == 303

            page = await client.get("/playlists/1")
            assert page.status == 200
            assert "Road trip" in page.text
            assert "Roadrunner" in page.text

            renamed = await client.post("/playlists/1/rename", form={"name": "Night drive"})
            assert renamed.status == 303
            assert "Night drive" in (await client.get("/playlists/1")).text

            dashboard = await client.get("/dashboard")
            assert "Night drive" in dashboard.text
            assert "1 track" in dashboard.text

            deleted = await client.post("/playlists/1/delete")
            assert deleted.status == 303
            assert deleted.location == "/dashboard"
            assert (await client.get("/playlists/1")).status == 404

    async def test_blank_name_rerenders_dashboard(self, playlist_app: App) -> None:
        async with TestClient(playlist_app) as client:
            await _signed_in(client)
            response = await client.post("/playlists", form={"name": "   "})
        assert response.status == 422
        assert "This field is required" in response.text
        assert "My playlists" in response.text

    async def test_multiline_name_rejected(self, playlist_app: App) -> None:
        async with TestClient(playlist_app) as client:
            await _signed_in(client)
            response = await client.post("/playlists", form={"name": "Road\ntrip"})
            dashboard = await client.get("/dashboard")
        assert response.status == 422
        assert "Must be a single line of text" in response.text
        assert "No playlists yet." in dashboard.text

    async def test_missing_track_fields(self, playlist_app: App) -> None:
        async with TestClient(playlist_app) as client:
            await _signed_in(client)
            await client.post("/playlists", form={"name": "Mix"})
            response = await client.post("/playlists/1/tracks", form={"title": "Only title"})
        assert response.status == 422
        assert 'value="Only title"' in response.text

    async def test_other_users_playlist_is_404(self, playlist_app: App) -> None:
        async with TestClient(playlist_app) as ada:
            await _signed_in(ada, "ada")
            await ada.post("/playlists", form={"name": "Private"})

        async with TestClient(playlist_app) as bob:
            await _signed_in(bob, "bob")
            assert (await bob.get("/playlists/1")).status == 404
            assert (await bob.post("/playlists/1/rename", form={"name": "Mine"})).status == 404
            assert (await bob.post("/playlists/1/delete")).status == 404

    async def test_non_numeric_id_is_404(self, playlist_app: App) -> None:
        async with TestClient(playlist_app) as client:
            await _signed_in(client)
            response = await client.get("/playlists/abc")
        assert response.status == 404

    async def test_anonymous_post_redirects_to_login(self, playlist_app: App) -> None:
        async with TestClient(playlist_app) as client:
            response = await client.post("/playlists", form={"name": "x"})
        assert response.status == 303
        assert response.location == "/login"


class TestDeleteAccount:
    async def test_cascade(self, playlist_app: App, store: MemoryStore) -> None:
        async with TestClient(playlist_app) as client:
            await _signed_in(client)
            await client.post("/playlists", form={"name": "Mix"})
            response = await client.post("/account/delete")
            assert response.status == 303
            assert response.location == "/"

            home = await client.get("/")
            assert home.status == 200
            assert "were deleted" in home.text

        assert await store.find_account_by_username("ada") is None
        assert await store.list_playlists_for_owner(1) == []

    async def test_username_free_again(self, playlist_app: App) -> None:
        async with TestClient(playlist_app) as client:
            await _signed_in(client)
            await client.post("/account/delete")
            response = await _signup(client)
        assert response.status == 302
