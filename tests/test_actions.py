"""Tests for setlist.actions: response actions and per-request helpers."""

import pytest

from setlist.actions import Helpers, RawAction, RedirectAction, ViewAction
from setlist.errors import ActionAlreadyProducedError


class TestHelpers:
    def test_view(self) -> None:
        action = Helpers().view("page.html", {"title": "Home"}, 201)
        assert action == ViewAction("page.html", {"title": "Home"}, 201)
        assert action.layout is True

    def test_view_without_layout(self) -> None:
        assert Helpers().view("page.html", layout=False).layout is False

    def test_view_context_is_a_copy(self) -> None:
        data = {"title": "Home"}
        action = Helpers().view("page.html", data)
        data["title"] = "Changed"
        assert action.context["title"] == "Home"

    def test_redirect_defaults_to_302(self) -> None:
        assert Helpers().redirect("/login") == RedirectAction("/login", 302)

    def test_redirect_303(self) -> None:
        assert Helpers().redirect("/dashboard", 303).status == 303

    @pytest.mark.parametrize("status", [200, 404, 500])
    def test_redirect_rejects_non_3xx(self, status: int) -> None:
        with pytest.raises(ValueError, match="3xx"):
            Helpers().redirect("/x", status)

    def test_raw(self) -> None:
        action = Helpers().raw('{"ok": true}', "application/json", 202)
        assert action == RawAction('{"ok": true}', "application/json", 202)

    def test_raw_default_content_type(self) -> None:
        assert Helpers().raw("hi").content_type == "text/plain; charset=utf-8"

    def test_second_action_refused(self) -> None:
        helpers = Helpers()
        helpers.redirect("/login")
        with pytest.raises(ActionAlreadyProducedError, match="redirect"):
            helpers.view("page.html")

    def test_same_helper_twice_refused(self) -> None:
        helpers = Helpers()
        helpers.raw("a")
        with pytest.raises(ActionAlreadyProducedError):
            helpers.raw("b")

    def test_produced(self) -> None:
        helpers = Helpers()
        assert helpers.produced is None
        helpers.view("page.html")
        assert helpers.produced == "view"


class TestActions:
    def test_actions_are_frozen(self) -> None:
        action = ViewAction("page.html")
        with pytest.raises(AttributeError):
            action.status = 500  # type: ignore[misc]

    def test_redirect_constructor_validates(self) -> None:
        with pytest.raises(ValueError):
            RedirectAction("/x", 200)
