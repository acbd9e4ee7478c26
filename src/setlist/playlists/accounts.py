"""Account controllers: home page, signup, login, logout, account deletion.

The signed-in account id lives in the session under ``account_id``.
One-shot notices ("Account created") ride along under ``flash`` and are
consumed by the next rendered page.
"""

from typing import Any

import anyio

from setlist.actions import Helpers
from setlist.app import App
from setlist.errors import ConflictError, NotFoundError, ValidationError
from setlist.http.request import Request
from setlist.playlists.models import Account
from setlist.playlists.store import MemoryStore
from setlist.security.passwords import hash_password, verify_password
from setlist.validation import matches, max_length, min_length, required, validate

SESSION_KEY = "account_id"
FLASH_KEY = "flash"

USERNAME_RULES = [
    required,
    min_length(3),
    max_length(30),
    matches(r"[A-Za-z0-9_]+", message="Only letters, numbers, and underscores allowed"),
]
PASSWORD_RULES = [required, min_length(8), max_length(128)]


async def current_account(request: Request, store: MemoryStore) -> Account | None:
    """The signed-in account, or None.

    A session pointing at a deleted account is treated as signed out.
    """
    account_id = request.session.get(SESSION_KEY)
    if account_id is None:
        return None
    try:
        return await store.get_account(account_id)
    except NotFoundError:
        request.session.pop(SESSION_KEY, None)
        return None


def flash(request: Request, message: str) -> None:
    """Queue a notice for the next rendered page."""
    request.session[FLASH_KEY] = message


def page(request: Request, account: Account | None, **data: Any) -> dict[str, Any]:
    """Common view data: the signed-in user and any pending notice."""
    return {
        "current_user": account,
        "flash": request.session.pop(FLASH_KEY, None),
        **data,
    }


def register(app: App, store: MemoryStore) -> None:
    """Attach the account controllers to *app*."""

    @app.get("/", name="index")
    async def index(request: Request, helpers: Helpers):
        account = await current_account(request, store)
        if account is not None:
            return helpers.redirect(app.url_for("dashboard"))
        return helpers.view("index.html", page(request, None))

    @app.get("/signup", name="signup")
    async def signup_form(request: Request, helpers: Helpers):
        return helpers.view("signup.html", page(request, None, form={}, errors={}))

    @app.post("/signup", form_template="signup.html")
    async def signup(request: Request, helpers: Helpers):
        form = {
            "username": request.form("username").strip(),
            "password": request.form("password"),
            "confirm_password": request.form("confirm_password"),
        }
        # Never echo passwords back into the page
        echo = {"username": form["username"]}

        result = validate(
            form,
            {
                "username": USERNAME_RULES,
                "password": PASSWORD_RULES,
                "confirm_password": [required],
            },
        )
        errors = dict(result.errors)
        if "confirm_password" not in errors and form["confirm_password"] != form["password"]:
            errors["confirm_password"] = ["Passwords do not match"]
        if errors:
            raise ValidationError(errors, echo, **page(request, None))

        password_hash = await anyio.to_thread.run_sync(hash_password, form["password"])
        try:
            await store.create_account(form["username"], password_hash)
        except ConflictError as exc:
            raise ValidationError({exc.field: [exc.message]}, echo, **page(request, None)) from exc

        flash(request, "Account created. Please log in.")
        return helpers.redirect(app.url_for("login"))

    @app.get("/login", name="login")
    async def login_form(request: Request, helpers: Helpers):
        return helpers.view("login.html", page(request, None, form={}, errors={}))

    @app.post("/login", form_template="login.html")
    async def login(request: Request, helpers: Helpers):
        username = request.form("username").strip()
        password = request.form("password")

        account = await store.find_account_by_username(username) if username else None
        verified = account is not None and await anyio.to_thread.run_sync(
            verify_password, password, account.password_hash
        )
        if not verified:
            raise ValidationError(
                {"username": ["Unknown username or wrong password"]},
                {"username": username},
                **page(request, None),
            )

        request.session.rotate()
        request.session[SESSION_KEY] = account.id
        return helpers.redirect(app.url_for("dashboard"), 303)

    @app.post("/logout", name="logout")
    def logout(request: Request, helpers: Helpers):
        request.session.rotate()
        return helpers.redirect(app.url_for("index"), 303)

    @app.post("/account/delete", name="delete_account")
    async def delete_account(request: Request, helpers: Helpers):
        account = await current_account(request, store)
        if account is None:
            return helpers.redirect(app.url_for("login"), 303)
        await store.delete_account(account.id)
        request.session.rotate()
        flash(request, "Your account and its playlists were deleted.")
        return helpers.redirect(app.url_for("index"), 303)
