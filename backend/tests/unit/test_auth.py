"""Tests for registration, sign-in and session handling."""
import asyncio

import httpx
from pydantic import SecretStr

from zxsgit.constants import ADMIN_EMAIL, SESSION_KEY, USERS_KEY, ChangeEvent
from zxsgit.schemas import LoginRequest, RegisterRequest, SelfUpdate
from zxsgit.services.local_store import LocalStore
from zxsgit.utils.exceptions import (
    AuthenticationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)


def registration(email="ana@example.com", password="secret", confirm=None, name="Ana"):
    return RegisterRequest(
        name=name,
        email=email,
        password=SecretStr(password),
        confirm=SecretStr(password if confirm is None else confirm),
    )


def credentials(email, password):
    return LoginRequest(email=email, password=SecretStr(password))


def test_admin_login_is_case_insensitive(online, offline):
    async def scenario():
        return (
            await online.auth.login(credentials("ADMIN@ZXSGIT.LOCAL", "admin321")),
            await offline.auth.login(credentials("ADMIN@ZXSGIT.LOCAL", "admin321")),
        )

    for result in asyncio.run(scenario()):
        assert result.ok, result.message
        assert result.value.role == "admin"
        assert result.value.email == ADMIN_EMAIL


def test_register_signs_in_and_caches_user(online):
    events = []
    online.bus.subscribe(ChangeEvent.USERS, lambda: events.append("users"))

    result = asyncio.run(online.auth.register(registration(email="Ana@Example.com")))

    assert result.ok and result.message == "Account created"
    assert result.value.email == "ana@example.com"
    assert online.sessions.current == result.value
    assert online.store.get(SESSION_KEY)["token"] == result.value.token
    cached = [u for u in online.store.get(USERS_KEY) if u["email"] == "ana@example.com"]
    assert len(cached) == 1
    assert "password" not in cached[0]
    assert events == ["users"]


def test_register_validation_happens_before_io(make_context):
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(500)

    context = make_context(handler=handler)

    async def scenario():
        return [
            await context.auth.register(registration(confirm="different")),
            await context.auth.register(registration(email="not-an-email")),
            await context.auth.register(registration(name="  ")),
            await context.auth.register(registration(password=" ")),
        ]

    results = asyncio.run(scenario())

    assert [r.message for r in results] == [
        "Passwords must match",
        "Invalid email",
        "Name is required",
        "Password is required",
    ]
    assert all(isinstance(r.error, ValidationError) for r in results)
    assert calls == []


def test_duplicate_email_conflicts_and_leaves_store_unchanged(online, make_context, api_client):
    asyncio.run(online.auth.register(registration()))
    users_before = online.store.get(USERS_KEY)
    remote_before = api_client.get("/api/users").json()["users"]

    again = asyncio.run(online.auth.register(registration(email="ANA@EXAMPLE.COM")))
    assert isinstance(again.error, ConflictError)
    assert online.store.get(USERS_KEY) == users_before

    # A client whose cache has never seen the account is refused by the service
    fresh = make_context()
    elsewhere = asyncio.run(fresh.auth.register(registration(email="ana@example.com")))
    assert isinstance(elsewhere.error, ConflictError)
    assert api_client.get("/api/users").json()["users"] == remote_before
    assert all(u["email"] != "ana@example.com" for u in fresh.store.get(USERS_KEY))


def test_offline_register_then_login(offline):
    async def scenario():
        registered = await offline.auth.register(registration())
        await offline.auth.logout()
        wrong = await offline.auth.login(credentials("ana@example.com", "nope"))
        unknown = await offline.auth.login(credentials("bo@example.com", "secret"))
        signed_in = await offline.auth.login(credentials("ANA@example.com", "secret"))
        return registered, wrong, unknown, signed_in

    registered, wrong, unknown, signed_in = asyncio.run(scenario())

    assert registered.ok
    assert isinstance(wrong.error, AuthenticationError)
    assert isinstance(unknown.error, NotFoundError)
    assert signed_in.ok
    assert signed_in.value.token != registered.value.token


def test_offline_registered_user_can_sign_in_once_online(make_context):
    store = LocalStore()
    offline = make_context(online=False, store=store)
    asyncio.run(offline.auth.register(registration()))

    online = make_context(store=store)
    result = asyncio.run(online.auth.login(credentials("ana@example.com", "secret")))

    assert result.ok
    assert result.value.role == "member"


def test_remote_rejection_is_not_retried_locally(online):
    result = asyncio.run(online.auth.login(credentials(ADMIN_EMAIL, "wrong")))
    assert isinstance(result.error, AuthenticationError)
    assert online.sessions.current is None


def test_self_update_changes_credentials(online, offline):
    for context in (online, offline):
        async def scenario():
            registered = await context.auth.register(registration())
            updated = await context.users.update_self(
                SelfUpdate(name="Ana B", email="ana.b@example.com", password=SecretStr("next"))
            )
            await context.auth.logout()
            relogin = await context.auth.login(credentials("ana.b@example.com", "next"))
            return registered, updated, relogin

        registered, updated, relogin = asyncio.run(scenario())

        assert updated.ok, updated.message
        assert updated.value.name == "Ana B"
        assert relogin.ok, relogin.message
        assert relogin.value.name == "Ana B"


def test_self_update_rotates_token(online):
    async def scenario():
        await online.auth.register(registration())
        before = online.sessions.current
        await online.users.update_self(SelfUpdate(name="Ana B", email="ana@example.com"))
        return before, online.sessions.current

    before, after = asyncio.run(scenario())

    assert after.name == "Ana B"
    assert after.token != before.token
    assert after.signedInAt >= before.signedInAt


def test_self_update_requires_session(offline):
    result = asyncio.run(offline.users.update_self(SelfUpdate(name="X", email="x@example.com")))
    assert isinstance(result.error, AuthenticationError)


def test_logout_clears_session_slot(offline):
    async def scenario():
        await offline.auth.login(credentials(ADMIN_EMAIL, "admin321"))
        assert offline.store.get(SESSION_KEY) is not None
        return await offline.auth.logout()

    assert asyncio.run(scenario()).ok
    assert offline.sessions.current is None
    assert offline.store.get(SESSION_KEY) is None
