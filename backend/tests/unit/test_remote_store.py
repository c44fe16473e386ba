"""Tests for the REST client envelope handling."""
import asyncio

import httpx
from pydantic import SecretStr

from zxsgit.schemas import AdminUserUpdate, CompanyPayload, LoginRequest, RegisterRequest
from zxsgit.services.remote_store import RemoteStoreClient
from zxsgit.utils.exceptions import AuthenticationError, ConflictError, NetworkError, NotFoundError


def client_for(handler) -> RemoteStoreClient:
    return RemoteStoreClient("http://testserver/", transport=httpx.MockTransport(handler))


def test_register_and_login_against_service(server_app):
    async def scenario():
        client = RemoteStoreClient("http://testserver", transport=httpx.ASGITransport(app=server_app))
        request = RegisterRequest(name="Ana", email="ana@example.com", password=SecretStr("secret"))

        created = await client.register(request)
        assert created.ok
        session, user = created.value
        assert session.email == "ana@example.com"
        assert user.passwordHash is None

        duplicate = await client.register(request)
        assert not duplicate.ok
        assert isinstance(duplicate.error, ConflictError)
        assert duplicate.status_code == 409
        assert not duplicate.unreachable

        wrong = await client.login(LoginRequest(email="ana@example.com", password=SecretStr("bad")))
        assert isinstance(wrong.error, AuthenticationError)
        missing = await client.get_company("nope")
        assert isinstance(missing.error, NotFoundError)
        assert missing.message == "Company not found"

        assert await client.ping()
        await client.aclose()

    asyncio.run(scenario())


def test_company_roundtrip_against_service(server_app):
    async def scenario():
        client = RemoteStoreClient("http://testserver", transport=httpx.ASGITransport(app=server_app))
        created = await client.create_company(CompanyPayload(name="Acme", phone="1"))
        updated = await client.update_company(created.value.id, CompanyPayload(phone="2"))
        listing = await client.list_companies()
        deleted = await client.delete_company(created.value.id)
        await client.aclose()

        assert updated.value.phone == "2"
        assert [c.id for c in listing.value] == [created.value.id]
        assert deleted.ok and deleted.message == "Company deleted"

    asyncio.run(scenario())


def test_transport_error_is_unreachable():
    def handler(request):
        raise httpx.ConnectTimeout("timed out", request=request)

    async def scenario():
        client = client_for(handler)
        result = await client.list_users()
        assert not await client.ping()
        return result

    result = asyncio.run(scenario())
    assert not result.ok
    assert result.unreachable
    assert isinstance(result.error, NetworkError)


def test_server_error_and_non_json_are_unreachable():
    responses = iter([
        httpx.Response(500, json={"ok": False, "message": "boom"}),
        httpx.Response(200, text="<html>proxy</html>"),
    ])

    async def scenario():
        client = client_for(lambda request: next(responses))
        return await client.list_todos(), await client.list_todos()

    server_error, html = asyncio.run(scenario())
    assert server_error.unreachable
    assert server_error.status_code == 500
    assert html.unreachable


def test_malformed_data_is_unreachable():
    async def scenario():
        client = client_for(lambda request: httpx.Response(200, json={"ok": True, "company": {"phone": 1}}))
        return await client.get_company("c1")

    result = asyncio.run(scenario())
    assert not result.ok
    assert result.unreachable


def test_envelope_with_ok_false_is_rejection():
    async def scenario():
        client = client_for(lambda request: httpx.Response(200, json={"ok": False, "message": "Nope"}))
        return await client.list_users()

    result = asyncio.run(scenario())
    assert not result.ok
    assert not result.unreachable
    assert result.message == "Nope"


def test_request_body_and_path():
    seen = {}

    def handler(request):
        seen["method"] = request.method
        seen["url"] = str(request.url)
        seen["body"] = request.content
        return httpx.Response(200, json={"ok": True, "message": "User updated"})

    async def scenario():
        client = client_for(handler)
        return await client.update_user("u1", AdminUserUpdate(name="Ana", password=SecretStr("pw")))

    result = asyncio.run(scenario())
    assert result.ok and result.value is None
    assert seen["method"] == "PUT"
    assert seen["url"] == "http://testserver/api/users/u1"
    assert b'"password":"pw"' in seen["body"].replace(b" ", b"")
