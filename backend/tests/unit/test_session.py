"""Tests for session persistence and the application context."""
import asyncio
import logging

from zxsgit.config import Settings
from zxsgit.constants import ADMIN_EMAIL, SESSION_KEY, USERS_KEY
from zxsgit.context import AppContext
from zxsgit.models import User
from zxsgit.models.user import seed_admin
from zxsgit.services.local_store import LocalStore
from zxsgit.services.session_manager import SessionManager
from zxsgit.utils.hashing import hash_password
from zxsgit.utils.logger import resolve_level


def test_start_persists_and_restore_reads_back(tmp_path):
    path = str(tmp_path / "local.json")
    manager = SessionManager(LocalStore(path))
    session = manager.start(seed_admin())

    restored = SessionManager(LocalStore(path)).restore()

    assert restored == session
    assert restored.is_admin


def test_corrupt_session_restores_anonymous():
    store = LocalStore()
    store.set(SESSION_KEY, {"email": "no-name@example.com"})
    manager = SessionManager(store)

    assert manager.restore() is None
    assert not manager.is_authenticated


def test_rotate_and_update_identity():
    manager = SessionManager(LocalStore())
    assert manager.rotate("X", "x@example.com") is None

    session = manager.start(User(name="Ana", email="ana@example.com"))
    rotated = manager.rotate("Ana B", "ana.b@example.com")
    renamed = manager.update_identity("Ana C", "ana.b@example.com", "admin")

    assert rotated.token != session.token
    assert renamed.token == rotated.token
    assert renamed.role == "admin"
    assert manager.store.get(SESSION_KEY)["name"] == "Ana C"


def test_legacy_plaintext_password_is_digested_once():
    user = User(email="Old@Example.com", name="Old", password="hunter2")

    assert user.email == "old@example.com"
    assert user.passwordHash == hash_password("hunter2")
    assert "password" not in user.model_dump()


def test_context_seeds_admin_once_and_closes(tmp_path):
    settings = Settings(api_url="http://127.0.0.1:9", local_store_path=str(tmp_path / "local.json"))

    async def scenario():
        async with AppContext(settings) as context:
            context.initialize()
            return context.store.get(USERS_KEY), context.sessions.current

    users, session = asyncio.run(scenario())

    assert [u["email"] for u in users] == [ADMIN_EMAIL]
    assert session is None


def test_contexts_on_one_file_share_state(tmp_path):
    settings = Settings(api_url="http://127.0.0.1:9", local_store_path=str(tmp_path / "local.json"))
    first = AppContext(settings)
    second = AppContext(settings)
    first.initialize()

    first.sessions.start(seed_admin())

    assert second.initialize().email == ADMIN_EMAIL
    assert len(second.store.get(USERS_KEY)) == 1


def test_log_level_setting_overrides_environment():
    assert resolve_level(Settings(environment="production", log_level="warning")) == logging.WARNING
    assert resolve_level(Settings(environment="development", log_level=None)) == logging.DEBUG
    assert resolve_level(Settings(environment="production", log_level="loud")) == logging.INFO
