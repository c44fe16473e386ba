"""Application context wiring the sync layer together."""
from typing import Optional

import httpx

from zxsgit.config import Settings, settings as default_settings
from zxsgit.models import Session
from zxsgit.services.auth import AuthService
from zxsgit.services.companies import CompanyService
from zxsgit.services.local_store import LocalStore
from zxsgit.services.notifications import ChangeBus
from zxsgit.services.remote_store import RemoteStoreClient
from zxsgit.services.session_manager import SessionManager
from zxsgit.services.todos import TodoService
from zxsgit.services.users import UserService
from zxsgit.utils.logger import logger


class AppContext:
    """
    Builds every component once and hands the same instances to each service.

    Usage:
        async with AppContext() as app:
            result = await app.auth.login(LoginRequest(email=..., password=...))
    """

    def __init__(
        self,
        settings: Settings = default_settings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        store: Optional[LocalStore] = None,
    ):
        self.settings = settings
        self.store = store or LocalStore(
            path=settings.local_store_path,
            quota_bytes=settings.local_store_quota_bytes,
        )
        self.remote = RemoteStoreClient(
            settings.api_url,
            timeout=settings.remote_timeout_seconds,
            transport=transport,
        )
        self.bus = ChangeBus()
        self.sessions = SessionManager(self.store)

        components = (self.store, self.remote, self.bus, self.sessions)
        self.auth = AuthService(*components)
        self.users = UserService(*components)
        self.companies = CompanyService(*components)
        self.todos = TodoService(*components)

        # Registration and user edits touch the same collection
        self.auth.lock = self.users.lock
        self._initialized = False

    def initialize(self) -> Optional[Session]:
        """Seed the administrator and restore the persisted session (runs once)."""
        if not self._initialized:
            self.users.ensure_admin()
            self._initialized = True
            logger.info(f"Sync layer ready (remote store {self.settings.api_url})")
        return self.sessions.restore()

    async def aclose(self) -> None:
        await self.remote.aclose()

    async def __aenter__(self) -> "AppContext":
        self.initialize()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()
