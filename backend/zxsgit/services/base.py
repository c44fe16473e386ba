"""Shared plumbing for the entity services."""
import asyncio
from typing import Awaitable, Callable, List, Sequence, Type, TypeVar

from pydantic import BaseModel, ValidationError as SchemaError

from zxsgit.constants import ChangeEvent
from zxsgit.models import Session
from zxsgit.schemas.result import Result
from zxsgit.services.local_store import LocalStore
from zxsgit.services.notifications import ChangeBus
from zxsgit.services.remote_store import RemoteResult, RemoteStoreClient
from zxsgit.services.session_manager import SessionManager
from zxsgit.utils.exceptions import AppException, AuthenticationError, ForbiddenError, StorageFullError
from zxsgit.utils.logger import logger

M = TypeVar("M", bound=BaseModel)
T = TypeVar("T")

CACHE_FULL_NOTICE = "Local storage is full, so the offline copy was not updated"


class EntityService:
    """
    Remote first, local fallback, write-through cache, then notify.

    Writes of one service are serialised by its lock so a double submit is
    applied in order.
    """

    event: ChangeEvent

    def __init__(
        self,
        store: LocalStore,
        remote: RemoteStoreClient,
        bus: ChangeBus,
        sessions: SessionManager,
    ):
        self.store = store
        self.remote = remote
        self.bus = bus
        self.sessions = sessions
        self.lock = asyncio.Lock()

    async def _run(self, operation: str, action: Callable[[], Awaitable[Result[T]]]) -> Result[T]:
        """Run an operation and turn every failure into a Result."""
        try:
            return await action()
        except AppException as e:
            logger.info(f"{operation} rejected: {e.message}")
            return Result.failure(e)
        except Exception as e:
            logger.error(f"{operation} failed: {e}", exc_info=True)
            return Result.failure(AppException("Unexpected error, please try again"))

    def _notify(self) -> None:
        self.bus.publish(self.event)

    @staticmethod
    def _check(result: RemoteResult) -> bool:
        """
        Decide between the remote and the local path.

        Returns:
            True if the remote call succeeded, False if the caller should fall back

        Raises:
            AppException: If the remote store rejected the request
        """
        if result.ok:
            return True
        if result.unreachable:
            return False
        raise result.error

    def _require_session(self) -> Session:
        session = self.sessions.current
        if session is None:
            raise AuthenticationError("Not authenticated")
        return session

    def _require_admin(self) -> Session:
        session = self._require_session()
        if not session.is_admin:
            raise ForbiddenError("Admin access required")
        return session

    def _load(self, key: str, model: Type[M]) -> List[M]:
        """Read a cached collection, skipping entries that no longer parse."""
        raw = self.store.get(key, [])
        if not isinstance(raw, list):
            logger.error(f"Local slot {key} is not a list, ignoring it")
            return []
        records = []
        for entry in raw:
            try:
                records.append(model(**entry))
            except (SchemaError, TypeError) as e:
                logger.warning(f"Skipping unreadable {model.__name__} in {key}: {e}")
        return records

    def _save(self, key: str, records: Sequence[BaseModel]) -> None:
        """
        Write a cached collection.

        Raises:
            StorageFullError: If the quota would be exceeded
            AppException: If the collection could not be written
        """
        if not self.store.set(key, [r.model_dump() for r in records]):
            raise AppException("Local storage could not be written")

    def _write_through(self, save: Callable[[], None], message: str) -> str:
        """
        Cache a change the remote store has already applied.

        A full cache does not undo the remote write: the failure is logged and
        reported in the returned message instead of raised.

        Returns:
            The message, with a notice appended when the cache was not written
        """
        try:
            save()
        except StorageFullError as e:
            logger.warning(f"{self.event.value} applied remotely but not cached: {e.message}")
            return f"{message}. {CACHE_FULL_NOTICE}"
        return message
