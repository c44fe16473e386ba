"""JSON document storage for the REST service."""
import json
import os
import tempfile
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator, List

from fastapi import Request
from pydantic import BaseModel, Field

from zxsgit.constants import ADMIN_EMAIL
from zxsgit.models import Company, Todo, User
from zxsgit.models.user import seed_admin
from zxsgit.utils.logger import logger

USERS_FILE = "users.json"
DATA_FILE = "data.json"


class DataDocument(BaseModel):
    """Contents of data.json."""
    todos: List[Todo] = Field(default_factory=list)
    companies: List[Company] = Field(default_factory=list)


class JsonDocumentStore:
    """
    Two flat JSON documents rewritten in full on every change.

    users.json holds the user array and data.json the todos and companies.
    Each document is guarded by a lock held across load, mutate and save.
    """

    def __init__(self, data_dir: str):
        self.data_dir = Path(data_dir)
        self.users_path = self.data_dir / USERS_FILE
        self.data_path = self.data_dir / DATA_FILE
        self._users_lock = threading.RLock()
        self._data_lock = threading.RLock()
        self.ensure_files()

    def ensure_files(self) -> None:
        """Create missing documents and seed the administrator."""
        self.data_dir.mkdir(parents=True, exist_ok=True)
        if not self.data_path.exists():
            self._write(self.data_path, DataDocument().model_dump())
        with self.users() as users:
            if not any(u.email == ADMIN_EMAIL for u in users):
                users.append(seed_admin())
                logger.info(f"Seeded admin account in {self.users_path}")

    @staticmethod
    def _write(path: Path, document: Any) -> None:
        fd, tmp_path = tempfile.mkstemp(dir=str(path.parent), prefix=f".{path.name}-")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(document, f, indent=2)
            os.replace(tmp_path, path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

    @staticmethod
    def _read(path: Path, default: Any) -> Any:
        if not path.exists():
            return default
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)

    def load_users(self) -> List[User]:
        with self._users_lock:
            return [User(**u) for u in self._read(self.users_path, [])]

    def load_data(self) -> DataDocument:
        with self._data_lock:
            return DataDocument(**self._read(self.data_path, {}))

    @contextmanager
    def users(self) -> Iterator[List[User]]:
        """
        Load the user list for modification; it is saved when the block exits cleanly.

        Usage:
            with store.users() as users:
                users.append(user)
        """
        with self._users_lock:
            users = [User(**u) for u in self._read(self.users_path, [])]
            yield users
            self._write(self.users_path, [u.model_dump() for u in users])

    @contextmanager
    def data(self) -> Iterator[DataDocument]:
        """Load data.json for modification; it is saved when the block exits cleanly."""
        with self._data_lock:
            document = DataDocument(**self._read(self.data_path, {}))
            yield document
            self._write(self.data_path, document.model_dump())


def get_store(request: Request) -> JsonDocumentStore:
    """Dependency for getting the document store."""
    return request.app.state.store
