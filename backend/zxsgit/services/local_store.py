"""Browser-style key-value store used as the offline cache."""
import json
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, List, Optional

from zxsgit.utils.exceptions import StorageFullError
from zxsgit.utils.logger import logger


class LocalStore:
    """
    Persistent key-value store with localStorage semantics.

    Values are kept as JSON strings under string keys. When a backing file is
    given, every read goes back to the file and every write replaces it, so two
    stores opened on the same file behave like two browser tabs: each sees the
    other's writes and the last writer wins. Without a path the slots live in
    memory.
    """

    def __init__(self, path: Optional[str] = None, quota_bytes: int = 5 * 1024 * 1024):
        self.path = Path(path) if path else None
        self.quota_bytes = quota_bytes
        self._memory: Dict[str, str] = {}

    def _read_slots(self) -> Dict[str, str]:
        if self.path is None:
            return dict(self._memory)
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                slots = json.load(f)
        except (OSError, ValueError) as e:
            logger.error(f"Unable to read local store {self.path}: {e}")
            return {}
        if not isinstance(slots, dict):
            logger.error(f"Local store {self.path} is not a key-value document, ignoring it")
            return {}
        return {str(k): v for k, v in slots.items() if isinstance(v, str)}

    def _write_slots(self, slots: Dict[str, str]) -> None:
        if self.path is None:
            self._memory = slots
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=str(self.path.parent), prefix=".local-store-")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(slots, f)
            os.replace(tmp_path, self.path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

    @staticmethod
    def _usage(slots: Dict[str, str]) -> int:
        return sum(len(k.encode("utf-8")) + len(v.encode("utf-8")) for k, v in slots.items())

    def get(self, key: str, default: Any = None) -> Any:
        """
        Read and decode a slot.

        Args:
            key: Slot name
            default: Returned when the slot is missing or cannot be decoded

        Returns:
            Decoded JSON value or the default
        """
        raw = self._read_slots().get(key)
        if raw is None:
            return default
        try:
            return json.loads(raw)
        except ValueError as e:
            logger.error(f"Unable to decode local slot {key}: {e}")
            return default

    def set(self, key: str, value: Any) -> bool:
        """
        Encode and store a value.

        Args:
            key: Slot name
            value: JSON-serializable value

        Returns:
            True if stored, False if the value could not be encoded or written

        Raises:
            StorageFullError: If storing the value would exceed the quota
        """
        try:
            raw = json.dumps(value)
        except (TypeError, ValueError) as e:
            logger.error(f"Unable to encode local slot {key}: {e}")
            return False

        slots = self._read_slots()
        slots[key] = raw
        usage = self._usage(slots)
        if usage > self.quota_bytes:
            logger.warning(
                f"Local store quota exceeded writing {key}: {usage} > {self.quota_bytes} bytes"
            )
            raise StorageFullError(
                "Local storage is full; remove some images or records and try again"
            )

        try:
            self._write_slots(slots)
        except OSError as e:
            logger.error(f"Unable to write local slot {key}: {e}", exc_info=True)
            return False
        return True

    def remove(self, key: str) -> None:
        """Delete a slot if present."""
        slots = self._read_slots()
        if key in slots:
            del slots[key]
            try:
                self._write_slots(slots)
            except OSError as e:
                logger.error(f"Unable to remove local slot {key}: {e}", exc_info=True)

    def clear(self) -> None:
        """Delete every slot."""
        try:
            self._write_slots({})
        except OSError as e:
            logger.error(f"Unable to clear local store: {e}", exc_info=True)

    def keys(self) -> List[str]:
        return list(self._read_slots().keys())

    def usage_bytes(self) -> int:
        """Bytes currently used by keys and encoded values."""
        return self._usage(self._read_slots())
