"""Durable JSON log of recent conversation turns."""
import asyncio
import json
import logging
import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import List

from models.conversation import DurableLogEntry, PersistResult
from config import STORAGE_PATH, MAX_HISTORY_LENGTH

logger = logging.getLogger(__name__)

_OLDEST = datetime.min.replace(tzinfo=timezone.utc)


class ConversationLog:
    """
    Append-and-prune record store backed by a single JSON array file.

    Each ``record`` call reads the whole file, appends one entry, drops the
    user's oldest entry if they now exceed the cap, and rewrites the file.
    The read-modify-write is serialized within this process by a lock;
    writers in other processes are not coordinated and may lose updates.
    """

    def __init__(
        self,
        path: str = STORAGE_PATH,
        max_entries_per_user: int = MAX_HISTORY_LENGTH
    ):
        self.path = Path(path)
        self.max_entries_per_user = max_entries_per_user
        self._lock = asyncio.Lock()
        logger.info(f"ConversationLog writing to {self.path}")

    async def record(self, entry: DurableLogEntry) -> PersistResult:
        """
        Persist one entry. Never raises on I/O failure.

        Returns:
            PersistResult describing whether the write succeeded
        """
        try:
            async with self._lock:
                await asyncio.to_thread(self._record_sync, entry)
            return PersistResult(ok=True)
        except Exception as e:
            logger.error(
                f"Error logging conversation for user {entry.user_id}: {e}",
                exc_info=True
            )
            return PersistResult(ok=False, error=str(e))

    async def load(self) -> List[DurableLogEntry]:
        """Return the persisted entries in file order."""
        async with self._lock:
            return await asyncio.to_thread(self._read_entries)

    def _record_sync(self, entry: DurableLogEntry) -> None:
        entries = self._read_entries()
        entries.append(entry)
        entries = self._prune(entries, entry.user_id)
        self._write_entries(entries)
        logger.debug(f"Logged turn for user {entry.user_id} ({len(entries)} entries total)")

    def _prune(self, entries: List[DurableLogEntry], user_id: str) -> List[DurableLogEntry]:
        """Drop the user's oldest entries until they are within the cap."""
        user_positions = [i for i, e in enumerate(entries) if e.user_id == user_id]
        excess = len(user_positions) - self.max_entries_per_user
        if excess <= 0:
            return entries

        # Oldest timestamp first; array position breaks ties, unparseable sorts first
        by_age = sorted(
            user_positions,
            key=lambda i: (entries[i].parsed_timestamp() or _OLDEST, i)
        )
        evicted = set(by_age[:excess])
        return [e for i, e in enumerate(entries) if i not in evicted]

    def _read_entries(self) -> List[DurableLogEntry]:
        """Load the collection; absent or corrupt files yield an empty list."""
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return []
        except (OSError, ValueError) as e:
            logger.warning(f"Could not read conversation log {self.path}, starting empty: {e}")
            return []

        if not isinstance(raw, list):
            logger.warning(f"Conversation log {self.path} is not a JSON array, starting empty")
            return []

        entries = []
        for record in raw:
            try:
                entries.append(DurableLogEntry.from_dict(record))
            except ValueError as e:
                logger.warning(f"Skipping malformed log record: {e}")
        return entries

    def _write_entries(self, entries: List[DurableLogEntry]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        data = json.dumps([e.to_dict() for e in entries], indent=2, ensure_ascii=False)

        # Write beside the target then swap so a crash never leaves a truncated file
        fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, prefix=".conversation-", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(data)
            os.replace(tmp_path, self.path)
        except BaseException:
            Path(tmp_path).unlink(missing_ok=True)
            raise
