"""Conversation manager for per-user bounded chat context."""
import logging
from collections import deque
from datetime import datetime, timezone
from typing import Deque, Dict, List, Optional

from models.conversation import Turn, DurableLogEntry, PersistResult
from services.conversation_log import ConversationLog
from config import MAX_HISTORY_LENGTH

logger = logging.getLogger(__name__)


class ConversationStore:
    """
    In-memory per-user history, mirrored to an optional durable log.

    Owned by whoever constructs it (normally the bot entry point) and passed
    into the event router; its lifetime is the process lifetime.

    Concurrent appends for *different* users are independent. Overlapping
    appends for the *same* user are not coordinated beyond the log's own
    lock: both turns land, in whichever order the tasks resume.
    """

    def __init__(
        self,
        max_history: int = MAX_HISTORY_LENGTH,
        conversation_log: Optional[ConversationLog] = None
    ):
        """
        Initialize the store.

        Args:
            max_history: Maximum turns retained per user (oldest evicted first)
            conversation_log: Durable mirror; None keeps history in memory only
        """
        if max_history < 1:
            raise ValueError("max_history must be at least 1")

        self.max_history = max_history
        self.conversation_log = conversation_log
        self._histories: Dict[str, Deque[Turn]] = {}
        logger.info(f"ConversationStore initialized (max_history={max_history})")

    def get(self, user_id: str) -> List[Turn]:
        """
        Get a user's history, oldest first.

        Returns:
            A new list; empty if the user has no history
        """
        return list(self._histories.get(user_id, ()))

    async def append(self, user_id: str, user_text: str, response_text: str) -> PersistResult:
        """
        Add a turn to the user's history and mirror it to the durable log.

        Args:
            user_id: Platform user identity
            user_text: Cleaned user message
            response_text: Completion text or error sentinel

        Returns:
            Status of the durable write; ok when no log is configured
        """
        turn = Turn(
            user=user_text,
            response=response_text,
            timestamp=datetime.now(timezone.utc)
        )

        # deque(maxlen) drops the oldest turn once the cap is exceeded
        history = self._histories.setdefault(user_id, deque(maxlen=self.max_history))
        history.append(turn)
        logger.debug(f"Added turn for user {user_id} ({len(history)}/{self.max_history})")

        if self.conversation_log is None:
            return PersistResult(ok=True)

        result = await self.conversation_log.record(DurableLogEntry.from_turn(user_id, turn))
        if not result.ok:
            logger.warning(f"Turn for user {user_id} kept in memory only: {result.error}")
        return result

    def clear(self, user_id: str) -> None:
        """Forget a user's in-memory history."""
        self._histories.pop(user_id, None)

    def user_ids(self) -> List[str]:
        return list(self._histories)
