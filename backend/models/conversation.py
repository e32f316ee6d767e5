"""Conversation data models."""
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class Turn:
    """Represents a single user message and the bot's reply."""
    user: str
    response: str
    timestamp: datetime


@dataclass(frozen=True)
class DurableLogEntry:
    """A turn as persisted in the shared conversation log file."""
    user_id: str
    user: str
    response: str
    timestamp: str  # ISO-8601, UTC

    @classmethod
    def from_turn(cls, user_id: str, turn: Turn) -> "DurableLogEntry":
        return cls(
            user_id=user_id,
            user=turn.user,
            response=turn.response,
            timestamp=turn.timestamp.astimezone(timezone.utc).isoformat()
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DurableLogEntry":
        """
        Build an entry from its JSON representation.

        Raises:
            ValueError: If the record is not an object or lacks required keys
        """
        if not isinstance(data, dict):
            raise ValueError(f"Log record must be an object, got {type(data).__name__}")
        try:
            return cls(
                user_id=str(data["userId"]),
                user=str(data["user"]),
                response=str(data["response"]),
                timestamp=str(data["timestamp"])
            )
        except KeyError as e:
            raise ValueError(f"Log record missing field: {e}") from e

    def to_dict(self) -> Dict[str, str]:
        return {
            "userId": self.user_id,
            "user": self.user,
            "response": self.response,
            "timestamp": self.timestamp,
        }

    def parsed_timestamp(self) -> Optional[datetime]:
        """Return the timestamp as an aware datetime, or None if unparseable."""
        try:
            parsed = datetime.fromisoformat(self.timestamp.replace("Z", "+00:00"))
        except ValueError:
            return None
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed


@dataclass(frozen=True)
class PersistResult:
    """Outcome of a durable log write. Callers may inspect or ignore it."""
    ok: bool
    error: Optional[str] = None
