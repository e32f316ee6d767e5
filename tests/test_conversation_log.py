"""Unit tests for ConversationLog."""
import sys
from pathlib import Path

# Add backend to path
sys.path.insert(0, str(Path(__file__).parent.parent / "backend"))

import asyncio
import json
import pytest
from models.conversation import DurableLogEntry
from services.conversation_log import ConversationLog


def make_entry(user_id, n, timestamp=None):
    return DurableLogEntry(
        user_id=user_id,
        user=f"message {n}",
        response=f"reply {n}",
        timestamp=timestamp or f"2026-01-01T00:00:{n:02d}+00:00"
    )


@pytest.fixture
def temp_log_file(tmp_path):
    """Create a temporary log file path."""
    return tmp_path / "conversation_history.json"


@pytest.fixture
def conversation_log(temp_log_file):
    """Create a ConversationLog instance with temporary log file."""
    return ConversationLog(path=str(temp_log_file))


def read_records(path):
    return json.loads(Path(path).read_text(encoding="utf-8"))


@pytest.mark.asyncio
async def test_record_creates_file(conversation_log, temp_log_file):
    """Test that recording creates the log file."""
    result = await conversation_log.record(make_entry("u1", 1))

    assert result.ok
    assert temp_log_file.exists()


@pytest.mark.asyncio
async def test_record_json_format(conversation_log, temp_log_file):
    """Test that the file holds a JSON array of camelCase records."""
    await conversation_log.record(make_entry("u1", 1))

    records = read_records(temp_log_file)
    assert records == [{
        "userId": "u1",
        "user": "message 1",
        "response": "reply 1",
        "timestamp": "2026-01-01T00:00:01+00:00",
    }]


@pytest.mark.asyncio
async def test_per_user_cap(conversation_log, temp_log_file):
    """Test that at most 10 entries are kept for one user, oldest dropped first."""
    for n in range(12):
        await conversation_log.record(make_entry("u1", n))

    records = read_records(temp_log_file)
    assert len(records) == 10
    assert [r["user"] for r in records] == [f"message {n}" for n in range(2, 12)]


@pytest.mark.asyncio
async def test_cap_does_not_touch_other_users(conversation_log, temp_log_file):
    """Test that pruning one user keeps everyone else's entries."""
    await conversation_log.record(make_entry("u2", 0))
    for n in range(1, 12):
        await conversation_log.record(make_entry("u1", n))
    await conversation_log.record(make_entry("u2", 12))

    records = read_records(temp_log_file)
    assert sum(1 for r in records if r["userId"] == "u1") == 10
    assert [r["user"] for r in records if r["userId"] == "u2"] == ["message 0", "message 12"]


@pytest.mark.asyncio
async def test_eviction_uses_oldest_timestamp(conversation_log, temp_log_file):
    """Test that the oldest entry by timestamp is evicted, not the first by position."""
    # Position order perturbed: the newest entry sits first in the array
    seeded = [make_entry("u1", 30)] + [make_entry("u1", n) for n in range(1, 10)]
    temp_log_file.write_text(json.dumps([e.to_dict() for e in seeded]))

    await conversation_log.record(make_entry("u1", 40))

    users = [r["user"] for r in read_records(temp_log_file)]
    assert len(users) == 10
    assert "message 1" not in users
    assert users[0] == "message 30"
    assert users[-1] == "message 40"


@pytest.mark.asyncio
async def test_missing_file_starts_empty(conversation_log):
    """Test that load on an absent file returns an empty list."""
    assert await conversation_log.load() == []


@pytest.mark.asyncio
async def test_corrupt_file_treated_as_empty(conversation_log, temp_log_file):
    """Test that malformed JSON is replaced by a fresh collection."""
    temp_log_file.write_text("{not json")

    result = await conversation_log.record(make_entry("u1", 1))

    assert result.ok
    assert len(read_records(temp_log_file)) == 1


@pytest.mark.asyncio
async def test_non_list_file_treated_as_empty(conversation_log, temp_log_file):
    """Test that a JSON object instead of an array starts a fresh collection."""
    temp_log_file.write_text('{"userId": "u1"}')

    await conversation_log.record(make_entry("u1", 1))

    assert len(read_records(temp_log_file)) == 1


@pytest.mark.asyncio
async def test_malformed_records_are_skipped(conversation_log, temp_log_file):
    """Test that records missing fields are dropped while valid ones survive."""
    temp_log_file.write_text(json.dumps([
        {"userId": "u2", "user": "kept", "response": "r", "timestamp": "2026-01-01T00:00:00+00:00"},
        {"userId": "u2"},
        "garbage",
    ]))

    await conversation_log.record(make_entry("u1", 1))

    records = read_records(temp_log_file)
    assert [r["user"] for r in records] == ["kept", "message 1"]


@pytest.mark.asyncio
async def test_concurrent_records_respect_cap(conversation_log, temp_log_file):
    """Test that overlapping writes in one process never exceed the cap."""
    await asyncio.gather(*(conversation_log.record(make_entry("u1", n)) for n in range(25)))

    records = read_records(temp_log_file)
    assert len(records) == 10


@pytest.mark.asyncio
async def test_write_failure_returns_status(tmp_path):
    """Test that an unwritable target yields a failed PersistResult instead of raising."""
    target = tmp_path / "blocked.json"
    target.mkdir()
    log = ConversationLog(path=str(target))

    result = await log.record(make_entry("u1", 1))

    assert result.ok is False
    assert result.error
