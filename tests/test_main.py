"""Tests for bot startup and platform wiring."""
import sys
from pathlib import Path

# Add backend to path
sys.path.insert(0, str(Path(__file__).parent.parent / "backend"))

import discord
import pytest
from unittest.mock import AsyncMock, Mock, patch

import main
from services.event_router import EventRouter


@pytest.fixture
def router():
    router = Mock()
    router.handle_message = AsyncMock()
    router.handle_command = AsyncMock()
    return router


def test_build_router_wires_services(tmp_path):
    with patch('main.STORAGE_PATH', str(tmp_path / "history.json")):
        router = main.build_router()

    assert isinstance(router, EventRouter)
    assert router.store.conversation_log.path == tmp_path / "history.json"
    assert router.search_service.llm_client is router.llm_client


def test_bot_registers_commands(router):
    """Test that both slash commands are registered on the command tree."""
    bot = main.YapperBot(router)

    search = bot.tree.get_command("search")
    assert search is not None
    assert [p.name for p in search.parameters] == ["query"]
    assert search.parameters[0].required
    assert bot.tree.get_command("help") is not None
    assert bot.intents.message_content


@pytest.mark.asyncio
async def test_on_message_delegates_to_router(router):
    bot = main.YapperBot(router)
    message = Mock()

    await bot.on_message(message)

    router.handle_message.assert_awaited_once_with(message, bot.user)


def test_run_exits_without_token():
    """Test that a missing token logs fatally and exits non-zero."""
    with patch('main.DISCORD_TOKEN', None), patch('main.setup_logging'), \
            patch('main.YapperBot') as bot_class:
        with pytest.raises(SystemExit) as exc_info:
            main.run()

    assert exc_info.value.code == 1
    bot_class.assert_not_called()


def test_run_exits_on_rejected_token():
    """Test that a login failure exits non-zero instead of crashing."""
    with patch('main.DISCORD_TOKEN', "bad-token"), patch('main.setup_logging'), \
            patch('main.build_router'), patch('main.YapperBot') as bot_class:
        bot_class.return_value.run.side_effect = discord.LoginFailure("Improper token has been passed.")

        with pytest.raises(SystemExit) as exc_info:
            main.run()

    assert exc_info.value.code == 1
    bot_class.return_value.run.assert_called_once_with("bad-token", log_handler=None)
