"""Main entry point for Yapper Bot."""
import logging
import sys

import discord
from discord import app_commands

from config import DISCORD_TOKEN, LOG_LEVEL, LOG_FORMAT, STORAGE_PATH
from logger import setup_logging
from services.conversation_log import ConversationLog
from services.conversation_manager import ConversationStore
from services.event_router import EventRouter
from services.llm_client import LLMClient
from services.message_delivery import MessageDelivery
from services.search_service import WebSearchService

logger = logging.getLogger(__name__)


class YapperBot(discord.Client):
    """Discord client that forwards events to an EventRouter."""

    def __init__(self, router: EventRouter):
        intents = discord.Intents.default()
        intents.message_content = True
        intents.dm_messages = True
        super().__init__(intents=intents)

        self.router = router
        self.tree = app_commands.CommandTree(self)
        self._register_commands()

    def _register_commands(self) -> None:
        router = self.router

        @self.tree.command(name="search", description="make a search query (IT YAPS A LOT)")
        @app_commands.describe(query="What would you like to search for?")
        async def search(interaction: discord.Interaction, query: str):
            await router.handle_command("search", interaction, query=query)

        @self.tree.command(name="help", description="Show all available commands and features")
        async def help_command(interaction: discord.Interaction):
            await router.handle_command("help", interaction)

    async def on_ready(self) -> None:
        logger.info(f"Bot is ready! Logged in as {self.user}")
        try:
            synced = await self.tree.sync()
            logger.info(f"Registered {len(synced)} application commands")
        except discord.HTTPException as e:
            logger.error(f"Error registering commands: {e}", exc_info=True)

    async def on_message(self, message: discord.Message) -> None:
        await self.router.handle_message(message, self.user)

    async def on_error(self, event_method: str, *args, **kwargs) -> None:
        logger.error(f"Discord client error in {event_method}", exc_info=True)


def build_router() -> EventRouter:
    """Initialize services and wire them into an EventRouter."""
    logger.info("Initializing Yapper Bot services...")

    llm_client = LLMClient()
    store = ConversationStore(conversation_log=ConversationLog(STORAGE_PATH))
    search_service = WebSearchService(llm_client)
    delivery = MessageDelivery()

    logger.info("All services initialized successfully")
    return EventRouter(
        store=store,
        llm_client=llm_client,
        search_service=search_service,
        delivery=delivery
    )


def run() -> None:
    """Start the bot; exits with status 1 if the token is missing or rejected."""
    setup_logging(LOG_LEVEL, json_format=LOG_FORMAT.lower() == "json")

    if not DISCORD_TOKEN:
        logger.critical("DISCORD_TOKEN is not set; cannot start")
        sys.exit(1)

    bot = YapperBot(build_router())
    try:
        bot.run(DISCORD_TOKEN, log_handler=None)
    except discord.LoginFailure as e:
        logger.critical(f"Discord rejected the bot token: {e}")
        sys.exit(1)


if __name__ == "__main__":
    run()
