"""Routes mention-messages and slash commands through the bot pipeline."""
import logging
import re
from typing import Any, List

import discord

from models.search import SearchResult
from services.conversation_manager import ConversationStore
from services.llm_client import LLMClient
from services.message_delivery import MessageDelivery, split_paragraphs
from services.prompt_formatter import format_prompt, build_explanation_prompt
from services.search_service import WebSearchService, SearchError
from config import SYSTEM_PROMPT, ERROR_SENTINEL, EMBED_COLOR, EMBED_DESCRIPTION_LIMIT

logger = logging.getLogger(__name__)

MENTION_PATTERN = re.compile(r"<@!?\d+>")

SEARCH_ERROR_REPLY = "Sorry, I encountered an error while searching. Please try again later."
BOT_NAME = "Yapper"
FOOTER_TEXT = f"{BOT_NAME} Bot"
FIELD_VALUE_LIMIT = 1024


def clean_message(content: str) -> str:
    """Strip every user mention token and surrounding whitespace."""
    return MENTION_PATTERN.sub("", content).strip()


def mentions_user(content: str, user_id: int) -> bool:
    return f"<@{user_id}>" in content or f"<@!{user_id}>" in content


class EventRouter:
    """
    Dispatches inbound platform events to the conversation and search services.

    Each handler invocation is independent; handlers never raise to the
    platform client.
    """

    def __init__(
        self,
        store: ConversationStore,
        llm_client: LLMClient,
        search_service: WebSearchService,
        delivery: MessageDelivery,
        system_prompt: str = SYSTEM_PROMPT
    ):
        self.store = store
        self.llm_client = llm_client
        self.search_service = search_service
        self.delivery = delivery
        self.system_prompt = system_prompt
        self._commands = {
            "search": self.handle_search,
            "help": self.handle_help,
        }

    async def handle_message(self, message: discord.Message, bot_user: discord.abc.User) -> None:
        """
        Answer a message that mentions the bot.

        Messages from bots, messages without the bot's mention and messages
        that are empty once mentions are removed are ignored.
        """
        if message.author.bot:
            return
        if bot_user is None or not mentions_user(message.content, bot_user.id):
            return

        user_text = clean_message(message.content)
        if not user_text:
            return

        user_id = str(message.author.id)
        logger.info(f"Processing mention from user {user_id}: {user_text[:100]}")

        try:
            async with message.channel.typing():
                history = self.store.get(user_id)
                prompt = format_prompt(self.system_prompt, history, user_text)
                response = await self.llm_client.complete(prompt)
                await self.store.append(user_id, user_text, response)

            await self.delivery.deliver(response, message)
        except Exception as e:
            logger.error(f"Error processing message from user {user_id}: {e}", exc_info=True)
            try:
                await message.reply(content=ERROR_SENTINEL)
            except Exception as reply_error:
                logger.error(f"Could not send error reply: {reply_error}", exc_info=True)

    async def handle_command(self, name: str, interaction: discord.Interaction, **options: Any) -> None:
        """Dispatch a slash command by name."""
        handler = self._commands.get(name)
        if handler is None:
            logger.warning(f"Ignoring unknown command: {name}")
            return
        await handler(interaction, **options)

    async def handle_search(self, interaction: discord.Interaction, query: str) -> None:
        """
        Run a web search and post the explanation as a sequence of embeds.

        The reply is deferred first because search plus two completions can
        outlast the platform's initial response window.
        """
        await interaction.response.defer()

        try:
            search_response = await self.search_service.search(query)

            summary = await self.llm_client.complete(
                build_explanation_prompt(query, search_response.results)
            )

            await interaction.edit_original_response(
                embed=self._build_title_embed(query, search_response.intent, search_response.results)
            )

            paragraphs = split_paragraphs(summary, EMBED_DESCRIPTION_LIMIT)
            total = len(paragraphs)
            for index, paragraph in enumerate(paragraphs, start=1):
                if index > 1:
                    await self.delivery.pause()
                embed = discord.Embed(color=EMBED_COLOR, description=paragraph)
                embed.set_footer(text=f"Part {index}/{total}")
                await interaction.followup.send(embed=embed)

        except SearchError as e:
            logger.error(f"Search command failed ({e.code}): {e.message}")
            await self._report_search_failure(interaction)
        except Exception as e:
            logger.error(f"Search command error: {e}", exc_info=True)
            await self._report_search_failure(interaction)

    async def handle_help(self, interaction: discord.Interaction) -> None:
        """Reply with the static usage reference."""
        await interaction.response.send_message(embed=build_help_embed())

    async def _report_search_failure(self, interaction: discord.Interaction) -> None:
        try:
            await interaction.edit_original_response(content=SEARCH_ERROR_REPLY, embed=None)
        except Exception as e:
            logger.error(f"Could not report search failure: {e}", exc_info=True)

    @staticmethod
    def _build_title_embed(query: str, intent: str, results: List[SearchResult]) -> discord.Embed:
        embed = discord.Embed(
            color=EMBED_COLOR,
            title=f"🔍 Search: {query}"[:256],
            description=intent[:EMBED_DESCRIPTION_LIMIT] or None,
            timestamp=discord.utils.utcnow()
        )

        links = "\n".join(f"• [{result.title}]({result.url})" for result in results)
        if links:
            if len(links) > FIELD_VALUE_LIMIT:
                links = links[:FIELD_VALUE_LIMIT - 1] + "…"
            embed.add_field(name="Top results", value=links, inline=False)

        embed.set_footer(text=FOOTER_TEXT)
        return embed


def build_help_embed() -> discord.Embed:
    embed = discord.Embed(color=EMBED_COLOR, title=f"🤖 {BOT_NAME} Bot Help")
    embed.add_field(
        name="📝 Basic Usage",
        value=f"Just mention me (@{BOT_NAME}) followed by your message!",
        inline=False
    )
    embed.add_field(
        name="🔍 Search Command",
        value="`/search query` - Search the web and get detailed results",
        inline=False
    )
    embed.add_field(
        name="🧮 Math",
        value="Ask me any math question and I'll give you the answer",
        inline=False
    )
    embed.add_field(
        name="🔥 Roast Mode",
        value='Type "roast me" to get roasted (if you dare)',
        inline=False
    )
    embed.add_field(
        name="💭 Memory",
        value="I remember our last 10 messages for context",
        inline=False
    )
    embed.add_field(
        name="📚 Examples",
        value=(
            f"• @{BOT_NAME} what is Python?\n"
            f"• @{BOT_NAME} 2+2\n"
            "• /search latest tech news\n"
            f"• @{BOT_NAME} roast me"
        ),
        inline=False
    )
    embed.set_footer(text=FOOTER_TEXT)
    return embed
