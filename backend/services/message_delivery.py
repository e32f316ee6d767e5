"""Paragraph-aware chunking and paced delivery of bot replies."""
import asyncio
import logging
import re
from typing import Awaitable, Callable, List

import discord

from config import PACING_DELAY, SINGLE_MESSAGE_LIMIT, DISCORD_MESSAGE_LIMIT

logger = logging.getLogger(__name__)

PARAGRAPH_BREAK = re.compile(r"\n\n+")

# Replies never ping the author of the message being answered
NO_REPLY_PING = discord.AllowedMentions(replied_user=False)


def split_paragraphs(content: str, max_length: int = DISCORD_MESSAGE_LIMIT) -> List[str]:
    """
    Split text on blank lines into trimmed, non-empty paragraphs.

    Paragraphs longer than `max_length` are cut further at the last newline
    or space before the limit (hard cut if there is none). Order is preserved.
    """
    parts = []
    for paragraph in PARAGRAPH_BREAK.split(content):
        paragraph = paragraph.strip()
        if paragraph:
            parts.extend(_split_long(paragraph, max_length))
    return parts


def _split_long(text: str, max_length: int) -> List[str]:
    chunks = []
    remaining = text
    while len(remaining) > max_length:
        window = remaining[:max_length]
        split_at = max(window.rfind("\n"), window.rfind(" "))
        if split_at <= 0:
            split_at = max_length

        chunk = remaining[:split_at].strip()
        if chunk:
            chunks.append(chunk)
        remaining = remaining[split_at:].strip()

    if remaining:
        chunks.append(remaining)
    return chunks


class MessageDelivery:
    """Sends long responses as a paced sequence of replies."""

    def __init__(
        self,
        pacing_delay: float = PACING_DELAY,
        single_message_limit: int = SINGLE_MESSAGE_LIMIT,
        max_message_length: int = DISCORD_MESSAGE_LIMIT,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep
    ):
        """
        Args:
            pacing_delay: Seconds to wait between consecutive replies
            single_message_limit: Max length for sending a one-paragraph reply whole
            max_message_length: Platform hard limit per message
            sleep: Awaitable sleep, replaceable in tests
        """
        self.pacing_delay = pacing_delay
        self.single_message_limit = single_message_limit
        self.max_message_length = max_message_length
        self._sleep = sleep

    async def pause(self) -> None:
        """Wait the pacing delay between two outbound sends."""
        await self._sleep(self.pacing_delay)

    async def deliver(self, content: str, message) -> int:
        """
        Reply to `message` with `content`, split by paragraph when needed.

        A single short paragraph goes out as one reply. Anything else becomes
        one reply per paragraph, in source order, with a pause between sends.

        Args:
            content: Response text
            message: Platform message exposing ``await reply(content=..., allowed_mentions=...)``

        Returns:
            Number of replies sent
        """
        if not content or not content.strip():
            logger.warning("Skipping delivery of empty response")
            return 0

        raw_paragraphs = PARAGRAPH_BREAK.split(content)
        if len(raw_paragraphs) == 1 and len(content) <= self.single_message_limit:
            await message.reply(content=content, allowed_mentions=NO_REPLY_PING)
            return 1

        parts = split_paragraphs(content, self.max_message_length)
        for index, part in enumerate(parts):
            if index > 0:
                await self.pause()
            await message.reply(content=part, allowed_mentions=NO_REPLY_PING)

        logger.debug(f"Delivered response in {len(parts)} parts")
        return len(parts)
