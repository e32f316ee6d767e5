"""Prompt rendering for chat turns and search meta-prompts."""
import json
from typing import Iterable, List, Sequence

from models.conversation import Turn
from models.search import SearchResult


def format_history(history: Iterable[Turn]) -> str:
    """Render past turns as alternating User/Assistant lines, oldest first."""
    return "\n".join(
        f"User: {turn.user}\nAssistant: {turn.response}"
        for turn in history
    )


def format_prompt(system_prompt: str, history: Sequence[Turn], user_text: str) -> str:
    """
    Build the completion prompt for a chat turn.

    Pure function: identical inputs always produce an identical string.

    Args:
        system_prompt: Fixed instruction block placed first
        history: Prior turns for this user, oldest first
        user_text: The new message, mention markup already stripped

    Returns:
        Prompt ending with an open "Assistant:" continuation marker
    """
    return (
        f"{system_prompt}\n\n"
        f"Previous conversation:\n{format_history(history)}\n\n"
        f"User: {user_text}\nAssistant:"
    )


def serialize_results(results: List[SearchResult]) -> str:
    return json.dumps([result.to_dict() for result in results], ensure_ascii=False)


def build_intent_prompt(query: str) -> str:
    return (
        "Analyze this search query and explain in ONE SHORT sentence "
        f"what the user is looking for: \"{query}\""
    )


def build_summary_prompt(results: List[SearchResult]) -> str:
    return (
        "Based on these search results, provide a brief and focused summary "
        "(under 900 characters) of the key information found: "
        f"{serialize_results(results)}"
    )


def build_explanation_prompt(query: str, results: List[SearchResult]) -> str:
    return (
        f"Based on these search results about \"{query}\", provide a detailed "
        f"explanation split into clear paragraphs: {serialize_results(results)}"
    )
