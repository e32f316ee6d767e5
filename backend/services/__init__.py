"""Services for Yapper Bot."""
from .prompt_formatter import format_prompt
from .llm_client import LLMClient, CompletionResult, CompletionError
from .conversation_log import ConversationLog
from .conversation_manager import ConversationStore
from .result_extractor import ResultExtractor
from .search_service import WebSearchService, SearchError
from .message_delivery import MessageDelivery, split_paragraphs
from .event_router import EventRouter

__all__ = ['format_prompt', 'LLMClient', 'CompletionResult', 'CompletionError', 'ConversationLog', 'ConversationStore', 'ResultExtractor', 'WebSearchService', 'SearchError', 'MessageDelivery', 'split_paragraphs', 'EventRouter']
