"""Configuration management for Yapper Bot."""
import os
import logging
from pathlib import Path
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# Discord
DISCORD_TOKEN = os.getenv("DISCORD_TOKEN")

# Logging Configuration
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FORMAT = os.getenv("LOG_FORMAT", "text")  # "text" or "json"

# Model Configuration
OLLAMA_API_URL = os.getenv("OLLAMA_API_URL", "http://localhost:11434/api/generate")
OLLAMA_MODEL = os.getenv("OLLAMA_MODEL", "llama3.2:3b")
COMPLETION_TIMEOUT = float(os.getenv("COMPLETION_TIMEOUT", "120"))  # seconds
ERROR_SENTINEL = "Error occurred."

# Conversation Configuration
MAX_HISTORY_LENGTH = 10
STORAGE_PATH = os.getenv(
    "STORAGE_PATH",
    str(Path(__file__).parent / "conversation_history.json")
)

# Search Configuration
SEARCH_URL = os.getenv("SEARCH_URL", "https://html.duckduckgo.com/html/")
SEARCH_TIMEOUT = float(os.getenv("SEARCH_TIMEOUT", "15"))  # seconds
MAX_SEARCH_RESULTS = 5
SEARCH_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    ),
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.5",
    "Referer": "https://duckduckgo.com/",
}

# Delivery Configuration
SINGLE_MESSAGE_LIMIT = 1500  # characters
DISCORD_MESSAGE_LIMIT = 2000
EMBED_DESCRIPTION_LIMIT = 4096
PACING_DELAY = 0.5  # seconds between consecutive replies
EMBED_COLOR = 0x0099FF

SYSTEM_PROMPT = """You are Yapper, a blunt, no-nonsense AI assistant. Answer questions fully and directly. Follow the rules below:

RULES:
. Give ONE response only
. Try to make your responses as short as possible, but not too short.
. Math questions = numbers only
. No commentary
. No personality
. Remember last 10 messages only
. Roast ONLY if user types "roast me". Roast really hard."""

# Logging Configuration
logging.basicConfig(
    level=getattr(logging, LOG_LEVEL),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
