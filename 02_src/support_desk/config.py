"""Project-level configuration and path helpers."""

import os
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
LOGS_DIR = PROJECT_ROOT / "04_logs"
DEFAULT_LOG_PATH = LOGS_DIR / "app.log"

DEFAULT_ANSWER_MODEL = "claude-sonnet-4-5"
DEFAULT_ANALYSIS_MODEL = "claude-sonnet-4-5"
DEFAULT_MAX_TOKENS = 1024
DEFAULT_WEB_SEARCH_MAX_USES = 5
DEFAULT_BRAND = "SLT-MOBITEL"

# Upload picker filter: PDFs and the image formats the backend can read
ACCEPTED_MIME_TYPES = (
    "application/pdf",
    "image/jpeg",
    "image/png",
    "image/gif",
    "image/webp",
)

QUICK_ACTIONS = [
    {"label": "Data Plans", "query": "What are your data plans?"},
    {"label": "Pay My Bill", "query": "How can I pay my bill online?"},
    {"label": "Fibre Fault", "query": "My fibre connection is down. What should I check?"},
    {"label": "PEO TV", "query": "What PEO TV packages are available?"},
]


def get_brand() -> str:
    """Brand name used in prompts and the greeting."""
    return os.getenv("SUPPORT_BRAND", DEFAULT_BRAND)


def greeting_text(brand: str | None = None) -> str:
    """Seed message shown at the top of every new transcript."""
    brand = brand or get_brand()
    return (
        f"Ayubowan! I'm now connected to the {brand} live knowledge base. \n\n"
        "You can ask me questions about our services, or **upload a PDF/Bill** "
        "using the clip icon for me to analyze."
    )


def env_int(name: str, default: int) -> int:
    """Read an integer setting from the environment."""
    value = os.getenv(name)
    if not value:
        return default
    try:
        return int(value)
    except ValueError as e:
        raise ValueError(f"{name} must be an integer, got {value!r}") from e
