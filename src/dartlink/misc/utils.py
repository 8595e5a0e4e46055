from time import time

from rich.console import Console
from rich.markup import escape

# Handles
cout = Console()
cerr = Console(stderr=True)


def time_now_ms() -> int:
    """Return time in milliseconds since the Epoch."""
    return int(time() * 1000)


def excerpt(text: str, limit: int = 200) -> str:
    """Return the first `limit` chars of untrusted text, escaped for Rich markup."""
    cut = text[:limit]
    return escape(cut) + ("..." if len(text) > limit else "")
