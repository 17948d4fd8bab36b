"""Small helpers shared by the runners and the terminal client."""

from enum import Enum
from typing import (
    Any,
    Iterable,
    Mapping,
)


class AnsiColors(Enum):
    """ANSI color codes for terminal output."""

    RED = "\033[91m"
    GREEN = "\033[92m"
    YELLOW = "\033[33m"
    BLUE = "\033[94m"
    GREY = "\033[90m"


def colored_print(text: str, color: AnsiColors, *args: Any, **kwargs: Any) -> None:
    """
    Print text in color.

    Args:
        text: The text to print
        color: The color to use (AnsiColors enum)
        args: Additional positional arguments for print
        kwargs: Additional keyword arguments for print
    """
    print(f"{color.value}{text}\033[0m", *args, **kwargs)


def excerpt(text: str, limit: int) -> str:
    """Cut *text* to *limit* chars, marking the cut with an ellipsis."""
    return text[:limit] + ("..." if len(text) > limit else "")


def print_tool_trace(calls: Iterable[Mapping[str, Any]], limit: int = 120) -> None:
    """Echo a loop's tool-call trace, one line per call."""
    for call in calls:
        colored_print(f"🔧 {call['tool']}({call.get('args') or ''})", AnsiColors.GREEN)
        if call.get("result"):
            colored_print(f"   ↳ {excerpt(call['result'], limit)}", AnsiColors.GREY)
