"""
Terminal client for the Autofound API.

Chats with one agent and exposes the other runner entry points as slash commands:

    /task <title>   run a one-off task with the agent
    /heartbeat      trigger a check-in now
    /reset          forget the local conversation
    exit | quit     leave the shell
"""

from __future__ import annotations

import logging
import signal
import time
from typing import (
    Any,
    Dict,
    List,
    Tuple,
    cast,
)

import httpx

from autofound.common import (
    AnsiColors,
    colored_print,
    print_tool_trace,
)
from autofound.config import settings

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Transport
# ---------------------------------------------------------------------------
def get_user_message() -> Tuple[str, bool]:
    """
    Read one line from standard input.

    Returns:
        Tuple of (user_input, success_flag)
        The success_flag is False if input couldn't be read (e.g., Ctrl+C)
    """
    # Ensure SIGINT breaks out of slow system calls such as read()
    signal.siginterrupt(signal.SIGINT, True)

    try:
        return input().strip(), True
    except (EOFError, KeyboardInterrupt):
        return "", False


def call_api(endpoint: str, data: Dict[str, Any], max_retries: int = 5) -> Dict[str, Any]:
    """POST *data* to the local API; failures come back as ``{"text": <error>}``."""
    api_url = f"http://localhost:{settings.API_PORT}{endpoint}"
    # One request may drive a full loop plus nested delegations
    timeout = settings.HTTP_TIMEOUT * settings.MAX_TOOL_ITERATIONS

    for attempt in range(max_retries):
        try:
            with httpx.Client(timeout=timeout) as client:
                response = client.post(api_url, json=data)
                response.raise_for_status()
                return cast(Dict[str, Any], response.json())
        except httpx.ConnectError as e:
            if attempt == max_retries - 1:
                logger.error("API connection error: %s", e)
                return {"text": f"Error connecting to API: {e}"}
            retry_delay = 0.5 * (2**attempt)
            logger.info(
                "API not ready yet, retrying in %.1f seconds (attempt %d/%d)...",
                retry_delay,
                attempt + 1,
                max_retries,
            )
            time.sleep(retry_delay)
        except httpx.HTTPStatusError as e:
            logger.error("API request error: %s", e)
            try:
                detail = e.response.json().get("detail", str(e))
            except ValueError:
                detail = str(e)
            return {"text": f"API error: {detail}"}
        except httpx.HTTPError as e:
            logger.error("API request error: %s", e)
            return {"text": f"Error connecting to API: {e}"}

    return {"text": f"Failed to connect to API after {max_retries} attempts"}


# ---------------------------------------------------------------------------
# Shell
# ---------------------------------------------------------------------------
def _run_command(agent_name: str, command: str, argument: str) -> None:
    if command == "/task":
        if not argument:
            colored_print("Usage: /task <title>", AnsiColors.RED)
            return
        outcome = call_api(f"/agents/{agent_name}/tasks", {"title": argument})
        print_tool_trace(outcome.get("tool_calls") or [])
        color = AnsiColors.YELLOW if outcome.get("success") else AnsiColors.RED
        colored_print(outcome.get("output") or outcome.get("text", ""), color)
    elif command == "/heartbeat":
        outcome = call_api(f"/agents/{agent_name}/heartbeat", {})
        print_tool_trace(outcome.get("tool_calls") or [])
        colored_print(outcome.get("text", ""), AnsiColors.GREY if outcome.get("idle") else AnsiColors.YELLOW)
    else:
        colored_print(f"Unknown command {command}", AnsiColors.RED)


def run_cli(agent_name: str, model: str | None = None) -> None:
    """Register *agent_name* with the API and chat with it until the user leaves."""
    profile: Dict[str, Any] = {"name": agent_name}
    if model:
        profile["model"] = model
    created = call_api("/agents", profile)
    if created.get("name") != agent_name:
        colored_print(f"⚠️ Failed to register agent: {created.get('text')}", AnsiColors.RED)
        return

    history: List[Dict[str, str]] = []
    colored_print(
        f"\n🔮 Autofound shell ({agent_name}, {created.get('model') or settings.DEFAULT_MODEL}) - "
        "/task, /heartbeat, /reset; 'exit' or Ctrl+C to leave",
        AnsiColors.GREEN,
    )
    while True:
        colored_print("\n🧑 You: ", AnsiColors.BLUE, end="")
        user_msg, ok = get_user_message()
        if not ok or user_msg.lower() in {"exit", "quit"}:
            break
        if not user_msg:
            continue

        if user_msg.startswith("/"):
            command, _, argument = user_msg.partition(" ")
            if command == "/reset":
                history.clear()
                colored_print("Conversation cleared.", AnsiColors.GREY)
            else:
                _run_command(agent_name, command, argument.strip())
            continue

        history.append({"role": "user", "content": user_msg})
        response = call_api(f"/agents/{agent_name}/chat", {"history": history})
        print_tool_trace(response.get("tool_calls") or [])

        reply = response.get("text", "No response from API")
        history.append({"role": "assistant", "content": reply})
        colored_print(f"🤖 {reply}", AnsiColors.YELLOW)


if __name__ == "__main__":
    run_cli("assistant")
