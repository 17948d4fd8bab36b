"""Tests for the send_message_to_agent tool."""

from typing import (
    List,
    Tuple,
)

from autofound.core.schema import AgentProfile
from autofound.tools import (
    ToolContext,
    resolve_tools,
)

ROSTER = [
    AgentProfile(name="Alice", role="ceo"),
    AgentProfile(name="Bob", role="researcher"),
    AgentProfile(name="Carol", role="writer", status="paused"),
]


def _tool(depth: int = 0, caller: str = "Alice", roster=None, delegate=None):
    seen: List[Tuple[str, str, int]] = []
    roster_calls: List[int] = []

    def _roster():
        roster_calls.append(1)
        return ROSTER if roster is None else roster

    def _delegate(target: AgentProfile, message: str, next_depth: int) -> str:
        seen.append((target.name, message, next_depth))
        return f"{target.name} says hi"

    context = ToolContext(
        user_id="u",
        agent_name=caller,
        depth=depth,
        roster=_roster,
        delegate=delegate or _delegate,
    )
    (tool,) = resolve_tools(["send_message_to_agent"], context)
    return tool, seen, roster_calls


def test_depth_ceiling_refuses_without_side_effects() -> None:
    tool, seen, roster_calls = _tool(depth=3)
    result = tool.execute({"agent_name": "Bob", "message": "help"})

    assert result == "Error: Maximum agent-to-agent depth (3) reached. Cannot delegate further."
    assert seen == []
    assert roster_calls == []


def test_depth_ceiling_ignores_target_validity() -> None:
    tool, seen, _ = _tool(depth=5)
    result = tool.execute({"agent_name": "nobody", "message": "help"})
    assert result.startswith("Error: Maximum agent-to-agent depth (3)")
    assert seen == []


def test_self_delegation_is_refused_case_insensitively() -> None:
    tool, seen, _ = _tool(caller="Alice")
    assert tool.execute({"agent_name": "aLiCe", "message": "x"}) == (
        "Error: An agent cannot send a message to itself."
    )
    assert seen == []


def test_unknown_target_lists_other_agents() -> None:
    tool, _, _ = _tool()
    assert tool.execute({"agent_name": "Dave", "message": "x"}) == (
        'Error: Agent "Dave" not found. Available agents: Bob, Carol'
    )


def test_unknown_target_with_empty_roster() -> None:
    tool, _, _ = _tool(roster=[AgentProfile(name="Alice")])
    assert tool.execute({"agent_name": "Dave", "message": "x"}).endswith("Available agents: none")


def test_inactive_target_is_refused() -> None:
    tool, seen, _ = _tool()
    assert tool.execute({"agent_name": "carol", "message": "x"}) == (
        'Error: Agent "Carol" is not active (status: paused).'
    )
    assert seen == []


def test_delegation_increments_depth_and_returns_nested_text() -> None:
    tool, seen, _ = _tool(depth=1)
    assert tool.execute({"agent_name": "bob", "message": "research x"}) == "Bob says hi"
    assert seen == [("Bob", "research x", 2)]


def test_nested_failure_becomes_text() -> None:
    def failing(target, message, depth):
        raise RuntimeError("Anthropic 401: bad key")

    tool, _, _ = _tool(delegate=failing)
    assert tool.execute({"agent_name": "Bob", "message": "x"}) == (
        'Error communicating with agent "Bob": Anthropic 401: bad key'
    )


def test_unbound_context_reports_unavailable() -> None:
    (tool,) = resolve_tools(["send_message_to_agent"], ToolContext("u", "Alice"))
    assert tool.execute({"agent_name": "Bob", "message": "x"}).startswith("Error:")
