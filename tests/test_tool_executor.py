"""
Basic sanity tests for the tool executor.

Run with:
$ pytest -q
"""

from autofound.agent.tool_executor import execute_tool
from autofound.tools import (
    STATIC_TOOLS,
    ToolDefinition,
)


def _add(a: int, b: int) -> str:
    """Return the sum of two integers (used only for tests)."""

    return str(a + b)


ADD = ToolDefinition(
    name="add",
    description="Add two integers",
    parameters={"type": "object", "properties": {"a": {"type": "integer"}, "b": {"type": "integer"}}},
    executor=_add,
)


def test_execute_tool_success() -> None:
    """Executor should return the tool's string result when the tool is valid."""

    assert execute_tool("add", {"a": 2, "b": 3}, [ADD]) == "5"


def test_execute_tool_missing() -> None:
    """Executor should return an error string, not raise, for an unknown tool."""

    assert execute_tool("not_a_tool", {}, [ADD]) == 'Error: Unknown tool "not_a_tool"'


def test_execute_tool_bad_args() -> None:
    """Wrong arguments are reported back as text."""

    result = execute_tool("add", {"a": 2}, [ADD])  # missing 'b'
    assert result.startswith("Error executing add:")
    assert "'b'" in result


def test_execute_tool_executor_raises() -> None:
    """An exception inside the tool becomes 'Error executing <name>: <message>'."""

    def explode() -> str:
        raise ValueError("kaboom")

    tool = ToolDefinition("explode", "fails", {"type": "object", "properties": {}}, explode)
    assert execute_tool("explode", None, [tool]) == "Error executing explode: kaboom"


def test_execute_tool_falls_back_to_static_tools(monkeypatch) -> None:
    """Static tools are callable even when not in the resolved list."""

    monkeypatch.setitem(
        STATIC_TOOLS,
        "ping",
        ToolDefinition("ping", "pong", {"type": "object", "properties": {}}, lambda: "pong"),
    )
    assert execute_tool("ping", {}, []) == "pong"


def test_resolved_tool_shadows_static_tool() -> None:
    """The resolved list is consulted before the static map."""

    local = ToolDefinition("web_fetch", "stub", {"type": "object"}, lambda url: f"stub {url}")
    assert execute_tool("web_fetch", {"url": "http://x"}, [local]) == "stub http://x"


def test_non_string_results_are_stringified() -> None:
    tool = ToolDefinition("count", "count", {"type": "object"}, lambda: 3)
    assert execute_tool("count", {}, [tool]) == "3"
