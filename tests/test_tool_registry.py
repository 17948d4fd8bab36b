"""Tests for skill-pack expansion and tool resolution."""

import pytest

from autofound.core.schema import AgentProfile
from autofound.memory.workspace_store import LocalWorkspaceStore
from autofound.tools import (
    STATIC_TOOLS,
    ToolContext,
    all_tool_names,
    register_tool,
    resolve_tools,
    tool_names_from_skills,
    tools_for_agent,
)


def test_skill_packs_expand_and_dedupe() -> None:
    names = tool_names_from_skills(["web-research", "web_fetch", "communication"])
    assert names == ["web_search", "web_fetch", "send_message_to_agent"]


def test_all_tool_names_covers_every_pack() -> None:
    assert set(all_tool_names()) == {
        "web_search",
        "web_fetch",
        "send_message_to_agent",
        "read_file",
        "write_file",
        "list_files",
        "delete_file",
    }


def test_unknown_names_are_dropped() -> None:
    """Resolution is lenient: a typo does not fail the run."""
    tools = resolve_tools(["web_serch", "web_fetch", "no-such-pack"], ToolContext("u", "a"))
    assert [t.name for t in tools] == ["web_fetch"]


def test_static_tools_are_shared_instances() -> None:
    tools = resolve_tools(["web-research"], ToolContext("u", "a"))
    assert tools[0] is STATIC_TOOLS["web_search"]


def test_context_tools_require_a_workspace() -> None:
    tools = resolve_tools(["file-management"], ToolContext("u", "a"))
    assert tools == []


def test_memory_tools_always_present_with_workspace(tmp_path) -> None:
    context = ToolContext("u", "a", workspace=LocalWorkspaceStore(tmp_path))
    names = [t.name for t in resolve_tools(["web_fetch"], context)]
    assert names == ["web_fetch", "memory_read", "memory_write"]


def test_context_bound_tools_are_fresh_per_context(tmp_path) -> None:
    """Two agents never share a closure."""
    store = LocalWorkspaceStore(tmp_path)
    first = resolve_tools(["write_file"], ToolContext("u", "alice", workspace=store))[0]
    second = resolve_tools(["write_file"], ToolContext("u", "bob", workspace=store))[0]
    assert first is not second

    first.execute({"path": "note.txt", "content": "from alice"})
    assert store.read("u/agents/alice/note.txt") == "from alice"
    assert store.read("u/agents/bob/note.txt") is None


def test_agent_without_tools_gets_everything(tmp_path) -> None:
    context = ToolContext("u", "a", workspace=LocalWorkspaceStore(tmp_path))
    names = {t.name for t in tools_for_agent(AgentProfile(name="a"), context)}
    assert set(all_tool_names()) <= names


def test_duplicate_registration_is_rejected() -> None:
    with pytest.raises(ValueError):
        register_tool("web_search", "dup", {"type": "object"})
