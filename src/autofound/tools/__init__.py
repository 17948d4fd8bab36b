"""
Tool registry for Autofound.

Tools come in two flavours:

* **Static tools** need no runtime context (web search, web fetch).  They are registered with the
  :func:`register_tool` decorator and are always available to :func:`execute_tool` as a fallback.
* **Context-bound tools** close over the user, the calling agent and the delegation depth
  (workspace files, memory, agent-to-agent messages).  They are produced by factories registered
  with :func:`register_tool_factory` and are built fresh for every loop invocation, so one agent's
  closures never leak into another agent's run.

Agents configure their tools with tool names or *skill pack* keys; :func:`resolve_tools` expands
the packs and silently drops names it cannot resolve.
"""

from __future__ import annotations

import logging
from dataclasses import (
    dataclass,
    field,
)
from typing import (
    TYPE_CHECKING,
    Any,
    Callable,
    Dict,
    Iterable,
    List,
    Mapping,
    Sequence,
    Tuple,
)

from autofound.config import settings
from autofound.core.schema import AgentProfile

if TYPE_CHECKING:
    from autofound.memory.workspace_store import WorkspaceStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ToolDefinition:
    """A model-visible tool: name, description, JSON-schema parameters and an executor."""

    name: str
    description: str
    parameters: Mapping[str, Any]
    executor: Callable[..., str] = field(repr=False, compare=False)

    def execute(self, args: Mapping[str, Any] | None = None) -> str:
        """Invoke the executor with *args* as keyword arguments."""
        return self.executor(**(args or {}))


@dataclass
class ToolContext:
    """Runtime context that context-bound tools close over."""

    user_id: str
    agent_name: str
    depth: int = 0
    max_depth: int = settings.MAX_AGENT_DEPTH
    workspace: "WorkspaceStore | None" = None
    # Returns every agent owned by *user_id*
    roster: Callable[[], Sequence[AgentProfile]] | None = None
    # (target, message, depth) -> final text of the nested loop
    delegate: Callable[[AgentProfile, str, int], str] | None = None


ToolFactory = Callable[[ToolContext], List[ToolDefinition]]

STATIC_TOOLS: Dict[str, ToolDefinition] = {}
"""Global registry of context-free tools."""

TOOL_FACTORIES: Dict[str, ToolFactory] = {}
"""Tool name -> factory producing that tool (and its siblings) for a given context."""

ALWAYS_ON_FACTORIES: List[ToolFactory] = []
"""Factories whose tools every agent gets, whatever it requested."""


def register_tool(name: str, description: str, parameters: Mapping[str, Any]) -> Callable:
    """
    Register a context-free tool function under *name*.

    The function is registered as a decorator, so it can be used like this:
        @register_tool("my_tool", "Does something", {"type": "object", "properties": {}})
        def my_tool_function(arg1, arg2):
            return "result"

    Parameters
    ----------
    name: str
        The name the model uses to call the tool.  Must be unique.
    description: str
        Natural-language description shown to the model.
    parameters: Mapping
        JSON schema of the keyword arguments.

    Raises
    ------
    ValueError
        If a tool with the same name is already registered.
    """
    if name in STATIC_TOOLS or name in TOOL_FACTORIES:
        raise ValueError(f"Tool '{name}' is already registered.")
    logger.debug("Registering tool '%s'", name)

    def wrapper(fn: Callable[..., str]) -> Callable[..., str]:
        STATIC_TOOLS[name] = ToolDefinition(name, description, parameters, fn)
        return fn

    return wrapper


def register_tool_factory(*names: str, always: bool = False) -> Callable:
    """Register a factory that builds the context-bound tools called *names*."""
    for name in names:
        if name in STATIC_TOOLS or name in TOOL_FACTORIES:
            raise ValueError(f"Tool '{name}' is already registered.")

    def wrapper(fn: ToolFactory) -> ToolFactory:
        for name in names:
            TOOL_FACTORIES[name] = fn
        if always:
            ALWAYS_ON_FACTORIES.append(fn)
        return fn

    return wrapper


# ---------------------------------------------------------------------------
# Skill packs
# ---------------------------------------------------------------------------
SKILL_PACKS: Dict[str, Tuple[str, ...]] = {
    "web-research": ("web_search", "web_fetch"),
    "communication": ("send_message_to_agent",),
    "file-management": ("read_file", "write_file", "list_files", "delete_file"),
}


def tool_names_from_skills(keys: Iterable[str]) -> List[str]:
    """Expand skill-pack keys into tool names; anything that isn't a pack key passes through."""
    names: List[str] = []
    for key in keys:
        for name in SKILL_PACKS.get(key, (key,)):
            if name not in names:
                names.append(name)
    return names


def all_tool_names() -> List[str]:
    """Every tool name reachable through a skill pack."""
    return tool_names_from_skills(SKILL_PACKS)


def resolve_tools(names: Iterable[str], context: ToolContext) -> List[ToolDefinition]:
    """
    Resolve tool names and skill-pack keys into invocable tools bound to *context*.

    Unknown names are dropped (logged at debug level) rather than failing the whole run.  The
    result is deduplicated by tool name.
    """
    built: Dict[int, List[ToolDefinition]] = {}

    def _build(factory: ToolFactory) -> List[ToolDefinition]:
        if id(factory) not in built:
            built[id(factory)] = factory(context)
        return built[id(factory)]

    resolved: Dict[str, ToolDefinition] = {}
    for name in tool_names_from_skills(names):
        if name in resolved:
            continue
        if name in STATIC_TOOLS:
            resolved[name] = STATIC_TOOLS[name]
        elif name in TOOL_FACTORIES:
            for tool in _build(TOOL_FACTORIES[name]):
                if tool.name == name:
                    resolved[name] = tool
        else:
            logger.debug("Dropping unknown tool '%s' for agent '%s'", name, context.agent_name)

    for factory in ALWAYS_ON_FACTORIES:
        for tool in _build(factory):
            resolved.setdefault(tool.name, tool)

    return list(resolved.values())


def tools_for_agent(agent: AgentProfile, context: ToolContext) -> List[ToolDefinition]:
    """Tools for *agent*; an agent that configured nothing gets every skill-pack tool."""
    return resolve_tools(agent.tools or all_tool_names(), context)


# Built-in tools register themselves on import
from autofound.tools import (  # noqa: E402  pylint: disable=wrong-import-position
    delegation,
    web,
    workspace,
)

__all__ = [
    "ALWAYS_ON_FACTORIES",
    "SKILL_PACKS",
    "STATIC_TOOLS",
    "TOOL_FACTORIES",
    "ToolContext",
    "ToolDefinition",
    "all_tool_names",
    "delegation",
    "register_tool",
    "register_tool_factory",
    "resolve_tools",
    "tool_names_from_skills",
    "tools_for_agent",
    "web",
    "workspace",
]
