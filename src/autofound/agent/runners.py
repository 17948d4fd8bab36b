"""
Runners: the callers of the tool-use loop.

A runner resolves an agent's configuration (model, provider, key, tools) and turns the loop's
outcome into something the surrounding application can store.  Four entry points exist:

* :meth:`AgentRunner.chat` - answer the latest user message of a conversation.
* :meth:`AgentRunner.execute_task` - run one task to completion.
* :meth:`AgentRunner.heartbeat` - the scheduled check-in (scheduling itself lives elsewhere).
* :meth:`AgentRunner.agent_to_agent` - the nested run behind ``send_message_to_agent``.

Storage, credentials and the agent roster are injected collaborators.
"""

from __future__ import annotations

import logging
from datetime import (
    datetime,
    timezone,
)
from functools import partial
from typing import (
    Dict,
    List,
    Optional,
    Protocol,
    Sequence,
)

import httpx
from pydantic import (
    BaseModel,
    Field,
)

from autofound.agent.agent_loop import run_agent_loop
from autofound.common import excerpt
from autofound.config import settings
from autofound.core.errors import (
    AgentNotFoundError,
    MissingCredentialsError,
    ProviderError,
)
from autofound.core.schema import (
    AgentProfile,
    ChatMessage,
    LoopResult,
    Provider,
    ToolCallRecord,
    provider_for_model,
)
from autofound.memory.run_log import (
    RunLog,
    RunRecord,
)
from autofound.memory.workspace_store import WorkspaceStore
from autofound.tools import (
    ToolContext,
    tools_for_agent,
)
from autofound.tools.workspace import workspace_base

logger = logging.getLogger(__name__)

HEARTBEAT_IDLE_REPLY = "All clear, standing by."


# ---------------------------------------------------------------------------
# Collaborators
# ---------------------------------------------------------------------------
class AgentDirectory(Protocol):
    """Roster of agents per user."""

    def list_agents(self, user_id: str) -> List[AgentProfile]:
        """Every agent owned by *user_id*."""

    def get_agent(self, user_id: str, name: str) -> Optional[AgentProfile]:
        """Case-insensitive lookup of one agent."""


class CredentialStore(Protocol):
    """Supplies raw (already decrypted) provider API keys."""

    def api_key(self, user_id: str, provider: Provider) -> Optional[str]:
        """Return the key *user_id* configured for *provider*, if any."""


class InMemoryAgentDirectory:
    """:class:`AgentDirectory` kept in a dict; enough for the API and tests."""

    def __init__(self) -> None:
        self._agents: Dict[str, Dict[str, AgentProfile]] = {}

    def add(self, user_id: str, agent: AgentProfile) -> AgentProfile:
        self._agents.setdefault(user_id, {})[agent.name.lower()] = agent
        return agent

    def list_agents(self, user_id: str) -> List[AgentProfile]:
        return list(self._agents.get(user_id, {}).values())

    def get_agent(self, user_id: str, name: str) -> Optional[AgentProfile]:
        return self._agents.get(user_id, {}).get(name.lower())


class SettingsCredentialStore:
    """Serves the server-wide keys from :mod:`autofound.config` to every user."""

    def api_key(self, user_id: str, provider: Provider) -> Optional[str]:
        key = getattr(settings, f"{provider.value.upper()}_API_KEY", None)
        return key.strip() if key else None


# ---------------------------------------------------------------------------
# Outcomes
# ---------------------------------------------------------------------------
class TaskOutcome(BaseModel):
    success: bool
    output: str
    tool_calls: List[ToolCallRecord] = Field(default_factory=list)


class PendingTask(BaseModel):
    title: str
    description: Optional[str] = None
    status: str = "pending"


class HeartbeatOutcome(BaseModel):
    text: str
    idle: bool
    tool_calls: List[ToolCallRecord] = Field(default_factory=list)


def is_idle(text: str) -> bool:
    """True when a heartbeat reply says nothing needed attention."""
    lowered = text.lower()
    return "all clear" in lowered and "standing by" in lowered


def task_prompt(title: str, description: Optional[str] = None) -> str:
    return f"Task: {title}" + (f"\n\nDetails: {description}" if description else "")


# ---------------------------------------------------------------------------
# Runner
# ---------------------------------------------------------------------------
class AgentRunner:
    """Runs agents owned by users through the tool-use loop."""

    def __init__(
        self,
        directory: AgentDirectory,
        credentials: CredentialStore,
        workspace: WorkspaceStore | None = None,
        run_log: RunLog | None = None,
        *,
        client: httpx.Client | None = None,
        max_iterations: int | None = None,
        max_depth: int | None = None,
    ) -> None:
        self.directory = directory
        self.credentials = credentials
        self.workspace = workspace
        self.run_log = run_log
        self.client = client
        self.max_iterations = settings.MAX_TOOL_ITERATIONS if max_iterations is None else max_iterations
        self.max_depth = settings.MAX_AGENT_DEPTH if max_depth is None else max_depth

    # ------------------------------------------------------------------ #
    # Helpers
    # ------------------------------------------------------------------ #
    def _agent(self, user_id: str, name: str) -> AgentProfile:
        agent = self.directory.get_agent(user_id, name)
        if agent is None:
            raise AgentNotFoundError(f'Agent "{name}" not found.')
        return agent

    def _run(
        self,
        user_id: str,
        agent: AgentProfile,
        system_prompt: str,
        history: Sequence[ChatMessage],
        depth: int,
    ) -> LoopResult:
        model = agent.model or settings.DEFAULT_MODEL
        provider = provider_for_model(model)
        api_key = self.credentials.api_key(user_id, provider)
        if not api_key:
            raise MissingCredentialsError(provider.value)

        context = ToolContext(
            user_id=user_id,
            agent_name=agent.name,
            depth=depth,
            max_depth=self.max_depth,
            workspace=self.workspace,
            roster=partial(self.directory.list_agents, user_id),
            delegate=partial(self.agent_to_agent, user_id, agent),
        )
        tools = tools_for_agent(agent, context)
        logger.info(
            "Running agent '%s' (model=%s, depth=%d, tools=%s)",
            agent.name,
            model,
            depth,
            [t.name for t in tools],
        )
        return run_agent_loop(
            api_key,
            model,
            system_prompt,
            history,
            tools,
            max_iterations=self.max_iterations,
            client=self.client,
        )

    def _save(self, user_id: str, agent: AgentProfile, kind: str, text: str, **kwargs) -> None:
        if self.run_log is not None:
            self.run_log.save(
                RunRecord(user_id=user_id, agent_name=agent.name, kind=kind, text=text, **kwargs)
            )

    # ------------------------------------------------------------------ #
    # Public API
    # ------------------------------------------------------------------ #
    def chat(self, user_id: str, agent_name: str, history: Sequence[ChatMessage]) -> LoopResult:
        """Reply to the conversation *history*; failures come back as the reply text."""
        agent = self._agent(user_id, agent_name)
        recent = list(history)[-settings.CHAT_HISTORY_LIMIT :]
        try:
            result = self._run(user_id, agent, agent.system_prompt, recent, depth=0)
        except MissingCredentialsError:
            result = LoopResult(
                text="⚠️ No API key configured. Go to Settings to add your OpenAI, Anthropic, "
                "or Google key."
            )
        except ProviderError as exc:
            logger.error("Chat with agent '%s' failed: %s", agent.name, exc)
            result = LoopResult(text=f"❌ Error: {exc}")

        self._save(user_id, agent, "chat", result.text, tool_calls=result.tool_calls)
        return result

    def agent_to_agent(
        self, user_id: str, caller: AgentProfile, target: AgentProfile, message: str, depth: int
    ) -> str:
        """Run *target* on *message* sent by *caller*; return its final text."""
        if depth > self.max_depth:
            return "Error: Maximum agent-to-agent depth exceeded."
        try:
            system_prompt = (
                f"{target.system_prompt}\n\n[This message was sent by agent \"{caller.name}\" "
                f"({caller.role}). Respond helpfully to their request.]"
            )
            result = self._run(
                user_id, target, system_prompt, [ChatMessage(role="user", content=message)], depth
            )
        except MissingCredentialsError as exc:
            return f"Error: No {exc.provider} API key configured for agent-to-agent chat."

        self._save(
            user_id,
            target,
            "agent_to_agent",
            f'🤖 [Agent-to-agent] "{caller.name}" asked: {excerpt(message, 200)}\n\n'
            f"Response: {excerpt(result.text, 500)}",
            tool_calls=result.tool_calls,
        )
        return result.text

    def execute_task(
        self, user_id: str, agent_name: str, title: str, description: Optional[str] = None
    ) -> TaskOutcome:
        """Run a single task; the outcome records failure instead of raising."""
        agent = self._agent(user_id, agent_name)
        history = [ChatMessage(role="user", content=task_prompt(title, description))]
        try:
            result = self._run(user_id, agent, agent.system_prompt, history, depth=0)
        except MissingCredentialsError as exc:
            outcome = TaskOutcome(
                success=False,
                output=f"{exc} Go to Settings → API Keys to add one.",
            )
        except ProviderError as exc:
            logger.error("Task '%s' for agent '%s' failed: %s", title, agent.name, exc)
            outcome = TaskOutcome(success=False, output=f"Error: {exc}")
        else:
            outcome = TaskOutcome(success=True, output=result.text, tool_calls=result.tool_calls)

        self._save(
            user_id,
            agent,
            "task",
            outcome.output,
            tool_calls=outcome.tool_calls,
            success=outcome.success,
        )
        return outcome

    def heartbeat_prompt(
        self,
        user_id: str,
        agent: AgentProfile,
        pending_tasks: Sequence[PendingTask] = (),
        recent_messages: Sequence[ChatMessage] = (),
    ) -> str:
        """Build the check-in prompt from the agent's identity, tasks, messages and memory."""
        soul = memory = ""
        if self.workspace is not None:
            base = workspace_base(user_id, agent.name)
            soul = self.workspace.read(f"{base}/SOUL.md") or ""
            memory = self.workspace.read(f"{base}/MEMORY.md") or ""

        task_list = (
            "\n".join(
                f"- [{t.status}] {t.title}" + (f": {t.description}" if t.description else "")
                for t in pending_tasks
            )
            or "No pending tasks."
        )
        msg_list = (
            "\n".join(f"[{m.role}] {m.content}" for m in list(recent_messages)[-10:])
            or "No new messages."
        )
        identity = soul[:2000] if soul else agent.system_prompt

        return f"""You are {agent.name}, a {agent.role}. This is your regular check-in.

Current time: {datetime.now(timezone.utc).isoformat()}

{identity}

## Pending Tasks
{task_list}

## Recent Messages
{msg_list}

## Your Memory
{memory[:4000] if memory else "No memory yet."}

---
Check your tasks, review any messages, and do proactive work if needed.
If you did something, describe what you did briefly.
If nothing needs attention, say "{HEARTBEAT_IDLE_REPLY}"
Update your memory if you learned anything worth remembering."""

    def heartbeat(
        self,
        user_id: str,
        agent_name: str,
        pending_tasks: Sequence[PendingTask] = (),
        recent_messages: Sequence[ChatMessage] = (),
    ) -> HeartbeatOutcome:
        """Run one scheduled check-in for *agent_name*."""
        agent = self._agent(user_id, agent_name)
        prompt = self.heartbeat_prompt(user_id, agent, pending_tasks, recent_messages)
        try:
            result = self._run(
                user_id, agent, agent.system_prompt, [ChatMessage(role="user", content=prompt)], 0
            )
        except (MissingCredentialsError, ProviderError) as exc:
            logger.error("Heartbeat for agent '%s' failed: %s", agent.name, exc)
            outcome = HeartbeatOutcome(text=f"Error: {exc}", idle=False)
            self._save(user_id, agent, "heartbeat", outcome.text, success=False)
            return outcome

        outcome = HeartbeatOutcome(
            text=result.text, idle=is_idle(result.text), tool_calls=result.tool_calls
        )
        if not outcome.idle:
            self._save(
                user_id, agent, "heartbeat", f"[Heartbeat] {result.text}", tool_calls=result.tool_calls
            )
        return outcome
