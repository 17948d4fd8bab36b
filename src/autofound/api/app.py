"""
Core API backend for Autofound.

It exposes the following endpoints:
- **GET /health** - liveness probe for health checks.
- **POST /run** - one tool-use loop invocation with provider, model and key already resolved.
- **POST /agents**, **GET /agents** - register and list agents of the calling user.
- **POST /agents/{name}/chat** - answer the last message of a conversation.
- **POST /agents/{name}/tasks** - execute a task.
- **POST /agents/{name}/heartbeat** - run one scheduled check-in.

Routes are plain ``def`` functions: the loop blocks on provider round-trips, so FastAPI runs them
in its threadpool.  The user id comes from the ``X-User-Id`` header; authentication is left to the
deployment in front of the API.
"""

import logging
from pathlib import Path
from typing import List

from fastapi import (
    FastAPI,
    Header,
    HTTPException,
)

from autofound.agent.agent_loop import run_agent_loop
from autofound.agent.runners import (
    AgentRunner,
    HeartbeatOutcome,
    InMemoryAgentDirectory,
    SettingsCredentialStore,
    TaskOutcome,
)
from autofound.api.models import (
    ChatRequest,
    HeartbeatRequest,
    RunRequest,
    RunResponse,
    TaskRequest,
)
from autofound.common import (
    AnsiColors,
    colored_print,
)
from autofound.config import settings
from autofound.core.errors import (
    AgentNotFoundError,
    ProviderError,
)
from autofound.core.schema import (
    AgentProfile,
    provider_for_model,
)
from autofound.memory.run_log import RunLog
from autofound.memory.workspace_store import LocalWorkspaceStore
from autofound.tools import (
    ToolContext,
    resolve_tools,
)

logger = logging.getLogger(__name__)

DEFAULT_USER = "default"
_SECRET_SETTINGS = {"OPENAI_API_KEY", "ANTHROPIC_API_KEY", "GOOGLE_API_KEY", "TAVILY_API_KEY"}

directory = InMemoryAgentDirectory()
credentials = SettingsCredentialStore()
workspace = LocalWorkspaceStore(Path(settings.DATA_DIR) / "workspaces")
run_log = RunLog(Path(settings.DATA_DIR) / "autofound_runs.jsonl")
runner = AgentRunner(directory, credentials, workspace, run_log)

app = FastAPI(title="Autofound API", version="0.1.0", description="Autofound agent runtime API")


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------
@app.get("/health", summary="Health check")
def health() -> dict[str, str]:
    """Return a simple liveness payload."""
    return {"status": "ok"}


@app.post("/run", response_model=RunResponse, summary="Run the tool-use loop once")
def run(req: RunRequest, x_user_id: str = Header(DEFAULT_USER)) -> RunResponse:
    """Run the loop for a caller-supplied prompt, history and tool list."""
    provider = provider_for_model(req.model)
    api_key = req.api_key or credentials.api_key(x_user_id, provider)
    if not api_key:
        raise HTTPException(status_code=400, detail=f"No {provider.value} API key configured.")

    tools = resolve_tools(
        req.tools, ToolContext(user_id=x_user_id, agent_name="api", workspace=workspace)
    )
    try:
        result = run_agent_loop(
            api_key, req.model, req.system_prompt, req.history, tools, client=runner.client
        )
    except ProviderError as exc:
        logger.warning("Provider failure: %s", exc)
        raise HTTPException(status_code=502, detail=str(exc)) from exc
    return RunResponse(text=result.text, tool_calls=result.tool_calls)


@app.post("/agents", response_model=AgentProfile, status_code=201, summary="Register an agent")
def create_agent(agent: AgentProfile, x_user_id: str = Header(DEFAULT_USER)) -> AgentProfile:
    """Create or replace an agent of the calling user."""
    return directory.add(x_user_id, agent)


@app.get("/agents", response_model=List[AgentProfile], summary="List agents")
def list_agents(x_user_id: str = Header(DEFAULT_USER)) -> List[AgentProfile]:
    """List the calling user's agents."""
    return directory.list_agents(x_user_id)


@app.post("/agents/{name}/chat", response_model=RunResponse, summary="Chat with an agent")
def chat(name: str, req: ChatRequest, x_user_id: str = Header(DEFAULT_USER)) -> RunResponse:
    """Answer the conversation; provider failures come back as an error reply."""
    try:
        result = runner.chat(x_user_id, name, req.history)
    except AgentNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return RunResponse(text=result.text, tool_calls=result.tool_calls)


@app.post("/agents/{name}/tasks", response_model=TaskOutcome, summary="Execute a task")
def execute_task(name: str, req: TaskRequest, x_user_id: str = Header(DEFAULT_USER)) -> TaskOutcome:
    """Execute a task with the named agent."""
    try:
        return runner.execute_task(x_user_id, name, req.title, req.description)
    except AgentNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc


@app.post("/agents/{name}/heartbeat", response_model=HeartbeatOutcome, summary="Run a heartbeat")
def heartbeat(
    name: str, req: HeartbeatRequest, x_user_id: str = Header(DEFAULT_USER)
) -> HeartbeatOutcome:
    """Run one check-in for the named agent."""
    try:
        return runner.heartbeat(x_user_id, name, req.pending_tasks, req.recent_messages)
    except AgentNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc


# ---------------------------------------------------------------------------
# Public helper to launch the API (imported by main.py)
# ---------------------------------------------------------------------------
def run_api(
    host: str = "0.0.0.0", port: int = 8000, reload: bool = False, log_level: str | None = None
) -> None:
    """Start a uvicorn server hosting *app*.

    Parameters
    ----------
    host, port:
        Bind address for the HTTP server.
    reload:
        If *True*, enable auto-reload (useful in dev docker-compose).
    log_level:
        Logging level to use (default from settings if not provided).
    """

    # Lazy import - keeps uvicorn an optional dependency at pkg-import time
    import uvicorn  # pylint: disable=import-outside-toplevel

    if log_level is None:  # Use the default from settings if not provided
        log_level = settings.LOG_LEVEL

    logger.info(
        "Starting Autofound API at %s:%d (reload=%s, log_level=%s)", host, port, reload, log_level
    )
    run_log.init()
    logger.debug("API settings: %s", settings.model_dump(exclude=_SECRET_SETTINGS))

    colored_print(f"🔮 Autofound API is running at http://localhost:{port}.", AnsiColors.GREEN)
    colored_print(f"Visit http://localhost:{port}/docs for API documentation.", AnsiColors.BLUE)
    uvicorn.run(
        "autofound.api.app:app",
        host=host,
        port=port,
        reload=reload,
        log_level=log_level,
    )


# ---------------------------------------------------------------------------
# `python -m autofound.api.app` helper
# ---------------------------------------------------------------------------
if __name__ == "__main__":
    run_api(reload=True)
