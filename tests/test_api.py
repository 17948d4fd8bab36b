"""Tests for the FastAPI surface, with the runner's collaborators swapped for local ones."""

import pytest
from conftest import (
    anthropic_text,
    openai_text,
)
from fastapi.testclient import TestClient

from autofound.agent.runners import (
    AgentRunner,
    InMemoryAgentDirectory,
)
from autofound.api import app as api
from autofound.config import settings
from autofound.memory.run_log import RunLog
from autofound.memory.workspace_store import LocalWorkspaceStore


@pytest.fixture
def wire(monkeypatch, tmp_path, scripted):
    """Point the app at a temp workspace and a scripted provider; return a setter for the script."""
    directory = InMemoryAgentDirectory()
    workspace = LocalWorkspaceStore(tmp_path / "ws")
    monkeypatch.setattr(api, "directory", directory)
    monkeypatch.setattr(api, "workspace", workspace)
    monkeypatch.setattr(settings, "OPENAI_API_KEY", "sk-server")
    monkeypatch.setattr(settings, "ANTHROPIC_API_KEY", None)

    def _script(*responses):
        endpoint = scripted(*responses)
        runner = AgentRunner(
            directory,
            api.credentials,
            workspace,
            RunLog(tmp_path / "runs.jsonl"),
            client=endpoint.client,
        )
        monkeypatch.setattr(api, "runner", runner)
        return endpoint

    _script()
    return _script


@pytest.fixture
def client(wire) -> TestClient:
    return TestClient(api.app)


def test_health(client) -> None:
    assert client.get("/health").json() == {"status": "ok"}


def test_run_with_explicit_key(client, wire) -> None:
    endpoint = wire(anthropic_text("hi there"))
    resp = client.post(
        "/run",
        json={
            "api_key": "sk-ant-oat01-abc",
            "model": "claude-3-5-haiku",
            "history": [{"role": "user", "content": "hello"}],
        },
    )

    assert resp.status_code == 200
    assert resp.json() == {"text": "hi there", "tool_calls": []}
    assert endpoint.requests[0].headers["Authorization"] == "Bearer sk-ant-oat01-abc"


def test_run_without_any_key(client) -> None:
    resp = client.post(
        "/run", json={"model": "claude-3-5-haiku", "history": [{"role": "user", "content": "x"}]}
    )
    assert resp.status_code == 400
    assert resp.json()["detail"] == "No anthropic API key configured."


def test_run_provider_failure_maps_to_502(client, wire) -> None:
    wire((429, "rate limited"))
    resp = client.post(
        "/run", json={"model": "gpt-4o-mini", "history": [{"role": "user", "content": "x"}]}
    )
    assert resp.status_code == 502
    assert resp.json()["detail"] == "OpenAI 429: rate limited"


def test_run_rejects_empty_history(client) -> None:
    assert client.post("/run", json={"model": "gpt-4o-mini", "history": []}).status_code == 422


def test_agents_are_scoped_per_user(client) -> None:
    created = client.post("/agents", json={"name": "Scout"}, headers={"X-User-Id": "u1"})
    assert created.status_code == 201

    assert [a["name"] for a in client.get("/agents", headers={"X-User-Id": "u1"}).json()] == ["Scout"]
    assert client.get("/agents", headers={"X-User-Id": "u2"}).json() == []


@pytest.mark.parametrize("name", ["../victim", "a/b", "", "  "])
def test_agent_names_must_be_path_safe(client, name) -> None:
    assert client.post("/agents", json={"name": name}).status_code == 422


def test_chat_with_agent(client, wire) -> None:
    client.post("/agents", json={"name": "Scout", "model": "gpt-4o-mini"})
    endpoint = wire(openai_text("Ready."))

    resp = client.post("/agents/scout/chat", json={"history": [{"role": "user", "content": "status?"}]})

    assert resp.status_code == 200
    assert resp.json()["text"] == "Ready."
    assert endpoint.requests[0].headers["Authorization"] == "Bearer sk-server"


def test_unknown_agent_is_404(client) -> None:
    resp = client.post("/agents/ghost/chat", json={"history": [{"role": "user", "content": "x"}]})
    assert resp.status_code == 404
    assert client.post("/agents/ghost/tasks", json={"title": "t"}).status_code == 404
    assert client.post("/agents/ghost/heartbeat", json={}).status_code == 404


def test_task_and_heartbeat_endpoints(client, wire) -> None:
    client.post("/agents", json={"name": "Scout", "model": "gpt-4o-mini"})

    wire(openai_text("Done."))
    task = client.post("/agents/Scout/tasks", json={"title": "Compile list"}).json()
    assert task["success"] is True
    assert task["output"] == "Done."

    wire(openai_text("All clear, standing by."))
    beat = client.post("/agents/Scout/heartbeat", json={"pending_tasks": []}).json()
    assert beat["idle"] is True
