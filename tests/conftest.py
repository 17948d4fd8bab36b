"""
Shared fixtures: scripted provider endpoints served through ``httpx.MockTransport``.

Run with:
$ pytest -q
"""

import json
from typing import (
    Any,
    Callable,
    Dict,
    List,
)

import httpx
import pytest

from autofound.core.schema import ChatMessage
from autofound.tools import ToolDefinition


class ScriptedEndpoint:
    """Answers each POST with the next scripted (status, body) and records the requests."""

    def __init__(self, responses: List[Any]) -> None:
        self._responses = list(responses)
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if not self._responses:
            raise AssertionError("unexpected extra round-trip")
        item = self._responses.pop(0)
        if isinstance(item, tuple):
            status, body = item
        else:
            status, body = 200, item
        if isinstance(body, str):
            return httpx.Response(status, text=body)
        return httpx.Response(status, json=body)

    def payload(self, index: int) -> Dict[str, Any]:
        return json.loads(self.requests[index].content)

    @property
    def client(self) -> httpx.Client:
        return httpx.Client(transport=httpx.MockTransport(self))


@pytest.fixture
def scripted() -> Callable[..., ScriptedEndpoint]:
    """Factory: ``scripted(resp1, resp2, ...)``."""

    def _make(*responses: Any) -> ScriptedEndpoint:
        return ScriptedEndpoint(list(responses))

    return _make


def echo_tool(name: str, calls: List[Dict[str, Any]] | None = None) -> ToolDefinition:
    """A tool that returns ``<name>:<sorted args>`` and records its invocations."""

    def _run(**kwargs: Any) -> str:
        if calls is not None:
            calls.append(kwargs)
        return f"{name}:" + ",".join(f"{k}={kwargs[k]}" for k in sorted(kwargs))

    return ToolDefinition(
        name=name,
        description=f"{name} test tool",
        parameters={"type": "object", "properties": {}, "required": []},
        executor=_run,
    )


def user(text: str) -> List[ChatMessage]:
    return [ChatMessage(role="user", content=text)]


# ---------------------------------------------------------------------------
# Provider response fixtures
# ---------------------------------------------------------------------------
def openai_text(text: str) -> Dict[str, Any]:
    return {"choices": [{"message": {"role": "assistant", "content": text}, "finish_reason": "stop"}]}


def openai_tool_calls(*calls: tuple) -> Dict[str, Any]:
    return {
        "choices": [
            {
                "message": {
                    "role": "assistant",
                    "content": None,
                    "tool_calls": [
                        {
                            "id": call_id,
                            "type": "function",
                            "function": {"name": name, "arguments": json.dumps(args)},
                        }
                        for call_id, name, args in calls
                    ],
                },
                "finish_reason": "tool_calls",
            }
        ]
    }


def anthropic_text(text: str, stop_reason: str = "end_turn") -> Dict[str, Any]:
    return {"content": [{"type": "text", "text": text}], "stop_reason": stop_reason}


def anthropic_tool_use(
    *calls: tuple, stop_reason: str = "tool_use", text: str | None = None
) -> Dict[str, Any]:
    content: List[Dict[str, Any]] = [{"type": "text", "text": text}] if text else []
    content += [
        {"type": "tool_use", "id": call_id, "name": name, "input": args}
        for call_id, name, args in calls
    ]
    return {"content": content, "stop_reason": stop_reason}


def google_text(text: str) -> Dict[str, Any]:
    return {"candidates": [{"content": {"role": "model", "parts": [{"text": text}]}}]}


def google_function_calls(*calls: tuple) -> Dict[str, Any]:
    return {
        "candidates": [
            {
                "content": {
                    "role": "model",
                    "parts": [{"functionCall": {"name": name, "args": args}} for name, args in calls],
                }
            }
        ]
    }
