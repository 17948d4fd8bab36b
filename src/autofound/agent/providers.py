"""
Provider adapters for Autofound.

This module is the only place that *directly* calls an LLM.  Everything else (tool-use loop, tools,
runners) stays model-agnostic.

Each adapter translates one provider's function-calling protocol into the shared
:class:`~autofound.core.schema.StepResult`:

1. **OpenAI** chat completions (``tools[].function``, ``role: tool`` results).
2. **Anthropic** messages (``input_schema``, ``tool_use`` / ``tool_result`` blocks).
3. **Google** Gemini ``generateContent`` (``functionDeclarations``, ``functionCall`` /
   ``functionResponse`` parts).

Adapters are registered via :func:`register_provider` and looked up with :func:`load_provider`.
"""

import json
import logging
from abc import (
    ABC,
    abstractmethod,
)
from typing import (
    Any,
    Callable,
    ClassVar,
    Dict,
    List,
    Sequence,
    Type,
)

import httpx
from pydantic import (
    BaseModel,
    ValidationError,
)

from autofound.agent.wire_models import (
    AnthropicResponse,
    GoogleResponse,
    OpenAIResponse,
)
from autofound.config import settings
from autofound.core.errors import ProviderError
from autofound.core.schema import (
    NO_RESPONSE_TEXT,
    ChatMessage,
    Provider,
    StepResult,
    ToolCall,
)
from autofound.tools import ToolDefinition

logger = logging.getLogger(__name__)

Conversation = List[Dict[str, Any]]


# ---------------------------------------------------------------------------
# Registry helpers
# ---------------------------------------------------------------------------
_PROVIDER_REGISTRY: dict[Provider, Type["BaseProvider"]] = {}


def register_provider(provider: Provider) -> Callable:
    """Decorator to register an adapter class for *provider*."""

    def wrapper(cls: Type["BaseProvider"]) -> Type["BaseProvider"]:
        cls.provider = provider
        _PROVIDER_REGISTRY[provider] = cls
        return cls

    return wrapper


def load_provider(provider: Provider | str, client: httpx.Client | None = None) -> "BaseProvider":
    """Factory that returns an instantiated adapter for *provider*."""
    cls = _PROVIDER_REGISTRY.get(Provider(provider))
    if cls is None:
        raise ValueError(f"Provider '{provider}' is not registered.")
    return cls(client=client)


# ---------------------------------------------------------------------------
# Base class
# ---------------------------------------------------------------------------
class BaseProvider(ABC):
    """Abstract adapter: one provider round-trip in, one :class:`StepResult` out."""

    provider: ClassVar[Provider]
    display_name: ClassVar[str]

    def __init__(
        self,
        client: httpx.Client | None = None,
        max_tokens: int | None = None,
        timeout: float | None = None,
    ) -> None:
        self._client = client
        self.max_tokens = settings.MAX_OUTPUT_TOKENS if max_tokens is None else max_tokens
        self.timeout = settings.HTTP_TIMEOUT if timeout is None else timeout

    @staticmethod
    @abstractmethod
    def tool_schemas(tools: Sequence[ToolDefinition]) -> List[Dict[str, Any]]:
        """Serialize *tools* into the provider's tool-declaration shape."""

    @abstractmethod
    def start_conversation(self, system_prompt: str, history: Sequence[ChatMessage]) -> Conversation:
        """Return the provider-native message list seeded with *history*."""

    @abstractmethod
    def step(
        self,
        api_key: str,
        model: str,
        system_prompt: str,
        conversation: Conversation,
        tools: Sequence[ToolDefinition],
    ) -> StepResult:
        """Perform one round-trip for the current *conversation*."""

    @abstractmethod
    def append_results(self, conversation: Conversation, step: StepResult, results: List[str]) -> None:
        """Append the assistant turn of *step* and the matching tool *results* to *conversation*."""

    def _post(
        self,
        url: str,
        payload: Dict[str, Any],
        headers: Dict[str, str] | None = None,
        params: Dict[str, str] | None = None,
    ) -> httpx.Response:
        try:
            if self._client is not None:
                resp = self._client.post(url, json=payload, headers=headers, params=params)
            else:
                with httpx.Client(timeout=self.timeout) as client:
                    resp = client.post(url, json=payload, headers=headers, params=params)
        except httpx.HTTPError as exc:
            logger.error("%s request error: %s", self.display_name, str(exc))
            raise ProviderError(self.display_name, 0, str(exc)) from exc

        if resp.is_error:
            logger.error("%s returned HTTP %d", self.display_name, resp.status_code)
            raise ProviderError(self.display_name, resp.status_code, resp.text)
        return resp

    def _parse(self, resp: httpx.Response, model_cls: Type[BaseModel]) -> tuple[Any, Dict[str, Any]]:
        """Validate the body against *model_cls*; return (validated model, raw dict)."""
        try:
            raw = resp.json()
            return model_cls.model_validate(raw), raw
        except (ValueError, ValidationError) as exc:
            logger.error("%s response did not validate: %s", self.display_name, exc)
            raise ProviderError(
                self.display_name, resp.status_code, f"invalid response body: {exc}"
            ) from exc


# ---------------------------------------------------------------------------
# Concrete adapters
# ---------------------------------------------------------------------------
@register_provider(Provider.OPENAI)
class OpenAIProvider(BaseProvider):
    """OpenAI chat completions with native function calling."""

    display_name = "OpenAI"

    @staticmethod
    def tool_schemas(tools: Sequence[ToolDefinition]) -> List[Dict[str, Any]]:
        return [
            {
                "type": "function",
                "function": {
                    "name": tool.name,
                    "description": tool.description,
                    "parameters": dict(tool.parameters),
                },
            }
            for tool in tools
        ]

    def start_conversation(self, system_prompt: str, history: Sequence[ChatMessage]) -> Conversation:
        return [{"role": "system", "content": system_prompt}] + [
            {"role": m.role, "content": m.content} for m in history
        ]

    def step(
        self,
        api_key: str,
        model: str,
        system_prompt: str,
        conversation: Conversation,
        tools: Sequence[ToolDefinition],
    ) -> StepResult:
        payload: Dict[str, Any] = {
            "model": model,
            "messages": conversation,
            "max_tokens": self.max_tokens,
        }
        if tools:
            payload["tools"] = self.tool_schemas(tools)

        resp = self._post(
            settings.OPENAI_API_URL, payload, headers={"Authorization": f"Bearer {api_key}"}
        )
        parsed, raw = self._parse(resp, OpenAIResponse)
        if not parsed.choices or parsed.choices[0].message is None:
            raise ProviderError(self.display_name, resp.status_code, "No response from OpenAI")

        message = parsed.choices[0].message
        text = message.content or ""
        if not message.tool_calls:
            return StepResult(text=text or NO_RESPONSE_TEXT, finished=True)

        calls: List[ToolCall] = []
        for call in message.tool_calls:
            try:
                args = json.loads(call.function.arguments or "{}")
                if not isinstance(args, dict):
                    raise ValueError("arguments must be a JSON object")
                calls.append(ToolCall(call_id=call.id, name=call.function.name, args=args))
            except ValueError as exc:
                logger.warning("Undecodable arguments for tool '%s': %s", call.function.name, exc)
                calls.append(
                    ToolCall(
                        call_id=call.id,
                        name=call.function.name,
                        raw_args=call.function.arguments,
                        error=f"Error: Invalid JSON arguments for {call.function.name}: {exc}",
                    )
                )
        return StepResult(
            text=text, tool_calls=calls, assistant_turn=raw["choices"][0]["message"]
        )

    def append_results(self, conversation: Conversation, step: StepResult, results: List[str]) -> None:
        conversation.append(step.assistant_turn)
        for call, result in zip(step.tool_calls, results):
            conversation.append({"role": "tool", "tool_call_id": call.call_id, "content": result})


@register_provider(Provider.ANTHROPIC)
class AnthropicProvider(BaseProvider):
    """Anthropic messages API with ``tool_use`` blocks."""

    display_name = "Anthropic"

    @staticmethod
    def tool_schemas(tools: Sequence[ToolDefinition]) -> List[Dict[str, Any]]:
        return [
            {
                "name": tool.name,
                "description": tool.description,
                "input_schema": dict(tool.parameters),
            }
            for tool in tools
        ]

    @staticmethod
    def auth_headers(api_key: str) -> Dict[str, str]:
        """OAuth tokens (``sk-ant-oat...``) go in a bearer header, regular keys in ``x-api-key``."""
        if "-oat" in api_key:
            return {"Authorization": f"Bearer {api_key}"}
        return {"x-api-key": api_key}

    def start_conversation(self, system_prompt: str, history: Sequence[ChatMessage]) -> Conversation:
        return [{"role": m.role, "content": m.content} for m in history]

    def step(
        self,
        api_key: str,
        model: str,
        system_prompt: str,
        conversation: Conversation,
        tools: Sequence[ToolDefinition],
    ) -> StepResult:
        payload: Dict[str, Any] = {
            "model": model,
            "system": system_prompt,
            "messages": conversation,
            "max_tokens": self.max_tokens,
        }
        if tools:
            payload["tools"] = self.tool_schemas(tools)

        headers = self.auth_headers(api_key)
        headers["anthropic-version"] = settings.ANTHROPIC_VERSION
        resp = self._post(settings.ANTHROPIC_API_URL, payload, headers=headers)
        parsed, raw = self._parse(resp, AnthropicResponse)

        texts = [b.text for b in parsed.content if b.type == "text" and b.text]
        text = texts[0] if texts else NO_RESPONSE_TEXT
        calls = [
            ToolCall(call_id=b.id or "", name=b.name or "", args=b.input or {})
            for b in parsed.content
            if b.type == "tool_use"
        ]
        if not calls:
            return StepResult(text=text, finished=True)
        return StepResult(
            text=text,
            tool_calls=calls,
            end_turn=parsed.stop_reason == "end_turn",
            assistant_turn={"role": "assistant", "content": raw["content"]},
        )

    def append_results(self, conversation: Conversation, step: StepResult, results: List[str]) -> None:
        conversation.append(step.assistant_turn)
        conversation.append(
            {
                "role": "user",
                "content": [
                    {"type": "tool_result", "tool_use_id": call.call_id, "content": result}
                    for call, result in zip(step.tool_calls, results)
                ],
            }
        )


@register_provider(Provider.GOOGLE)
class GoogleProvider(BaseProvider):
    """Google Gemini ``generateContent`` with function declarations."""

    display_name = "Google"
    default_model = "gemini-1.5-flash"

    @staticmethod
    def tool_schemas(tools: Sequence[ToolDefinition]) -> List[Dict[str, Any]]:
        return [
            {
                "functionDeclarations": [
                    {
                        "name": tool.name,
                        "description": tool.description,
                        "parameters": dict(tool.parameters),
                    }
                    for tool in tools
                ]
            }
        ]

    def start_conversation(self, system_prompt: str, history: Sequence[ChatMessage]) -> Conversation:
        return [
            {"role": "model" if m.role == "assistant" else "user", "parts": [{"text": m.content}]}
            for m in history
        ]

    def step(
        self,
        api_key: str,
        model: str,
        system_prompt: str,
        conversation: Conversation,
        tools: Sequence[ToolDefinition],
    ) -> StepResult:
        payload: Dict[str, Any] = {
            "systemInstruction": {"parts": [{"text": system_prompt}]},
            "contents": conversation,
            "generationConfig": {"maxOutputTokens": self.max_tokens},
        }
        if tools:
            payload["tools"] = self.tool_schemas(tools)

        url = f"{settings.GOOGLE_API_URL}/{model or self.default_model}:generateContent"
        resp = self._post(url, payload, params={"key": api_key})
        parsed, raw = self._parse(resp, GoogleResponse)

        content = parsed.candidates[0].content if parsed.candidates else None
        parts = content.parts if content else []
        texts = [p.text for p in parts if p.text]
        text = texts[0] if texts else NO_RESPONSE_TEXT
        calls = [
            ToolCall(call_id=p.function_call.name, name=p.function_call.name, args=p.function_call.args)
            for p in parts
            if p.function_call is not None
        ]
        if not calls:
            return StepResult(text=text, finished=True)
        return StepResult(
            text=text,
            tool_calls=calls,
            assistant_turn={"role": "model", "parts": raw["candidates"][0]["content"]["parts"]},
        )

    def append_results(self, conversation: Conversation, step: StepResult, results: List[str]) -> None:
        conversation.append(step.assistant_turn)
        conversation.append(
            {
                "role": "user",
                "parts": [
                    {"functionResponse": {"name": call.name, "response": {"result": result}}}
                    for call, result in zip(step.tool_calls, results)
                ],
            }
        )

