"""
Schema definitions for runner <-> loop <-> provider <-> tool messages.

These data models serve as the contract between the provider adapters, the tool-use loop, and the
code that persists its results.  We keep them separate from runtime logic so they can be imported
anywhere without side-effects.
"""

from enum import Enum
from typing import (
    Any,
    Dict,
    List,
    Literal,
    Optional,
)

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)

MAX_ITERATIONS_TEXT = "(max tool iterations reached)"
NO_RESPONSE_TEXT = "(no response)"


class Provider(str, Enum):
    """Supported model backends."""

    OPENAI = "openai"
    ANTHROPIC = "anthropic"
    GOOGLE = "google"


def provider_for_model(model: str) -> Provider:
    """Infer the provider from a model name (``claude*``, ``gemini*``, anything else is OpenAI)."""
    if model.startswith("claude"):
        return Provider.ANTHROPIC
    if model.startswith("gemini"):
        return Provider.GOOGLE
    return Provider.OPENAI


class ChatMessage(BaseModel):
    """One entry of the plain conversation history handed to the loop."""

    model_config = ConfigDict(frozen=True)

    role: Literal["user", "assistant"]
    content: str


class ToolCall(BaseModel):
    """A tool invocation requested by the model, normalized across providers."""

    call_id: str = Field("", description="Provider-issued id used to key the tool result")
    name: str = Field(..., description="Registered tool name")
    args: Dict[str, Any] = Field(default_factory=dict, description="Keyword arguments for the tool")
    # Set when the provider's arguments could not be decoded; returned to the model instead
    # of running the tool
    error: Optional[str] = None
    raw_args: Optional[str] = None


class StepResult(BaseModel):
    """Outcome of a single provider round-trip."""

    text: str = ""
    tool_calls: List[ToolCall] = Field(default_factory=list)
    finished: bool = False
    # Anthropic only: stop_reason == "end_turn" alongside tool_use blocks
    end_turn: bool = False
    # Provider-native assistant turn, appended verbatim before the tool results
    assistant_turn: Dict[str, Any] = Field(default_factory=dict)


class ToolCallRecord(BaseModel):
    """One executed tool call, as recorded in the trace."""

    tool: str
    args: Optional[str] = None
    result: Optional[str] = None


class LoopResult(BaseModel):
    """Terminal value of one loop invocation."""

    text: str
    tool_calls: List[ToolCallRecord] = Field(default_factory=list)


class AgentProfile(BaseModel):
    """Configuration of one agent worker owned by a user."""

    name: str
    role: str = "assistant"
    model: str = ""
    system_prompt: str = "You are a helpful assistant."
    status: str = "active"
    tools: List[str] = Field(
        default_factory=list, description="Tool names or skill-pack keys; empty means all"
    )

    @field_validator("name")
    @classmethod
    def name_is_path_safe(cls, value: str) -> str:
        # Names double as workspace directory names
        if not value.strip() or "/" in value or "\\" in value or ".." in value:
            raise ValueError("agent name must be non-empty and free of path separators and '..'")
        return value
