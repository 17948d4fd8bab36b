"""
Pydantic models for provider success bodies.

Each adapter validates the JSON it receives against these models, so nothing past the adapter
boundary touches untyped provider payloads.  Only the fields the loop reads are declared; unknown
fields are ignored.
"""

from typing import (
    Any,
    Dict,
    List,
    Optional,
)

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
)


# ---------------------------------------------------------------------------
# OpenAI chat completions
# ---------------------------------------------------------------------------
class OpenAIFunctionCall(BaseModel):
    """``tool_calls[].function``"""

    name: str
    arguments: str = "{}"


class OpenAIToolCall(BaseModel):
    """One entry of ``message.tool_calls``."""

    id: str = ""
    type: str = "function"
    function: OpenAIFunctionCall


class OpenAIMessage(BaseModel):
    """Assistant message of a choice."""

    role: str = "assistant"
    content: Optional[str] = None
    tool_calls: Optional[List[OpenAIToolCall]] = None


class OpenAIChoice(BaseModel):
    message: Optional[OpenAIMessage] = None
    finish_reason: Optional[str] = None


class OpenAIResponse(BaseModel):
    choices: List[OpenAIChoice] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Anthropic messages
# ---------------------------------------------------------------------------
class AnthropicContentBlock(BaseModel):
    """A ``text`` or ``tool_use`` block (other block types are carried but not interpreted)."""

    type: str
    text: Optional[str] = None
    id: Optional[str] = None
    name: Optional[str] = None
    input: Optional[Dict[str, Any]] = None


class AnthropicResponse(BaseModel):
    content: List[AnthropicContentBlock] = Field(default_factory=list)
    stop_reason: Optional[str] = None


# ---------------------------------------------------------------------------
# Google generateContent
# ---------------------------------------------------------------------------
class GoogleFunctionCall(BaseModel):
    name: str
    args: Dict[str, Any] = Field(default_factory=dict)


class GooglePart(BaseModel):
    """A text part or a ``functionCall`` part."""

    model_config = ConfigDict(populate_by_name=True)

    text: Optional[str] = None
    function_call: Optional[GoogleFunctionCall] = Field(None, alias="functionCall")


class GoogleContent(BaseModel):
    role: Optional[str] = None
    parts: List[GooglePart] = Field(default_factory=list)


class GoogleCandidate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    content: Optional[GoogleContent] = None
    finish_reason: Optional[str] = Field(None, alias="finishReason")


class GoogleResponse(BaseModel):
    candidates: List[GoogleCandidate] = Field(default_factory=list)
