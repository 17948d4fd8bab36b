"""
Pydantic models for Autofound API requests and responses.
This module defines the request and response schemas used by the Autofound API.
"""

from typing import (
    List,
    Optional,
)

from pydantic import (
    BaseModel,
    Field,
)

from autofound.agent.runners import PendingTask
from autofound.core.schema import (
    ChatMessage,
    ToolCallRecord,
)


# ---------------------------------------------------------------------------
# Pydantic request / response schema
# ---------------------------------------------------------------------------
class RunRequest(BaseModel):
    """A single loop invocation with everything already resolved."""

    api_key: Optional[str] = Field(None, description="Provider key; defaults to the server's key")
    model: str = Field(..., description="Model name; its prefix selects the provider")
    system_prompt: str = ""
    history: List[ChatMessage] = Field(..., min_length=1)
    tools: List[str] = Field(default_factory=list, description="Tool names or skill-pack keys")


class RunResponse(BaseModel):
    """Final text plus the ordered tool-call trace."""

    text: str
    tool_calls: List[ToolCallRecord] = Field(default_factory=list)


class ChatRequest(BaseModel):
    """Conversation with an agent; the last entry is the message to answer."""

    history: List[ChatMessage] = Field(..., min_length=1)


class TaskRequest(BaseModel):
    title: str
    description: Optional[str] = None


class HeartbeatRequest(BaseModel):
    pending_tasks: List[PendingTask] = Field(default_factory=list)
    recent_messages: List[ChatMessage] = Field(default_factory=list)
