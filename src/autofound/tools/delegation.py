"""
Agent-to-agent delegation.

``send_message_to_agent`` lets one agent hand a request to another agent owned by the same user.
The executor re-enters the tool-use loop for the target, so it carries a depth counter and refuses
to go deeper than ``context.max_depth``.  Every refusal is returned as text for the model to read.
"""

import logging
from typing import List

from autofound.tools import (
    ToolContext,
    ToolDefinition,
    register_tool_factory,
)

logger = logging.getLogger(__name__)


def depth_exceeded_message(max_depth: int) -> str:
    return f"Error: Maximum agent-to-agent depth ({max_depth}) reached. Cannot delegate further."


@register_tool_factory("send_message_to_agent")
def delegation_tools(context: ToolContext) -> List[ToolDefinition]:
    """Build the delegation tool for the calling agent in *context*."""

    def send_message_to_agent(agent_name: str, message: str) -> str:
        if context.depth >= context.max_depth:
            return depth_exceeded_message(context.max_depth)
        if context.roster is None or context.delegate is None:
            return "Error: Agent-to-agent messaging is not available in this run."

        caller = context.agent_name.lower()
        agents = list(context.roster())
        target = next((a for a in agents if a.name.lower() == agent_name.lower()), None)

        if target is None:
            available = ", ".join(a.name for a in agents if a.name.lower() != caller)
            return f'Error: Agent "{agent_name}" not found. Available agents: {available or "none"}'
        if target.name.lower() == caller:
            return "Error: An agent cannot send a message to itself."
        if target.status != "active":
            return f'Error: Agent "{target.name}" is not active (status: {target.status}).'

        logger.info(
            "Agent '%s' delegating to '%s' at depth %d", context.agent_name, target.name, context.depth
        )
        try:
            return context.delegate(target, message, context.depth + 1)
        except Exception as exc:  # pylint: disable=broad-except
            logger.warning("Delegation from '%s' to '%s' failed: %s", context.agent_name, target.name, exc)
            return f'Error communicating with agent "{target.name}": {exc}'

    return [
        ToolDefinition(
            name="send_message_to_agent",
            description=(
                "Send a message to another agent in your organization and get their response. Use "
                "this to delegate tasks or get specialized input from agents with different "
                "expertise."
            ),
            parameters={
                "type": "object",
                "properties": {
                    "agent_name": {
                        "type": "string",
                        "description": "Name of the target agent (case-insensitive)",
                    },
                    "message": {
                        "type": "string",
                        "description": "The message to send to the target agent",
                    },
                },
                "required": ["agent_name", "message"],
            },
            executor=send_message_to_agent,
        )
    ]
