"""Dispatches tool calls requested by the model and turns every failure into text."""

import logging
from typing import (
    Any,
    Mapping,
    Sequence,
)

from autofound.tools import (
    STATIC_TOOLS,
    ToolDefinition,
)

logger = logging.getLogger(__name__)


def unknown_tool_message(name: str) -> str:
    return f'Error: Unknown tool "{name}"'


def execute_tool(
    name: str, args: Mapping[str, Any] | None, tools: Sequence[ToolDefinition]
) -> str:
    """
    Look up *name* in *tools* (then in the static tools) and invoke it with *args*.

    Parameters
    ----------
    name:
        The tool name requested by the model.
    args:
        Keyword arguments decoded from the model's request.  If *None*, an empty dict is assumed.
    tools:
        The tools resolved for the current loop invocation.

    Returns
    -------
    str
        The tool's result, or an error description.  The result is always fed back to the model
        as an observation, so this function never raises.
    """

    tool = next((t for t in tools if t.name == name), None) or STATIC_TOOLS.get(name)
    if tool is None:
        logger.warning("Model requested unknown tool '%s'", name)
        return unknown_tool_message(name)

    try:
        logger.debug("Executing tool '%s' with args=%s", name, args)
        result = tool.execute(args or {})
    except Exception as exc:  # pylint: disable=broad-except
        logger.exception("Unhandled error in tool '%s'", name)
        return f"Error executing {name}: {exc}"
    return result if isinstance(result, str) else str(result)
