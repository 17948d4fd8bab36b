"""
Workspace file and memory tools.

Both groups are bound to one user + agent and persist under ``<user>/agents/<agent>/`` in the
context's :class:`~autofound.memory.workspace_store.WorkspaceStore`.  An agent that runs without a
store gets none of these tools.
"""

import logging
import posixpath
from datetime import (
    datetime,
    timezone,
)
from typing import List

from autofound.core.errors import ToolExecutionError
from autofound.tools import (
    ToolContext,
    ToolDefinition,
    register_tool_factory,
)

logger = logging.getLogger(__name__)

MEMORY_FILE = "MEMORY.md"
DAILY_LOG_DIR = "memory/"


def workspace_base(user_id: str, agent_name: str) -> str:
    """Key prefix of one agent's workspace; owner names must be single path segments."""
    for part in (user_id, agent_name):
        if not part or "/" in part or "\\" in part or ".." in part:
            raise ToolExecutionError(f"Invalid workspace owner name: {part!r}")
    return f"{user_id}/agents/{agent_name}"


def scoped_key(base: str, path: str) -> str:
    """Resolve *path* inside *base*; anything that lands outside it is rejected."""
    key = posixpath.normpath(posixpath.join(base, path.lstrip("/")))
    if key != base and not key.startswith(base + "/"):
        raise ToolExecutionError(f"Path escapes the workspace: {path}")
    return key


def _key(context: ToolContext, path: str) -> str:
    return scoped_key(workspace_base(context.user_id, context.agent_name), path)


@register_tool_factory("read_file", "write_file", "list_files", "delete_file")
def file_tools(context: ToolContext) -> List[ToolDefinition]:
    """Build the workspace file tools for *context*."""
    store = context.workspace
    if store is None:
        return []

    def read_file(path: str) -> str:
        content = store.read(_key(context, path))
        if content is None:
            return f"File not found: {path}"
        return content

    def write_file(path: str, content: str) -> str:
        store.write(_key(context, path), content)
        return f"Successfully wrote {len(content)} chars to {path}"

    def list_files(path: str = "") -> str:
        base = workspace_base(context.user_id, context.agent_name)
        files = store.list(scoped_key(base, path) + "/")
        if not files:
            return "No files found in this directory."
        return "\n".join(
            f"{f.key.replace(base + '/', '', 1)} ({f.size} bytes, {f.last_modified or 'unknown'})"
            for f in files
        )

    def delete_file(path: str) -> str:
        store.delete(_key(context, path))
        return f"Deleted {path}"

    return [
        ToolDefinition(
            name="read_file",
            description=(
                "Read the contents of a file from your workspace. Use this to read your memory, "
                "notes, or any files you've saved. Files are persisted across conversations."
            ),
            parameters={
                "type": "object",
                "properties": {
                    "path": {
                        "type": "string",
                        "description": 'Relative file path within your workspace, e.g. "notes/research.md"',
                    },
                },
                "required": ["path"],
            },
            executor=read_file,
        ),
        ToolDefinition(
            name="write_file",
            description=(
                "Write content to a file in your workspace. Creates the file if it doesn't exist, "
                "overwrites if it does."
            ),
            parameters={
                "type": "object",
                "properties": {
                    "path": {"type": "string", "description": "Relative file path"},
                    "content": {"type": "string", "description": "The content to write"},
                },
                "required": ["path", "content"],
            },
            executor=write_file,
        ),
        ToolDefinition(
            name="list_files",
            description="List files in your workspace directory with sizes and modification dates.",
            parameters={
                "type": "object",
                "properties": {
                    "path": {
                        "type": "string",
                        "description": 'Directory to list, e.g. "notes/". Default: workspace root.',
                    },
                },
                "required": [],
            },
            executor=list_files,
        ),
        ToolDefinition(
            name="delete_file",
            description="Delete a file from your workspace.",
            parameters={
                "type": "object",
                "properties": {
                    "path": {"type": "string", "description": "Relative file path to delete"},
                },
                "required": ["path"],
            },
            executor=delete_file,
        ),
    ]


@register_tool_factory("memory_read", "memory_write", always=True)
def memory_tools(context: ToolContext) -> List[ToolDefinition]:
    """Build the long-term memory / daily log tools for *context*."""
    store = context.workspace
    if store is None:
        return []

    def memory_read(file: str = MEMORY_FILE) -> str:
        content = store.read(_key(context, file))
        if content is None:
            if file == MEMORY_FILE:
                return "Memory is empty. Use memory_write to save important information."
            return f"No log found for {file}"
        return content

    def memory_write(content: str, file: str = MEMORY_FILE) -> str:
        file = posixpath.normpath(file)
        key = _key(context, file)
        if file.startswith(DAILY_LOG_DIR):
            # Daily logs are append-only
            existing = store.read(key)
            timestamp = datetime.now(timezone.utc).strftime("%H:%M:%S")
            if existing:
                new_content = f"{existing}\n\n## {timestamp}\n{content}"
            else:
                day = file[len(DAILY_LOG_DIR) :].removesuffix(".md")
                new_content = f"# Daily Log - {day}\n\n## {timestamp}\n{content}"
            store.write(key, new_content)
            return f"Appended to {file} ({len(content)} chars)"
        if file != MEMORY_FILE:
            raise ToolExecutionError(
                f'Unsupported memory file "{file}"; use {MEMORY_FILE} or memory/YYYY-MM-DD.md'
            )
        store.write(key, content)
        return f"Updated {file} ({len(content)} chars)"

    return [
        ToolDefinition(
            name="memory_read",
            description=(
                "Read your long-term memory (MEMORY.md) or a specific daily log. "
                "Use this to recall what you've learned across sessions."
            ),
            parameters={
                "type": "object",
                "properties": {
                    "file": {
                        "type": "string",
                        "description": (
                            '"MEMORY.md" for long-term memory, or "memory/YYYY-MM-DD.md" for a '
                            'specific day\'s log. Default: "MEMORY.md"'
                        ),
                    },
                },
                "required": [],
            },
            executor=memory_read,
        ),
        ToolDefinition(
            name="memory_write",
            description=(
                "Write to your long-term memory (MEMORY.md) or append to a daily log. "
                "MEMORY.md is overwritten; daily logs are appended to."
            ),
            parameters={
                "type": "object",
                "properties": {
                    "content": {"type": "string", "description": "The content to write or append"},
                    "file": {
                        "type": "string",
                        "description": '"MEMORY.md" or "memory/YYYY-MM-DD.md". Default: MEMORY.md',
                    },
                },
                "required": ["content"],
            },
            executor=memory_write,
        ),
    ]
