"""Persist loop results (final text + tool-call trace) as a lightweight JSON-lines log."""

import json
import logging
import threading
from datetime import (
    datetime,
    timezone,
)
from pathlib import Path
from typing import (
    List,
    Optional,
)

from pydantic import (
    BaseModel,
    Field,
)

from autofound.core.schema import ToolCallRecord

logger = logging.getLogger(__name__)


class RunRecord(BaseModel):
    """One persisted agent run."""

    user_id: str
    agent_name: str
    kind: str  # chat, task, heartbeat, agent_to_agent
    text: str
    tool_calls: List[ToolCallRecord] = Field(default_factory=list)
    success: bool = True
    created_at: str = Field(default_factory=lambda: datetime.now(timezone.utc).isoformat())


class RunLog:
    """Append-only JSONL audit trail of agent runs."""

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        self._lock = threading.Lock()

    def init(self) -> None:
        """Ensure the log file exists."""
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.touch(exist_ok=True)

    def save(self, record: RunRecord) -> None:
        """Append *record* to the log."""
        self._path.parent.mkdir(parents=True, exist_ok=True)
        with self._lock, self._path.open("a", encoding="utf-8") as f:
            f.write(record.model_dump_json() + "\n")
        logger.debug("Saved %s run for agent '%s'", record.kind, record.agent_name)

    def records(self, agent_name: Optional[str] = None) -> List[RunRecord]:
        """Read back the stored runs, optionally only those of *agent_name*."""
        if not self._path.exists():
            return []
        out: List[RunRecord] = []
        with self._path.open(encoding="utf-8") as f:
            for line in f:
                if not line.strip():
                    continue
                record = RunRecord.model_validate(json.loads(line))
                if agent_name is None or record.agent_name == agent_name:
                    out.append(record)
        return out
