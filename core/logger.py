"""
Audit Logger for fexplorer.

Provides append-only logging of every navigation and filesystem mutation with
timestamps, targets and outcomes, so a session can be reviewed afterwards.
"""

import json
from dataclasses import dataclass, asdict
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Dict, Any
from enum import Enum


class ActionType(Enum):
    """Types of actions that can be logged."""
    WRITE = "write"
    DELETE = "delete"
    NAVIGATE = "navigate"
    PERMISSION = "permission"


class ActionStatus(Enum):
    """Outcome of an action."""
    EXECUTED = "executed"
    FAILED = "failed"


@dataclass
class AuditEntry:
    """Represents a single audit log entry."""
    timestamp: str
    action_type: str
    action_description: str
    target: Optional[str]
    status: str
    result: Optional[str]
    metadata: Dict[str, Any]

    @classmethod
    def create(
        cls,
        action_type: ActionType,
        action_description: str,
        target: Optional[str] = None,
        status: ActionStatus = ActionStatus.EXECUTED,
        result: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None
    ) -> "AuditEntry":
        """Factory method to create an audit entry with current timestamp."""
        return cls(
            timestamp=datetime.now().isoformat(),
            action_type=action_type.value,
            action_description=action_description,
            target=target,
            status=status.value,
            result=result,
            metadata=metadata or {}
        )

    def to_json(self) -> str:
        """Convert entry to JSON string."""
        return json.dumps(asdict(self), ensure_ascii=False)

    @classmethod
    def from_json(cls, json_str: str) -> "AuditEntry":
        """Create entry from JSON string."""
        data = json.loads(json_str)
        return cls(**data)


class AuditLogger:
    """
    Append-only audit logger for fexplorer.

    Actions are appended to a JSONL file. A logger created with
    ``log_path=None`` is disabled: entries are still built and returned
    but nothing is written.

    A write that fails is remembered in ``last_error`` and otherwise
    ignored, so the outcome of the logged action is never affected.
    """

    def __init__(self, log_path: Optional[str] = None):
        """
        Initialize the audit logger.

        Args:
            log_path: Path to the JSONL log file, or None to disable writing
        """
        self.log_path = Path(log_path).expanduser() if log_path else None
        self.last_error: Optional[OSError] = None
        if self.log_path is not None:
            self._ensure_log_directory()

    @property
    def enabled(self) -> bool:
        return self.log_path is not None

    def _ensure_log_directory(self) -> None:
        """Create the log directory if it doesn't exist."""
        try:
            self.log_path.parent.mkdir(parents=True, exist_ok=True)

            # Create log file if it doesn't exist
            if not self.log_path.exists():
                self.log_path.touch()
        except OSError as e:
            self.last_error = e

    def log(self, entry: AuditEntry) -> bool:
        """
        Append an audit entry to the log.

        Args:
            entry: The AuditEntry to log

        Returns:
            True if the entry was written
        """
        if self.log_path is None:
            return False
        try:
            with open(self.log_path, "a", encoding="utf-8") as f:
                f.write(entry.to_json() + "\n")
        except OSError as e:
            self.last_error = e
            return False
        return True

    def log_action(
        self,
        action_type: ActionType,
        description: str,
        target: Optional[str] = None,
        status: ActionStatus = ActionStatus.EXECUTED,
        result: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None
    ) -> AuditEntry:
        """
        Convenience method to create and log an entry in one call.

        Returns the created AuditEntry.
        """
        entry = AuditEntry.create(
            action_type=action_type,
            action_description=description,
            target=target,
            status=status,
            result=result,
            metadata=metadata
        )
        self.log(entry)
        return entry

    def _iter_entries(self):
        """Yield every parseable entry in file order."""
        if self.log_path is None or not self.log_path.is_file():
            return

        with open(self.log_path, "r", encoding="utf-8") as f:
            for line in f:
                line = line.strip()
                if not line:
                    continue
                try:
                    yield AuditEntry.from_json(line)
                except (json.JSONDecodeError, TypeError):
                    continue

    def get_recent(self, limit: int = 100) -> List[AuditEntry]:
        """
        Get the most recent audit entries.

        Args:
            limit: Maximum number of entries to return

        Returns:
            List of AuditEntry objects, most recent first
        """
        entries = list(self._iter_entries())
        return list(reversed(entries[-limit:])) if limit > 0 else []

    def get_by_date(self, date: datetime) -> List[AuditEntry]:
        """
        Get all audit entries for a specific date.

        Args:
            date: The date to filter by

        Returns:
            List of AuditEntry objects for that date
        """
        date_str = date.strftime("%Y-%m-%d")
        return [e for e in self._iter_entries() if e.timestamp.startswith(date_str)]

    def get_by_action_type(self, action_type: ActionType, limit: int = 100) -> List[AuditEntry]:
        """
        Get audit entries filtered by action type.

        Args:
            action_type: The ActionType to filter by
            limit: Maximum number of entries to return

        Returns:
            List of matching AuditEntry objects
        """
        entries = []
        for entry in self._iter_entries():
            if len(entries) >= limit:
                break
            if entry.action_type == action_type.value:
                entries.append(entry)
        return entries

    def get_failed_actions(self, limit: int = 50) -> List[AuditEntry]:
        """
        Get actions that failed.

        Useful for reviewing what went wrong during a session.
        """
        entries = []
        for entry in self._iter_entries():
            if len(entries) >= limit:
                break
            if entry.status == ActionStatus.FAILED.value:
                entries.append(entry)
        return entries

    def export(self, format: str = "json") -> str:
        """
        Export the entire audit log.

        Args:
            format: Export format ("json" or "csv")

        Returns:
            String containing the exported data
        """
        entries = self.get_recent(limit=10000)

        if format == "json":
            return json.dumps([asdict(e) for e in entries], indent=2)
        elif format == "csv":
            header = "timestamp,action_type,action_description,target,status,result"
            if not entries:
                return header + "\n"

            lines = [header]
            for e in entries:
                lines.append(f'"{e.timestamp}","{e.action_type}","{e.action_description}","{e.target or ""}","{e.status}","{e.result or ""}"')
            return "\n".join(lines)
        else:
            raise ValueError(f"Unsupported export format: {format}")

    def clear(self, confirm: bool = False) -> bool:
        """
        Clear the audit log.

        The current log is renamed to a timestamped backup first.

        Args:
            confirm: Must be True to actually clear the log

        Returns:
            True if cleared, False otherwise
        """
        if not confirm or self.log_path is None:
            return False

        if self.log_path.exists():
            backup_path = self.log_path.with_suffix(f".backup.{datetime.now().strftime('%Y%m%d_%H%M%S')}.jsonl")
            self.log_path.rename(backup_path)
            self.log_path.touch()
            return True

        return False
