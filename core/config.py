"""
Configuration for fexplorer.

Settings are read from a YAML file under a top-level ``fexplorer`` key.
A missing or unreadable file yields the defaults. Auditing is off unless
the file enables it or names a log path.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml


EXISTING_FILE_POLICIES = ("truncate", "keep", "fail")
DEFAULT_AUDIT_LOG = "~/.local/state/fexplorer/audit_log.jsonl"


@dataclass
class AuditConfig:
    """Audit log settings."""
    enabled: bool = False
    log_path: str = DEFAULT_AUDIT_LOG


@dataclass
class ExplorerConfig:
    """Runtime settings for the explorer core."""
    start_path: Optional[str] = None
    copy_buffer_size: int = 4096
    atomic_copy: bool = False
    on_existing_file: str = "truncate"
    show_unreadable: bool = False
    audit: AuditConfig = field(default_factory=AuditConfig)

    def __post_init__(self):
        if self.on_existing_file not in EXISTING_FILE_POLICIES:
            raise ValueError(
                f"on_existing_file must be one of {', '.join(EXISTING_FILE_POLICIES)}, "
                f"got {self.on_existing_file!r}"
            )
        if not isinstance(self.copy_buffer_size, int) or self.copy_buffer_size <= 0:
            raise ValueError(f"copy_buffer_size must be a positive integer, got {self.copy_buffer_size!r}")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ExplorerConfig":
        """Build a config from a parsed mapping, ignoring unknown keys."""
        audit = data.get("audit") or {}
        return cls(
            start_path=data.get("start_path"),
            copy_buffer_size=data.get("copy_buffer_size", 4096),
            atomic_copy=bool(data.get("atomic_copy", False)),
            on_existing_file=data.get("on_existing_file", "truncate"),
            show_unreadable=bool(data.get("show_unreadable", False)),
            audit=AuditConfig(
                enabled=bool(audit.get("enabled", "log_path" in audit)),
                log_path=audit.get("log_path", DEFAULT_AUDIT_LOG),
            ),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "start_path": self.start_path,
            "copy_buffer_size": self.copy_buffer_size,
            "atomic_copy": self.atomic_copy,
            "on_existing_file": self.on_existing_file,
            "show_unreadable": self.show_unreadable,
            "audit": {
                "enabled": self.audit.enabled,
                "log_path": self.audit.log_path,
            },
        }


def _read_yaml(config_path: Path) -> Dict[str, Any]:
    """Load the raw mapping from YAML, or an empty mapping on any read error."""
    if not config_path.exists():
        return {}

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            config = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError):
        return {}

    if not isinstance(config, dict):
        return {}
    return config.get("fexplorer", config) or {}


def load_config(config_path: str = "config.yaml") -> ExplorerConfig:
    """
    Load explorer settings.

    Args:
        config_path: Path to the YAML configuration file

    Returns:
        ExplorerConfig with file values layered over the defaults

    Raises:
        ValueError: If the file holds an invalid setting value
    """
    return ExplorerConfig.from_dict(_read_yaml(Path(config_path).expanduser()))


def save_config(config: ExplorerConfig, config_path: str = "config.yaml") -> None:
    """Write settings back, preserving unrelated top-level keys."""
    path = Path(config_path).expanduser()
    document: Dict[str, Any] = {}

    if path.exists():
        try:
            with open(path, "r", encoding="utf-8") as f:
                existing = yaml.safe_load(f) or {}
            if isinstance(existing, dict) and "fexplorer" in existing:
                document = existing
        except (OSError, yaml.YAMLError):
            document = {}

    document["fexplorer"] = config.to_dict()

    with open(path, "w", encoding="utf-8") as f:
        yaml.dump(document, f, default_flow_style=False)
