# fexplorer - Core Module
"""
Core infrastructure for fexplorer.
Configuration loading and the audit log shared by the explorer and the CLI.
"""

from .config import ExplorerConfig, AuditConfig, load_config, save_config
from .logger import AuditLogger, AuditEntry, ActionType, ActionStatus

__all__ = [
    "ExplorerConfig",
    "AuditConfig",
    "load_config",
    "save_config",
    "AuditLogger",
    "AuditEntry",
    "ActionType",
    "ActionStatus",
]

__version__ = "0.1.0"
