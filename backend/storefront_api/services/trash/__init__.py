"""
Trash core: entity registry, record store, lifecycle manager, retention sweeper.
"""

from .registry import (
    ENTITY_REGISTRY,
    EntityConfig,
    EntityType,
    all_entity_types,
    get_entity_config,
    parse_entity_type,
)
from .store import RecordStore
from .audit import Actor, LogEntry, TrashLog
from .lifecycle import ALL, TrashedItem, TrashLifecycleManager, group_by_type
from .sweeper import RetentionSweeper, SweepResult

__all__ = [
    "ENTITY_REGISTRY",
    "EntityConfig",
    "EntityType",
    "all_entity_types",
    "get_entity_config",
    "parse_entity_type",
    "RecordStore",
    "Actor",
    "LogEntry",
    "TrashLog",
    "ALL",
    "TrashedItem",
    "TrashLifecycleManager",
    "group_by_type",
    "RetentionSweeper",
    "SweepResult",
]
