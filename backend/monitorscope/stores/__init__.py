"""Persistence for targets, check history and alerts."""
from .targets import TargetStore
from .history import HistoryStore
from .alerts import AlertStore

__all__ = ["TargetStore", "HistoryStore", "AlertStore"]
