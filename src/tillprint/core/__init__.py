"""Core framework components for tillprint."""

from .events import EventBus, Event, EventType
from .storage import SettingsStore

__all__ = ["EventBus", "Event", "EventType", "SettingsStore"]
