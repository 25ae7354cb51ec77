"""Logging helpers."""

from .event_sink import EventSink, JsonlEventSink, NullEventSink, generate_plotly_report, load_events
from .logger import PoolLogger

__all__ = [
    "EventSink",
    "JsonlEventSink",
    "NullEventSink",
    "PoolLogger",
    "generate_plotly_report",
    "load_events",
]
