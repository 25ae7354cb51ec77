"""JSONL event sink and per-run Plotly report generator."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Protocol

import pandas as pd
import plotly.express as px

from yieldpool.domain.events import PoolEvent


class EventSink(Protocol):
    """Destination for structured pool events."""

    def emit(self, event: PoolEvent) -> None:
        """Record one event."""


class NullEventSink:
    """Sink that drops every event."""

    def emit(self, event: PoolEvent) -> None:
        _ = event


class JsonlEventSink:
    """Append-only JSONL writer."""

    def __init__(self, path: str) -> None:
        output_path = Path(path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        self.path = output_path

    def emit(self, event: PoolEvent) -> None:
        record = event.to_record()
        with self.path.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(record, sort_keys=True))
            handle.write("\n")


def load_events(path: str | Path) -> list[dict[str, Any]]:
    """Load JSONL records from disk."""
    records: list[dict[str, Any]] = []
    input_path = Path(path)
    if not input_path.exists():
        return records
    with input_path.open("r", encoding="utf-8") as handle:
        for line in handle:
            text = line.strip()
            if not text:
                continue
            records.append(json.loads(text))
    return records


def events_frame(events: list[dict[str, Any]]) -> pd.DataFrame:
    """Flatten event records into one row per event with pool totals."""
    rows: list[dict[str, Any]] = []
    for event in events:
        payload = event.get("payload", {})
        rows.append(
            {
                "ts": event.get("ts"),
                "event_type": event.get("event_type"),
                "total_assets": payload.get("total_assets"),
                "total_shares": payload.get("total_shares"),
                "idle_balance": payload.get("idle_balance"),
            }
        )
    frame = pd.DataFrame(
        rows,
        columns=["ts", "event_type", "total_assets", "total_shares", "idle_balance"],
    )
    frame["ts"] = pd.to_datetime(frame["ts"], utc=True, errors="coerce")
    return frame


def generate_plotly_report(events_jsonl_path: str, output_html_path: str) -> None:
    """Render pool totals over time and event counts."""
    events = load_events(events_jsonl_path)
    output = Path(output_html_path)
    output.parent.mkdir(parents=True, exist_ok=True)
    if not events:
        empty_df = pd.DataFrame({"event_type": ["none"], "count": [0]})
        figure = px.bar(empty_df, x="event_type", y="count", title="Pool Event Summary")
        figure.write_html(str(output), include_plotlyjs="cdn")
        return

    frame = events_frame(events)
    summary = frame.groupby("event_type", dropna=False).size().reset_index(name="count")
    totals = frame.dropna(subset=["total_assets"]).melt(
        id_vars=["ts", "event_type"],
        value_vars=["total_assets", "total_shares", "idle_balance"],
        var_name="series",
        value_name="amount",
    )
    timeline = px.line(
        totals,
        x="ts",
        y="amount",
        color="series",
        markers=True,
        title="Pool Totals",
        hover_data=["event_type"],
    )
    bars = px.bar(summary, x="event_type", y="count", title="Pool Event Counts")
    html_parts = [
        "<html><head><meta charset='utf-8'><title>yieldpool report</title></head><body>",
        timeline.to_html(full_html=False, include_plotlyjs="cdn"),
        bars.to_html(full_html=False, include_plotlyjs=False),
        "</body></html>",
    ]
    output.write_text("".join(html_parts), encoding="utf-8")
