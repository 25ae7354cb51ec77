"""Pool wiring from settings."""

from __future__ import annotations

from pathlib import Path
from typing import Any
from uuid import uuid4

from yieldpool.config import Settings
from yieldpool.domain.models import Address
from yieldpool.logging.event_sink import EventSink, JsonlEventSink, NullEventSink
from yieldpool.logging.logger import PoolLogger
from yieldpool.pool.placement import build_placement
from yieldpool.pool.vault import Pool
from yieldpool.strategies.catalog import create_adapter
from yieldpool.strategies.lending_pool import LendingPoolAdapter
from yieldpool.tokens.base import Token


def events_path(settings: Settings, run_id: str) -> Path:
    return Path(settings.events_dir) / run_id / "events.jsonl"


def build_event_sink(settings: Settings, run_id: str | None = None) -> EventSink:
    """Return a JSONL sink under `events_dir/<run_id>` when recording is enabled."""
    if not settings.record_events:
        return NullEventSink()
    return JsonlEventSink(str(events_path(settings, run_id or uuid4().hex)))


def build_pool(
    settings: Settings,
    token: Token,
    owner: Address,
    address: Address | None = None,
    event_sink: EventSink | None = None,
) -> Pool:
    """Construct a pool configured from settings."""
    placement = build_placement(settings.placement(), settings.placement_target)
    return Pool(
        address=address or f"pool:{uuid4().hex}",
        token=token,
        owner=owner,
        placement=placement,
        allow_idle_deposits=settings.allow_idle_deposits,
        event_sink=event_sink or build_event_sink(settings),
        logger=PoolLogger(level=settings.log_level, decimals=token.decimals),
        name=settings.pool_name,
        symbol=settings.pool_symbol,
    )


def strategy_config(settings: Settings, adapter_id: str) -> dict[str, Any]:
    """Connect options the settings imply for one adapter kind."""
    if adapter_id == LendingPoolAdapter.adapter_id:
        return {"referral_code": settings.referral_code}
    return {}


def add_strategy(
    pool: Pool,
    settings: Settings,
    caller: Address,
    adapter_id: str,
    address: Address,
    **dependencies: Any,
) -> int:
    """Build an adapter for the pool's token and register it with settings-driven options."""
    adapter = create_adapter(adapter_id, address=address, token=pool.token, **dependencies)
    return pool.add_strategy(caller, adapter, strategy_config(settings, adapter.adapter_id))
