"""Environment runtime configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from typing import Self

from dotenv import load_dotenv

from yieldpool.domain.models import PlacementPolicy
from yieldpool.strategies.lending_pool import MAX_REFERRAL_CODE


def parse_bool(value: str | None, default: bool) -> bool:
    """Parse truthy environment strings."""
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "y", "on"}


def parse_optional_index(value: str | None, *, field_name: str) -> int | None:
    """Parse optional non-negative integer values from env strings."""
    if value is None:
        return None
    text = value.strip()
    if not text:
        return None
    parsed = int(text)
    if parsed < 0:
        raise ValueError(f"{field_name} must be non-negative")
    return parsed


def normalize_placement_policy(value: str | None, default: str = "first_active") -> str:
    """Normalize placement policy names and common aliases."""
    mapping = {
        "first": "first_active",
        "first_active": "first_active",
        "proportional": "proportional",
        "pro_rata": "proportional",
        "explicit": "explicit_target",
        "explicit_target": "explicit_target",
        "target": "explicit_target",
    }
    if value is None or not value.strip():
        return default
    candidate = value.strip().lower().replace("-", "_")
    return mapping.get(candidate, candidate)


@dataclass(frozen=True)
class Settings:
    """Immutable pool settings."""

    pool_name: str = "Yield Pool Share"
    pool_symbol: str = "ypS"
    placement_policy: str = "first_active"
    placement_target: int | None = None
    allow_idle_deposits: bool = False
    referral_code: int = 0
    log_level: str = "INFO"
    events_dir: str = "runs"
    record_events: bool = False

    @classmethod
    def from_env(cls) -> Self:
        """Create settings from environment variables."""
        load_dotenv()
        raw = cls(
            pool_name=str(os.getenv("POOL_NAME", "Yield Pool Share")).strip(),
            pool_symbol=str(os.getenv("POOL_SYMBOL", "ypS")).strip(),
            placement_policy=normalize_placement_policy(os.getenv("PLACEMENT_POLICY")),
            placement_target=parse_optional_index(
                os.getenv("PLACEMENT_TARGET"),
                field_name="placement_target",
            ),
            allow_idle_deposits=parse_bool(os.getenv("ALLOW_IDLE_DEPOSITS"), False),
            referral_code=int(os.getenv("LENDING_REFERRAL_CODE", "0")),
            log_level=str(os.getenv("LOG_LEVEL", "INFO")).strip().upper(),
            events_dir=str(os.getenv("EVENTS_DIR", "runs")).strip(),
            record_events=parse_bool(os.getenv("RECORD_EVENTS"), False),
        )
        return raw.validate()

    def with_overrides(self, **kwargs: object) -> Self:
        """Return a new settings object with updated values."""
        overrides = dict(kwargs)
        policy_override = overrides.get("placement_policy")
        if isinstance(policy_override, str):
            overrides["placement_policy"] = normalize_placement_policy(policy_override)
        updated = replace(self, **overrides)
        return updated.validate()

    def placement(self) -> PlacementPolicy:
        return PlacementPolicy(self.placement_policy)

    def validate(self) -> Self:
        """Validate settings fields."""
        supported = {item.value for item in PlacementPolicy}
        if self.placement_policy not in supported:
            raise ValueError(
                f"placement_policy must be one of {', '.join(sorted(supported))}"
            )
        if self.placement_policy == PlacementPolicy.EXPLICIT_TARGET and self.placement_target is None:
            raise ValueError("placement_target is required for explicit_target placement")
        if self.placement_target is not None and self.placement_target < 0:
            raise ValueError("placement_target must be non-negative")
        if self.referral_code < 0 or self.referral_code > MAX_REFERRAL_CODE:
            raise ValueError(f"referral_code must be between 0 and {MAX_REFERRAL_CODE}")
        if not self.pool_name:
            raise ValueError("pool_name must not be empty")
        if not self.pool_symbol:
            raise ValueError("pool_symbol must not be empty")
        if self.log_level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError("log_level must be a standard logging level name")
        return self
