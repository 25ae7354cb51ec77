"""Concise human-readable pool logger."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any


class PoolLogger:
    """Console logger with fixed line types."""

    def __init__(self, level: str = "INFO", decimals: int = 0) -> None:
        self.decimals = decimals
        self._logger = logging.getLogger("yieldpool")
        self._logger.setLevel(getattr(logging, level.upper(), logging.INFO))
        self._logger.propagate = False
        if not self._logger.handlers:
            handler = logging.StreamHandler()
            formatter = logging.Formatter("%(asctime)s | %(message)s", "%Y-%m-%d %H:%M:%S")
            handler.setFormatter(formatter)
            self._logger.addHandler(handler)

    @property
    def logger(self) -> logging.Logger:
        return self._logger

    def deposit(self, caller: str, receiver: str, assets: int, shares: int) -> None:
        self._logger.info(
            "deposit | %s -> %s | assets %s | shares %s",
            self._short_id(caller),
            self._short_id(receiver),
            self._format_amount(assets),
            self._format_amount(shares),
        )

    def withdraw(
        self,
        owner: str,
        receiver: str,
        assets: int,
        shares: int,
        pulled: Mapping[int, int] | None = None,
    ) -> None:
        parts = [
            f"withdraw | {self._short_id(owner)} -> {self._short_id(receiver)}",
            f"assets {self._format_amount(assets)}",
            f"shares {self._format_amount(shares)}",
        ]
        if pulled:
            sources = ", ".join(
                f"#{index} {self._format_amount(amount)}" for index, amount in pulled.items()
            )
            parts.append(f"pulled {sources}")
        self._logger.info(" | ".join(parts))

    def placement(self, allocations: Mapping[int, int]) -> None:
        for index, amount in allocations.items():
            self._logger.debug("placement | #%s | %s", index, self._format_amount(amount))

    def rebalance(self, from_index: int, to_index: int, amount: int) -> None:
        self._logger.info(
            "rebalance | #%s -> #%s | %s",
            from_index,
            to_index,
            self._format_amount(amount),
        )

    def strategy_added(self, index: int, details: Mapping[str, Any]) -> None:
        self._logger.info(
            "strategy added | #%s | %s | %s",
            index,
            details.get("adapter_id", "?"),
            self._short_id(str(details.get("address", ""))),
        )

    def strategy_removed(self, index: int, forced: bool, stranded: int | None) -> None:
        parts = [f"strategy removed | #{index}"]
        if forced:
            parts.append("forced")
            if stranded is None:
                parts.append("stranded unknown")
            elif stranded > 0:
                parts.append(f"stranded {self._format_amount(stranded)}")
        self._logger.info(" | ".join(parts))
        if forced and stranded:
            self._logger.warning(
                "stranded | #%s | %s excluded from total assets",
                index,
                self._format_amount(stranded),
            )

    def totals(self, idle: int, total_assets: int, total_shares: int) -> None:
        self._logger.debug(
            "totals | idle %s | assets %s | shares %s",
            self._format_amount(idle),
            self._format_amount(total_assets),
            self._format_amount(total_shares),
        )

    def error(self, message: str) -> None:
        self._logger.error("error | %s", message)

    @staticmethod
    def _short_id(value: str | None, head: int = 8, tail: int = 4) -> str:
        if not value:
            return ""
        text = str(value)
        if len(text) <= head + tail + 1:
            return text
        return f"{text[:head]}...{text[-tail:]}"

    def _format_amount(self, value: int) -> str:
        if self.decimals <= 0:
            return f"{value:,}"
        whole, fraction = divmod(int(value), 10**self.decimals)
        fraction_text = f"{fraction:0{self.decimals}d}".rstrip("0")
        if not fraction_text:
            return f"{whole:,}"
        return f"{whole:,}.{fraction_text}"
