"""Adapter discovery for stable adapter selection."""

from __future__ import annotations

import importlib
import inspect
import pkgutil
from collections.abc import Callable
from functools import lru_cache
from pathlib import Path

from yieldpool.errors import ConfigurationError
from yieldpool.strategies.base import StrategyAdapter

AdapterFactory = Callable[..., StrategyAdapter]
_SKIPPED_MODULES = {
    "__init__",
    "base",
    "catalog",
    "registry",
}


def _adapters_package_name() -> str:
    return __name__.rsplit(".", 1)[0]


def _adapters_directory() -> Path:
    return Path(__file__).resolve().parent


def _iter_adapter_module_names() -> list[str]:
    names: list[str] = []
    for module in pkgutil.iter_modules([str(_adapters_directory())]):
        name = module.name
        if name.startswith("_") or name in _SKIPPED_MODULES:
            continue
        names.append(name)
    return sorted(names)


def _normalize_adapter_id(value: str) -> str:
    return value.strip().lower().replace("-", "_")


def _build_adapter(
    adapter_type: type[StrategyAdapter],
    dependencies: dict[str, object],
) -> StrategyAdapter:
    signature = inspect.signature(adapter_type)
    kwargs: dict[str, object] = {}

    for parameter in signature.parameters.values():
        if parameter.kind in {inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD}:
            continue
        if parameter.name in dependencies:
            kwargs[parameter.name] = dependencies[parameter.name]
            continue
        if parameter.default is inspect.Signature.empty:
            raise ConfigurationError(
                f"Adapter '{adapter_type.adapter_id}' requires dependency '{parameter.name}'."
            )

    unused = sorted(set(dependencies) - set(kwargs))
    if unused:
        raise ConfigurationError(
            f"Adapter '{adapter_type.adapter_id}' does not accept: {', '.join(unused)}"
        )
    return adapter_type(**kwargs)


def _adapter_types_in_module(module: object) -> list[type[StrategyAdapter]]:
    discovered: list[type[StrategyAdapter]] = []
    module_name = getattr(module, "__name__", "")
    for _, candidate in inspect.getmembers(module, inspect.isclass):
        if candidate is StrategyAdapter or not issubclass(candidate, StrategyAdapter):
            continue
        if candidate.__module__ != module_name or inspect.isabstract(candidate):
            continue
        adapter_id = getattr(candidate, "adapter_id", None)
        if not isinstance(adapter_id, str) or not adapter_id.strip():
            continue
        discovered.append(candidate)
    return discovered


@lru_cache(maxsize=1)
def _discover_catalog() -> tuple[dict[str, type[StrategyAdapter]], dict[str, str]]:
    package_name = _adapters_package_name()
    catalog: dict[str, type[StrategyAdapter]] = {}
    load_errors: dict[str, str] = {}

    for module_name in _iter_adapter_module_names():
        import_path = f"{package_name}.{module_name}"
        try:
            module = importlib.import_module(import_path)
        except Exception as exc:  # pragma: no cover
            load_errors[module_name] = f"{type(exc).__name__}: {exc}"
            continue

        for adapter_type in _adapter_types_in_module(module):
            adapter_id = _normalize_adapter_id(adapter_type.adapter_id)
            if adapter_id in catalog:
                raise ConfigurationError(f"Duplicate adapter id discovered: '{adapter_id}'")
            catalog[adapter_id] = adapter_type

    return catalog, load_errors


def available_adapter_ids() -> list[str]:
    """Return supported adapter ids."""
    catalog, _ = _discover_catalog()
    return sorted(catalog.keys())


def adapter_type(adapter_id: str) -> type[StrategyAdapter]:
    """Resolve an adapter class from its stable id."""
    normalized = _normalize_adapter_id(adapter_id)
    catalog, load_errors = _discover_catalog()
    candidate = catalog.get(normalized)
    if candidate is not None:
        return candidate
    supported = ", ".join(available_adapter_ids())
    load_error = load_errors.get(normalized)
    if load_error is not None:
        raise ConfigurationError(f"Adapter '{adapter_id}' could not be loaded: {load_error}")
    raise ConfigurationError(f"Unknown adapter '{adapter_id}'. Supported: {supported}")


def create_adapter(adapter_id: str, **dependencies: object) -> StrategyAdapter:
    """Build an adapter from its stable id, matching constructor parameters by name."""
    return _build_adapter(adapter_type(adapter_id), dict(dependencies))
