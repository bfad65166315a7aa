"""Layering of YAML mappings."""

from __future__ import annotations

from typing import Any


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Return ``override`` layered over ``base`` as a new mapping.

    Nested mappings merge key by key. Any other value in ``override``,
    lists included, replaces the base value. The result shares no nested
    mapping with either input.
    """
    merged = {key: _copy(value) for key, value in base.items()}
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = deep_merge(current, value)
        else:
            merged[key] = _copy(value)
    return merged


def _copy(value: Any) -> Any:
    return deep_merge(value, {}) if isinstance(value, dict) else value
