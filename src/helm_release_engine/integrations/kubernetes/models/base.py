"""Helpers for reading kubernetes SDK objects."""

from __future__ import annotations

from typing import Any


def _safe_get(obj: Any, *attrs: str, default: Any = None) -> Any:
    """Safely traverse nested attributes on kubernetes SDK objects."""
    current = obj
    for attr in attrs:
        if current is None:
            return default
        current = getattr(current, attr, None)
    return current if current is not None else default


def _get_labels(obj: Any) -> dict[str, str]:
    """Extract labels dict, returning an empty dict when unset."""
    labels = _safe_get(obj, "metadata", "labels")
    return dict(labels) if labels else {}


def _get_annotations(obj: Any) -> dict[str, str]:
    """Extract annotations dict, returning an empty dict when unset."""
    annotations = _safe_get(obj, "metadata", "annotations")
    return dict(annotations) if annotations else {}
