"""Convert SOAP result graphs into plain dicts, lists and scalars."""

from collections.abc import Mapping
from typing import Any, Dict, Optional, Set

from soap_rest.errors import ResultNormalizationError

MAX_DEPTH = 64

SCALAR_TYPES = (str, bytes, bytearray, int, float, complex, bool, type(None))


def _record_items(value: Any) -> Optional[Dict[str, Any]]:
    """Visible fields of a keyed record, or None if value is not one"""
    if isinstance(value, Mapping):
        return dict(value.items())

    # zeep CompoundValue keeps its fields in __values__
    values = getattr(value, "__values__", None)
    if isinstance(values, Mapping):
        return dict(values.items())

    if hasattr(value, "__dict__"):
        return {k: v for k, v in vars(value).items() if not k.startswith("_")}

    return None


def normalize(value: Any, max_depth: int = MAX_DEPTH) -> Any:
    """
    Normalize a result object graph

    Records (mappings and objects) become dicts of their visible fields,
    sequences become lists, anything else is returned unchanged.

    Raises:
        ResultNormalizationError: On a cycle or when nesting exceeds max_depth
    """
    return _normalize(value, 0, max_depth, set())


def _normalize(value: Any, depth: int, max_depth: int, visiting: Set[int]) -> Any:
    if isinstance(value, SCALAR_TYPES):
        return value

    if depth > max_depth:
        raise ResultNormalizationError(f"Result nesting exceeds {max_depth} levels")

    is_sequence = isinstance(value, (list, tuple, set, frozenset))
    items = None if is_sequence else _record_items(value)
    if not is_sequence and items is None:
        return value

    marker = id(value)
    if marker in visiting:
        raise ResultNormalizationError(
            f"Cycle detected in result at {type(value).__name__} object"
        )

    visiting.add(marker)
    try:
        if is_sequence:
            return [_normalize(item, depth + 1, max_depth, visiting) for item in value]
        return {
            key: _normalize(item, depth + 1, max_depth, visiting)
            for key, item in items.items()
        }
    finally:
        visiting.discard(marker)
