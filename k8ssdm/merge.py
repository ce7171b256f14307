"""
Merge helpers for partial Kubernetes resource specs.
"""

import copy
from typing import Any, Dict, Sequence, Union

Path = Union[str, Sequence[str]]


def _split(path: Path) -> Sequence[str]:
    if isinstance(path, str):
        return [p for p in path.split(".") if p]
    return list(path)


def merge_defaults(existing: Any, defaults: Any) -> Any:
    """
    Merge defaults into an existing value without losing anything already set.

    Mappings are merged key by key, lists are concatenated with the existing
    entries first, and for any other value the existing one wins unless it is
    None. Neither argument is modified.

    Args:
        existing: Value already present (may be None)
        defaults: Value supplying missing keys and extra list entries

    Returns:
        Newly built merged value
    """
    if existing is None:
        return copy.deepcopy(defaults)
    if defaults is None:
        return copy.deepcopy(existing)

    if isinstance(existing, dict) and isinstance(defaults, dict):
        merged = {k: copy.deepcopy(v) for k, v in existing.items()}
        for key, value in defaults.items():
            merged[key] = merge_defaults(existing.get(key), value)
        return merged

    if isinstance(existing, list) and isinstance(defaults, list):
        return copy.deepcopy(existing) + copy.deepcopy(defaults)

    return copy.deepcopy(existing)


def get_in(data: Any, path: Path, default: Any = None) -> Any:
    """Read a nested key path such as "spec.template.spec"."""
    current = data
    for key in _split(path):
        if not isinstance(current, dict) or current.get(key) is None:
            return default
        current = current[key]
    return current


def set_in(data: Any, path: Path, value: Any) -> Dict[str, Any]:
    """Return a copy of data with the nested key path set to value."""
    keys = _split(path)
    result = copy.deepcopy(data) if isinstance(data, dict) else {}
    current = result
    for key in keys[:-1]:
        if not isinstance(current.get(key), dict):
            current[key] = {}
        current = current[key]
    current[keys[-1]] = copy.deepcopy(value)
    return result
