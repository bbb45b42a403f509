"""
Canonical JSON rendering of states, signals and events.

States and effects are opaque to the engine, so rendering is best effort:
dataclasses and mappings become sorted objects, sets become sorted lists,
exceptions become their repr, anything else unknown becomes its repr.
"""

import dataclasses
import json
from collections.abc import Mapping
from typing import Any, Optional


def canonicalize(obj: Any) -> Any:
    """
    Convert arbitrary nested values to a JSON-safe canonical form.

    Rules:
    - dict keys stringified and sorted
    - dataclass instances converted field by field
    - tuples converted to lists, sets to sorted lists
    - exceptions and other unknown objects rendered via repr()
    """
    if obj is None or isinstance(obj, (bool, int, float, str)):
        return obj
    if isinstance(obj, BaseException):
        return repr(obj)
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        names = sorted(f.name for f in dataclasses.fields(obj))
        return {name: canonicalize(getattr(obj, name)) for name in names}
    if isinstance(obj, Mapping):
        return {str(k): canonicalize(obj[k]) for k in sorted(obj.keys(), key=str)}
    if isinstance(obj, (list, tuple)):
        return [canonicalize(x) for x in obj]
    if isinstance(obj, (set, frozenset)):
        return sorted((canonicalize(x) for x in obj), key=lambda x: json.dumps(x, sort_keys=True))
    return repr(obj)


def canonical_json_str(obj: Any, indent: Optional[int] = None) -> str:
    """
    Deterministic JSON string (for display or comparison).

    Guarantees:
    - sort_keys=True (secondary safety)
    - compact separators unless indent is given
    - ensure_ascii=False keeps UTF-8 stable
    """
    canon = canonicalize(obj)
    if indent is not None:
        return json.dumps(canon, sort_keys=True, indent=indent, ensure_ascii=False)
    return json.dumps(canon, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
