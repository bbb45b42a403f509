"""
Resolve MODULE:ATTR references and command-line signals.
"""

import importlib
import json
from typing import Any

from ..core.errors import DefinitionLoadError
from ..core.types import Definition


def load_definition(ref: str) -> Definition:
    """
    Import a Definition from a "package.module:attribute" reference.

    The attribute may be a Definition or a zero-argument factory returning one.
    Dotted attributes ("module:Class.attr") are followed.

    Raises:
        DefinitionLoadError: If the reference is malformed or does not
            resolve to a Definition
    """
    module_name, sep, attr_path = ref.partition(":")
    if not sep or not module_name or not attr_path:
        raise DefinitionLoadError(f"Expected MODULE:ATTR, got {ref!r}")

    try:
        obj: Any = importlib.import_module(module_name)
    except ImportError as e:
        raise DefinitionLoadError(f"Cannot import {module_name!r}: {e}") from e

    for part in attr_path.split("."):
        try:
            obj = getattr(obj, part)
        except AttributeError as e:
            raise DefinitionLoadError(f"{module_name!r} has no attribute {attr_path!r}") from e

    if not isinstance(obj, Definition) and callable(obj):
        obj = obj()
    if not isinstance(obj, Definition):
        raise DefinitionLoadError(f"{ref!r} is not a Definition (got {type(obj).__name__})")
    return obj


def parse_signal(text: str) -> Any:
    """Parse a signal given as JSON; anything else is taken as a plain string."""
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        return text
