"""
Tests for Definition validation and MODULE:ATTR loading.
"""

import pytest

from effect_engine.cli.loader import load_definition, parse_signal
from effect_engine.core import Definition
from effect_engine.core.errors import DefinitionLoadError, InvalidDefinitionError
from effect_engine.tests.machines import PING_DEFINITION


def test_definition_rejects_non_callable_member():
    with pytest.raises(InvalidDefinitionError, match="effects_at"):
        Definition(
            initiate=lambda: None,
            transition=lambda state, signal: state,
            effects_at={},
            run_effect=lambda effect, state, key: None,
        )


def test_load_definition_attribute():
    assert load_definition("effect_engine.tests.machines:PING_DEFINITION") is PING_DEFINITION


def test_load_definition_factory():
    assert load_definition("effect_engine.tests.machines:make_ping_definition") is PING_DEFINITION


@pytest.mark.parametrize(
    "ref",
    [
        "effect_engine.tests.machines",
        ":PING_DEFINITION",
        "effect_engine.tests.machines:",
        "effect_engine.no_such_module:thing",
        "effect_engine.tests.machines:MISSING",
        "effect_engine.tests.machines:NOT_A_DEFINITION",
    ],
)
def test_load_definition_rejects_bad_references(ref):
    with pytest.raises(DefinitionLoadError):
        load_definition(ref)


def test_parse_signal_json():
    assert parse_signal('{"type": "set", "value": 3}') == {"type": "set", "value": 3}
    assert parse_signal("42") == 42
    assert parse_signal('"quoted"') == "quoted"


def test_parse_signal_plain_string():
    assert parse_signal("toggle") == "toggle"
