"""Configuration layering: defaults, TYR_* environment, explicit overrides."""

import pytest

from tyr.config import DEFAULT_STACK_SIZE, VMConfig, config_from_env, load_config
from tyr.errors import ConfigError


def test_defaults():
    config = load_config(environ={})
    assert config == VMConfig()
    assert config.stack_size == DEFAULT_STACK_SIZE == 50
    assert config.max_steps is None
    assert config.trace is False


def test_environment_values():
    env = {"TYR_STACK_SIZE": "8", "TYR_MAX_STEPS": "100", "TYR_TRACE": "yes"}
    assert config_from_env(env) == {"stack_size": 8, "max_steps": 100, "trace": True}

    config = load_config(environ=env)
    assert (config.stack_size, config.max_steps, config.trace) == (8, 100, True)


def test_numeric_trace_flag():
    assert load_config(environ={"TYR_TRACE": "0"}).trace is False
    assert load_config(environ={"TYR_TRACE": "1"}).trace is True


def test_overrides_beat_environment():
    config = load_config(environ={"TYR_STACK_SIZE": "8"}, stack_size=16, max_steps=None)
    assert config.stack_size == 16
    assert config.max_steps is None


@pytest.mark.parametrize("env", [
    {"TYR_STACK_SIZE": "0"},
    {"TYR_STACK_SIZE": "lots"},
    {"TYR_MAX_STEPS": "-1"},
    {"TYR_TRACE": "maybe"},
])
def test_invalid_environment(env):
    with pytest.raises(ConfigError):
        load_config(environ=env)


def test_unknown_override():
    with pytest.raises(ConfigError):
        load_config(environ={}, heap_size=10)
