"""Runtime configuration for the Tyr VM.

Values are layered: built-in defaults, then environment variables, then
explicit overrides (the CLI passes its options here).

Supported environment variables:
- TYR_STACK_SIZE: operand stack capacity (default 50)
- TYR_MAX_STEPS: instruction budget for a run, unset for unlimited
- TYR_TRACE: log every executed instruction (true/false, yes/no, on/off, 1/0)
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Dict, Mapping, Optional
import os

from .errors import ConfigError

DEFAULT_STACK_SIZE = 50

_ENV_KEYS = {
    "TYR_STACK_SIZE": "stack_size",
    "TYR_MAX_STEPS": "max_steps",
    "TYR_TRACE": "trace",
}


@dataclass(frozen=True)
class VMConfig:
    stack_size: int = DEFAULT_STACK_SIZE
    max_steps: Optional[int] = None
    trace: bool = False

    def __post_init__(self):
        if isinstance(self.stack_size, bool) or not isinstance(self.stack_size, int) or self.stack_size < 1:
            raise ConfigError(f"stack_size must be a positive integer, got {self.stack_size!r}")
        if self.max_steps is not None and (
            isinstance(self.max_steps, bool) or not isinstance(self.max_steps, int) or self.max_steps < 0
        ):
            raise ConfigError(f"max_steps must be a non-negative integer, got {self.max_steps!r}")
        if not isinstance(self.trace, bool):
            raise ConfigError(f"trace must be a boolean, got {self.trace!r}")


def _parse_value(raw: str) -> Any:
    lowered = raw.strip().lower()
    if lowered in ("true", "yes", "on"):
        return True
    if lowered in ("false", "no", "off"):
        return False
    try:
        return int(lowered)
    except ValueError:
        return raw.strip()


def config_from_env(environ: Optional[Mapping[str, str]] = None) -> Dict[str, Any]:
    """Collect VMConfig fields from ``TYR_*`` variables."""
    environ = os.environ if environ is None else environ
    values: Dict[str, Any] = {}
    for env_key, field_name in _ENV_KEYS.items():
        raw = environ.get(env_key)
        if raw is None or not raw.strip():
            continue
        value = _parse_value(raw)
        if field_name == "trace" and isinstance(value, int) and not isinstance(value, bool):
            value = bool(value)
        values[field_name] = value
    return values


def load_config(environ: Optional[Mapping[str, str]] = None, **overrides: Any) -> VMConfig:
    """Build a VMConfig from defaults, the environment and non-None overrides."""
    unknown = set(overrides) - set(_ENV_KEYS.values())
    if unknown:
        raise ConfigError(f"Unknown configuration keys: {', '.join(sorted(unknown))}")

    values = config_from_env(environ)
    values.update({key: value for key, value in overrides.items() if value is not None})
    return replace(VMConfig(), **values)
