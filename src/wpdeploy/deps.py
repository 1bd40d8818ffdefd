# deps.py
from __future__ import annotations

from typing import Dict, List, Mapping, Protocol

from .errors import ConfigurationError
from .model import Mode, Operation, RequiredKeySpec

_DB_KEYS = ("url", "path", "db_host", "db_name", "db_user", "db_password")

_FILE_MODES: Dict[Mode, tuple[str, ...]] = {
    Mode.UPLOADS: ("uploads_path",),
    Mode.THEMES: ("themes_path",),
    Mode.PLUGINS: ("plugins_path",),
    Mode.CORE: ("path",),
}

DEPENDENCIES: Dict[Operation, RequiredKeySpec] = {
    Operation.PUSH: RequiredKeySpec(
        global_keys=("ssh_user", "host", "writable_path"),
        modes={Mode.DB: _DB_KEYS, **_FILE_MODES},
    ),
    Operation.PULL: RequiredKeySpec(
        global_keys=("ssh_user", "host"),
        modes={Mode.DB: ("writable_path",) + _DB_KEYS, **_FILE_MODES},
    ),
    Operation.DUMP: RequiredKeySpec(global_keys=("path", "url")),
}

OPTIONAL_KEYS = ("port", "post_hook", "excludes")


class EnvironmentSource(Protocol):
    def get(self, env: str, key: str) -> str | None: ...


def required_keys(operation: Operation, mode: Mode | None) -> List[str]:
    return DEPENDENCIES[operation].required(mode)


def definable_keys() -> List[str]:
    """Every key any operation or mode may read, plus the optional ones."""
    keys: List[str] = []
    for spec in DEPENDENCIES.values():
        keys.extend(k for k in spec.all_keys() if k not in keys)
    keys.extend(k for k in OPTIONAL_KEYS if k not in keys)
    return keys


def validate_config(
    source: EnvironmentSource,
    env: str,
    operation: Operation,
    mode: Mode | None = None,
) -> Dict[str, str]:
    """
    Check that `env` defines everything `operation`/`mode` needs.

    Returns every definable constant the environment sets (required or not).
    Raises ConfigurationError listing all missing keys at once.
    """
    required = set(required_keys(operation, mode))
    missing: List[str] = []
    constants: Dict[str, str] = {}

    for key in definable_keys():
        value = source.get(env, key)
        if value is None:
            if key in required:
                missing.append(key)
            continue
        constants[key] = value

    if missing:
        raise ConfigurationError(env=env, missing=missing)

    return constants


def recheck_resolved(
    resolved: Mapping[str, str],
    carriers: Mapping[str, str],
    env: str,
    operation: Operation,
    mode: Mode | None = None,
) -> None:
    """
    Make sure no required key vanished during resolution.

    `carriers` maps a constant name to the config key that carries its value
    (e.g. uploads_path -> uploads); unmapped constants carry themselves.
    """
    unresolved = [
        key
        for key in required_keys(operation, mode)
        if carriers.get(key, key) not in resolved
    ]
    if unresolved:
        raise ConfigurationError(env=env, unresolved=unresolved)
