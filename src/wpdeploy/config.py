# config.py
from __future__ import annotations

from datetime import datetime
from typing import Dict, Mapping, Optional

from .deps import EnvironmentSource, recheck_resolved, validate_config
from .facts import collect_facts
from .model import Mode, Operation, ResolvedConfig
from .placeholders import resolve, resolve_one
from .runner import Executor

# Keys the deploy workflows read. Values are templates over the environment
# constants and the runtime facts; anything that never resolves is dropped.
DEFAULT_TEMPLATES: Dict[str, str] = {
    "env": "%%env%%",

    # remote
    "host": "%%host%%",
    "ssh_user": "%%ssh_user%%",
    "writable_path": "%%writable_path%%",
    "url": "%%url%%",
    "path": "%%path%%",
    "uploads": "%%uploads_path%%",
    "themes": "%%themes_path%%",
    "plugins": "%%plugins_path%%",
    "db_host": "%%db_host%%",
    "db_name": "%%db_name%%",
    "db_user": "%%db_user%%",
    "db_password": "%%db_password%%",

    # optional
    "port": "%%port%%",
    "excludes": "%%excludes%%",
    "themename": "%%themename%%",

    # local
    "command": "%%command%%",
    "what": "%%what%%",
    "abspath": "%%abspath%%",
    "wd": "%%abspath%%/%%env%%_%%hash%%",
    "timestamp": "%%pretty_date%%",
    "tmp_path": "%%wd%%/tmp",
    "bk_path": "%%wd%%/bk",
    "tmp": "%%tmp_path%%/%%rand%%",
    "local_hostname": "%%hostname%%",
    "ssh": "%%ssh_user%%@%%host%%",
    "local_uploads": "%%local_uploads%%",
    "local_themes": "%%local_themes%%",
    "local_plugins": "%%local_plugins%%",
    "local_core": "%%local_core%%",
    "siteurl": "%%siteurl%%",
}

# constant name -> config key carrying its value, where they differ
CARRIERS: Dict[str, str] = {
    "uploads_path": "uploads",
    "themes_path": "themes",
    "plugins_path": "plugins",
}


def expand(
    constants: Mapping[str, str],
    facts: Mapping[str, str],
    templates: Optional[Mapping[str, str]] = None,
) -> ResolvedConfig:
    """Resolve the template map against constants overlaid with facts."""
    context = {**constants, **facts}
    resolved = resolve(templates if templates is not None else DEFAULT_TEMPLATES, context)
    return ResolvedConfig(resolved)


def post_hook_command(config: Mapping[str, str], hook: str | None) -> str | None:
    """Final pass: the hook may reference any resolved key, derived ones included."""
    if not hook:
        return None
    return resolve_one(hook, config)


def build_config(
    source: EnvironmentSource,
    env: str,
    operation: Operation,
    mode: Mode | None = None,
    *,
    themename: str | None = None,
    executor: Optional[Executor] = None,
    now: Optional[datetime] = None,
) -> tuple[ResolvedConfig, str | None]:
    """
    Validate, gather facts and resolve the config for one invocation.

    Returns the resolved config and the resolved post hook (None when unset).
    Raises ConfigurationError before any probe runs when constants are missing.
    """
    constants = validate_config(source, env, operation, mode)
    facts = collect_facts(
        env,
        operation,
        mode,
        constants,
        themename=themename,
        executor=executor,
        now=now,
    )
    config = expand(constants, facts)
    recheck_resolved(config, CARRIERS, env, operation, mode)
    return config, post_hook_command(config, constants.get("post_hook"))
