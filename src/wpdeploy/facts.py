# facts.py
"""
Runtime facts seeded into the placeholder context.

Facts come from the invocation itself (env, command, what) and from quick
probes of the local WordPress install through wp-cli. A probe that fails
leaves its fact out, so templates referring to it resolve to "not set".
"""
from __future__ import annotations

import hashlib
import os
import shlex
import time
from datetime import datetime
from typing import Dict, Mapping, Optional

from .model import Mode, Operation
from .runner import Executor, get_result
from .settings import DATE_FORMAT, DEFAULT_PORT, WP_CLI


def trim_url(url: str) -> str:
    """Drop the scheme and trailing slash: https://a.org/ -> a.org"""
    for scheme in ("https://", "http://"):
        if url.startswith(scheme):
            url = url[len(scheme):]
            break
    return url.rstrip("/")


def _wp_eval(php: str, executor: Optional[Executor]) -> str:
    return get_result(f"{WP_CLI} eval {shlex.quote(php)}", executor)


def _physical_dir(path: str, executor: Optional[Executor]) -> str:
    if not path:
        return ""
    return get_result(f"cd {shlex.quote(path)} && pwd -P", executor).rstrip("/")


def local_paths(executor: Optional[Executor] = None) -> Dict[str, str]:
    """Locate the local install and its content dirs (symlinks resolved)."""
    abspath = _wp_eval("echo untrailingslashit(ABSPATH);", executor) or os.getcwd()
    dirs = {
        "local_uploads": _wp_eval('echo wp_upload_dir()["basedir"];', executor),
        "local_themes": _wp_eval("echo get_theme_root();", executor),
        "local_plugins": _wp_eval("echo WP_PLUGIN_DIR;", executor),
        "local_core": abspath,
    }
    paths = {"abspath": abspath.rstrip("/")}
    for key, path in dirs.items():
        physical = _physical_dir(path, executor)
        if physical:
            paths[key] = physical
    return paths


def install_hash(abspath: str) -> str:
    """Stable per-install suffix for the working directory."""
    return hashlib.sha1(abspath.encode("utf-8")).hexdigest()[:8]


def collect_facts(
    env: str,
    operation: Operation,
    mode: Mode | None,
    constants: Mapping[str, str],
    themename: str | None = None,
    executor: Optional[Executor] = None,
    now: Optional[datetime] = None,
) -> Dict[str, str]:
    """
    Build the placeholder context: validated constants plus runtime facts.

    Facts win over constants of the same name.
    """
    now = now or datetime.now()
    paths = local_paths(executor)

    facts: Dict[str, str] = dict(constants)
    facts.update(paths)
    facts.update({
        "env": env,
        "command": operation.value,
        "what": mode.value if mode is not None else "",
        "excludes": constants.get("excludes", ""),
        "port": constants.get("port") or DEFAULT_PORT,
        "hash": install_hash(paths["abspath"]),
        "pretty_date": now.strftime(DATE_FORMAT),
        "rand": hashlib.sha1(str(time.time()).encode("utf-8")).hexdigest()[:8],
    })
    if themename:
        facts["themename"] = themename

    hostname = get_result("hostname", executor)
    if hostname:
        facts["hostname"] = hostname

    siteurl = get_result(f"{WP_CLI} option get siteurl", executor)
    if siteurl:
        facts["siteurl"] = trim_url(siteurl)

    return facts
