# workflows/files.py
from __future__ import annotations

import os
import shlex
from typing import Dict, List, Tuple

from ..dsl import core_excludes, rsync, sh
from ..errors import UnknownThemeError
from ..model import Artifact, DeployOptions, Mode, ResolvedConfig
from ..runner import Runner
from .db import need

# mode -> (local dir key, remote dir key)
TARGETS: Dict[Mode, Tuple[str, str]] = {
    Mode.UPLOADS: ("local_uploads", "uploads"),
    Mode.THEMES: ("local_themes", "themes"),
    Mode.PLUGINS: ("local_plugins", "plugins"),
    Mode.CORE: ("local_core", "path"),
}


def _dirs(mode: Mode, c: ResolvedConfig, opts: DeployOptions) -> Tuple[str, str]:
    local_key, remote_key = TARGETS[mode]
    need(c, local_key, remote_key)
    local, remote = c[local_key], c[remote_key]

    if mode is Mode.THEMES and opts.themename:
        local = f"{local}/{opts.themename}"
        remote = f"{remote}/{opts.themename}"
    return local, remote


def _excludes(mode: Mode, c: ResolvedConfig) -> List[str] | str:
    if mode is Mode.CORE:
        return core_excludes(c.get("excludes"))
    return c.get("excludes", "")


def push_files(mode: Mode, c: ResolvedConfig, runner: Runner, opts: DeployOptions) -> List[Artifact]:
    """Mirror a local content directory onto the server."""
    local, remote = _dirs(mode, c, opts)

    if mode is Mode.THEMES and opts.themename and not os.path.isdir(local):
        raise UnknownThemeError(themename=opts.themename, local_themes=c["local_themes"])

    runner.add(
        sh(
            rsync(f"{local}/", f"{c['ssh']}:{remote}/", c.get("port"), excludes=_excludes(mode, c)),
            f"Synced local {mode.value} to '{remote}' on '{c['host']}'.",
            f"Failed to sync local {mode.value} to the server.",
        )
    )
    return []


def pull_files(mode: Mode, c: ResolvedConfig, runner: Runner, opts: DeployOptions) -> List[Artifact]:
    """Mirror a server content directory locally, optionally backing up first."""
    need(c, "bk_path", "timestamp")
    local, remote = _dirs(mode, c, opts)

    backup_dir = f"{c['bk_path']}/{mode.value}_{c['timestamp']}"
    runner.add(
        sh(
            f"cp -rf {shlex.quote(local)} {shlex.quote(backup_dir)}",
            f"Backed up local {mode.value}.",
            f"Failed backing up local {mode.value}.",
        ),
        when=opts.backup is True,
    )

    runner.add(
        sh(
            rsync(f"{c['ssh']}:{remote}/", f"{local}/", c.get("port"), excludes=_excludes(mode, c)),
            f"Pulled the '{c['env']}' {mode.value} locally.",
            f"Failed pulling the '{c['env']}' {mode.value}.",
        )
    )
    return []
