# dsl.py
from __future__ import annotations

import shlex
from typing import List, Optional

from .model import Step
from .settings import CORE_EXCLUDES, DEFAULT_PORT


# ---------------------------------------------------------------------
# Step helper
# ---------------------------------------------------------------------

def sh(
    cmd: str,
    success: str | None = None,
    failure: str | None = None,
    *,
    when: bool = True,
) -> Step:
    """Create a shell step. `when` is evaluated now, not at run time."""
    return Step(run=cmd, success=success, failure=failure, guard=bool(when))


# ---------------------------------------------------------------------
# Command builders
# ---------------------------------------------------------------------

def split_excludes(excludes: str | None) -> List[str]:
    """Excludes are configured as one colon-separated string."""
    if not excludes:
        return []
    return [p for p in excludes.split(":") if p]


def rsync(
    source: str,
    dest: str,
    port: Optional[str] = None,
    *,
    delete: bool = True,
    compress: bool = True,
    excludes: str | List[str] | None = None,
) -> str:
    """Build an rsync command that tunnels through ssh on `port`."""
    flags = "-avz" if compress else "-av"
    parts = ["rsync", flags, "-e", shlex.quote(f"ssh -p {port or DEFAULT_PORT}")]
    if delete:
        parts.append("--delete")

    patterns = excludes if isinstance(excludes, list) else split_excludes(excludes)
    for pattern in patterns:
        parts.append(f"--exclude={shlex.quote(pattern)}")

    parts += [shlex.quote(source), shlex.quote(dest)]
    return " ".join(parts)


def ssh(target: str, port: Optional[str], remote_cmd: str) -> str:
    """Run `remote_cmd` on `target` (user@host)."""
    return f"ssh {target} -p {port or DEFAULT_PORT} {shlex.quote(remote_cmd)}"


def core_excludes(user_excludes: str | None) -> List[str]:
    return CORE_EXCLUDES + split_excludes(user_excludes)
