# placeholders.py
"""
Placeholder expansion for `%%key%%` templates.

A template map may reference its own keys in any order:

    {"wd": "%%abspath%%/%%env%%_%%hash%%", "tmp_path": "%%wd%%/tmp"}

`resolve()` rewrites every value pass after pass until nothing changes (or the
pass cap is reached) and then drops whatever still holds a token. A dropped
key means "not configured"; a key resolved to "" means "configured but empty".
"""
from __future__ import annotations

import re
from typing import Dict, List, Mapping, Optional

from .settings import MAX_PASSES

PLACEHOLDER_RE = re.compile(r"%%([A-Za-z0-9_]+)%%")


def placeholders(text: str) -> List[str]:
    """Return the keys referenced by `text`, in order of appearance."""
    return PLACEHOLDER_RE.findall(text)


def has_placeholder(text: str) -> bool:
    return PLACEHOLDER_RE.search(text) is not None


def substitute(text: str, *sources: Mapping[str, str]) -> str:
    """
    Replace each token once using the first source that defines its key.
    Unknown keys are left in place.
    """
    def lookup(match: re.Match) -> str:
        key = match.group(1)
        for source in sources:
            if key in source:
                return source[key]
        return match.group(0)

    return PLACEHOLDER_RE.sub(lookup, text)


def resolve(
    templates: Mapping[str, str],
    context: Mapping[str, str],
    max_passes: Optional[int] = None,
) -> Dict[str, str]:
    """
    Expand `templates` against `context` until a fixed point.

    Lookups prefer `context` and fall back to the template map as it stood at
    the start of the pass, so the outcome never depends on key order. Cycles
    (a -> b -> a) stop at the pass cap and are dropped with everything else
    that still carries a token.
    """
    cap = MAX_PASSES if max_passes is None else max_passes
    current: Dict[str, str] = dict(templates)

    for _ in range(cap):
        snapshot = dict(current)
        changed = False
        for key, value in snapshot.items():
            new_value = substitute(value, context, snapshot)
            if new_value != value:
                current[key] = new_value
                changed = True
        if not changed:
            break

    return {k: v for k, v in current.items() if not has_placeholder(v)}


def resolve_one(template: str, context: Mapping[str, str], max_passes: Optional[int] = None) -> Optional[str]:
    """Resolve a single template against a finished config; None when it never settles."""
    return resolve({"_": template}, context, max_passes=max_passes).get("_")
