# envfile.py
"""
Environment constants read from wp-cli.yml.

Each deployment target is a top-level `@<handle>` mapping:

    @staging:
      host: example.org
      ssh_user: deploy
      writable_path: /home/deploy/tmp
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List

import yaml  # PyYAML

from .errors import EnvironmentFileError

# PyYAML reserves "@" at the start of a plain scalar; wp-cli does not.
_AT_KEY_RE = re.compile(r"^([ \t]*)(@[^\s:#\"']+)[ \t]*:", re.M)


def quote_environment_keys(text: str) -> str:
    return _AT_KEY_RE.sub(r'\1"\2":', text)


def _is_path_key(key: str) -> bool:
    return key == "path" or key.endswith("_path")


def _as_constant(key: str, value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        # lists are accepted for excludes
        return ":".join(str(v) for v in value)
    text = str(value)
    # paths are compared and joined; everything else is kept verbatim
    if _is_path_key(key) and text.strip("/"):
        return text.rstrip("/")
    return text


@dataclass
class EnvironmentFile:
    path: str
    sections: Dict[str, Dict[str, str | None]] = field(default_factory=dict)

    def environments(self) -> List[str]:
        return sorted(self.sections)

    def get(self, env: str, key: str) -> str | None:
        return self.sections.get(env, {}).get(key)


def parse_environments(raw: Any, path: str = "<string>") -> EnvironmentFile:
    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise EnvironmentFileError(path=path, message="top level must be a mapping")

    sections: Dict[str, Dict[str, str | None]] = {}
    for name, body in raw.items():
        if not isinstance(name, str) or not name.startswith("@"):
            continue
        if body is None:
            body = {}
        if not isinstance(body, dict):
            raise EnvironmentFileError(path=path, message=f"section '{name}' must be a mapping")
        sections[name[1:]] = {str(k): _as_constant(str(k), v) for k, v in body.items()}

    return EnvironmentFile(path=path, sections=sections)


def load_environments(path: str | Path) -> EnvironmentFile:
    p = Path(path).expanduser()
    if not p.exists():
        raise EnvironmentFileError(path=str(p), message="file not found")
    try:
        raw = yaml.safe_load(quote_environment_keys(p.read_text(encoding="utf-8")))
    except yaml.YAMLError as e:
        raise EnvironmentFileError(path=str(p), message=f"Unable to parse the YAML string: {e}") from e
    return parse_environments(raw, str(p))
