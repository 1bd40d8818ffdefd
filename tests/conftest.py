from __future__ import annotations

import shlex
from datetime import datetime
from typing import Callable, List, Tuple, Union

import pytest

from wpdeploy.envfile import parse_environments
from wpdeploy.ui.console import Console

FIXED_NOW = datetime(2026, 10, 18, 12, 0)
STAMP = "2026_10_18-12_00"

Response = Union[Tuple[int, str], Callable[[str], Tuple[int, str]]]


class FakeExecutor:
    """
    Stands in for the shell. Rules are (pattern, response) pairs matched in
    order against each command (exact match or substring); unmatched commands
    succeed with no output.
    """

    def __init__(self, rules: List[Tuple[str, Response]] | None = None):
        self.rules = list(rules or [])
        self.calls: List[str] = []

    def on(self, pattern: str, response: Response) -> "FakeExecutor":
        # newer rules win
        self.rules.insert(0, (pattern, response))
        return self

    def __call__(self, cmd: str) -> Tuple[int, str]:
        self.calls.append(cmd)
        for pattern, response in self.rules:
            if cmd == pattern or pattern in cmd:
                return response(cmd) if callable(response) else response
        return 0, ""

    def ran(self, fragment: str) -> List[str]:
        return [c for c in self.calls if fragment in c]


def _pwd(cmd: str) -> Tuple[int, str]:
    # "cd <dir> && pwd -P" -> "<dir>\n"
    return 0, shlex.split(cmd)[1] + "\n"


def local_site_rules(abspath: str = "/var/www/site") -> List[Tuple[str, Response]]:
    return [
        ("ABSPATH", (0, abspath + "\n")),
        ("basedir", (0, f"{abspath}/wp-content/uploads\n")),
        ("get_theme_root", (0, f"{abspath}/wp-content/themes\n")),
        ("WP_PLUGIN_DIR", (0, f"{abspath}/wp-content/plugins\n")),
        ("pwd -P", _pwd),
        ("hostname", (0, "laptop\n")),
        ("option get siteurl", (0, "http://site.test/\n")),
    ]


@pytest.fixture
def executor() -> FakeExecutor:
    return FakeExecutor(local_site_rules())


@pytest.fixture
def console() -> Console:
    return Console()


STAGING = {
    "host": "h",
    "ssh_user": "u",
    "writable_path": "/w",
    "path": "/w",
    "url": "example.org",
    "db_host": "localhost",
    "db_name": "wp",
    "db_user": "wpuser",
    "db_password": "s3cret pass",
    "uploads_path": "/w/wp-content/uploads",
    "themes_path": "/w/wp-content/themes",
    "plugins_path": "/w/wp-content/plugins",
}


def make_source(**sections):
    return parse_environments({f"@{name}": body for name, body in sections.items()})


@pytest.fixture
def source():
    return make_source(staging=dict(STAGING))
