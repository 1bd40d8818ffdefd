# model.py
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterator, List, Mapping, Optional


class Operation(str, Enum):
    PUSH = "push"
    PULL = "pull"
    DUMP = "dump"


class Mode(str, Enum):
    """Artifact category being transferred (the `--what` argument)."""
    DB = "db"
    UPLOADS = "uploads"
    THEMES = "themes"
    PLUGINS = "plugins"
    CORE = "core"


class RunState(str, Enum):
    NOT_STARTED = "not_started"
    RUNNING = "running"
    COMPLETED = "completed"
    ABORTED = "aborted"


@dataclass(frozen=True)
class Step:
    """A single external command queued on a pipeline."""
    run: str
    success: str | None = None
    failure: str | None = None
    guard: bool = True


@dataclass(frozen=True)
class StepRecord:
    step: Step
    status: str  # "ok" | "failed" | "skipped"
    exit_code: int | None = None
    output: str = ""


@dataclass
class PipelineResult:
    """Ordered log of one pipeline run."""
    state: RunState = RunState.NOT_STARTED
    records: List[StepRecord] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.state == RunState.COMPLETED

    @property
    def failed(self) -> Optional[StepRecord]:
        for r in self.records:
            if r.status == "failed":
                return r
        return None

    def succeeded(self, step: Step) -> bool:
        return any(r.step is step and r.status == "ok" for r in self.records)


@dataclass(frozen=True)
class RequiredKeySpec:
    """
    Keys an operation needs from the environment source.

    `modes` maps a mode to its own required keys; `global_keys` are required
    whatever the mode.
    """
    global_keys: tuple[str, ...] = ()
    modes: Dict[Mode, tuple[str, ...]] = field(default_factory=dict)

    def required(self, mode: Mode | None) -> List[str]:
        keys = list(self.global_keys)
        if mode is not None:
            keys.extend(k for k in self.modes.get(mode, ()) if k not in keys)
        return keys

    def all_keys(self) -> List[str]:
        keys = list(self.global_keys)
        for mode_keys in self.modes.values():
            keys.extend(k for k in mode_keys if k not in keys)
        return keys


@dataclass(frozen=True)
class DeployOptions:
    """Per-invocation switches coming from the command line."""
    themename: str | None = None
    backup: bool | None = None   # None: db backs up, file modes do not
    cleanup: bool = False
    file: str | None = None      # dump output path


@dataclass(frozen=True)
class Artifact:
    """A temporary file a workflow creates, with the steps that create and remove it."""
    path: str
    remote: bool = False
    created_by: Step | None = None
    removed_by: Step | None = None

    def describe(self) -> str:
        return f"remote:{self.path}" if self.remote else self.path


class ResolvedConfig(Mapping[str, str]):
    """Read-only view over the fully resolved configuration."""

    def __init__(self, values: Mapping[str, str]):
        self._values: Dict[str, str] = dict(values)

    def __getitem__(self, key: str) -> str:
        return self._values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"ResolvedConfig({self._values!r})"
