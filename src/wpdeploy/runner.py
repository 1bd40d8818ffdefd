# runner.py
from __future__ import annotations

import subprocess
from dataclasses import dataclass, replace
from typing import Callable, List, Optional, Tuple

from .errors import DeployError
from .model import PipelineResult, RunState, Step, StepRecord
from .settings import DEFAULT_VERBOSITY
from .ui.console import Console, get_console

# (command text) -> (exit status, captured output)
Executor = Callable[[str], Tuple[int, str]]


# ----------------------------------------------------------------------
# Errors
# ----------------------------------------------------------------------

@dataclass
class StepFailure(DeployError):
    cmd: str
    exit_code: int
    message: str | None = None
    output: str = ""

    title = "Step failed"

    def details(self) -> list[str]:
        tail = self.output.strip().splitlines()[-10:]
        return [f"$ {self.cmd}", *tail]

    def __str__(self) -> str:
        return self.message or f"command failed (exit={self.exit_code}): {self.cmd}"


# ----------------------------------------------------------------------
# Execution primitives
# ----------------------------------------------------------------------

def shell_execute(cmd: str) -> Tuple[int, str]:
    """Run `cmd` through the shell, blocking until it exits."""
    proc = subprocess.run(
        cmd,
        shell=True,
        text=True,
        errors="replace",
        capture_output=True,
    )
    output = proc.stdout
    if proc.stderr:
        output = f"{output}{proc.stderr}"
    return proc.returncode, output


def get_result(cmd: str, executor: Optional[Executor] = None) -> str:
    """
    Run one command right away, outside any pipeline.

    Returns the trimmed output, or "" when the command fails; probes never
    raise so callers decide what an empty answer means.
    """
    execute = executor or shell_execute
    try:
        exit_code, output = execute(cmd)
    except (OSError, subprocess.SubprocessError, UnicodeError) as e:
        get_console().print_debug(f"probe errored ({e}): {cmd}")
        return ""
    if exit_code != 0:
        get_console().print_debug(f"probe failed (exit={exit_code}): {cmd}")
        return ""
    return output.strip()


# ----------------------------------------------------------------------
# Pipeline
# ----------------------------------------------------------------------

class Runner:
    """
    Ordered queue of shell steps run one after another.

    Verbosity:
      0 - echo each command and print every message
      1 - success and failure messages (default)
      2 - failure messages only
    Failure messages are always printed and stop the run.
    """

    def __init__(
        self,
        verbosity: int = DEFAULT_VERBOSITY,
        executor: Optional[Executor] = None,
        console: Optional[Console] = None,
    ):
        if verbosity not in (0, 1, 2):
            raise ValueError(f"verbosity must be 0, 1 or 2, got {verbosity!r}")
        self.verbosity = verbosity
        self._execute = executor or shell_execute
        self._console = console
        self._steps: List[Step] = []
        self.result = PipelineResult()
        self.failure: StepFailure | None = None

    @property
    def console(self) -> Console:
        return self._console or get_console()

    @property
    def state(self) -> RunState:
        return self.result.state

    def add(self, step: Step, when: bool | None = None) -> Runner:
        """Queue `step`; `when` overrides its guard."""
        if self.state != RunState.NOT_STARTED:
            raise RuntimeError("cannot add steps to a pipeline that already ran")
        if when is not None:
            step = replace(step, guard=bool(when))
        self._steps.append(step)
        return self

    def _run_step(self, step: Step) -> StepRecord:
        if self.verbosity == 0:
            self.console.print_command(step.run)

        try:
            exit_code, output = self._execute(step.run)
        except Exception as e:
            raise StepFailure(
                cmd=step.run,
                exit_code=-1,
                message=step.failure,
                output=f"{type(e).__name__}: {e}",
            ) from e

        if self.verbosity == 0 and output.strip():
            self.console.print_output(output)

        if exit_code != 0:
            raise StepFailure(
                cmd=step.run,
                exit_code=exit_code,
                message=step.failure,
                output=output[-4000:],
            )

        if step.success and self.verbosity < 2:
            self.console.print_step_success(step.success)
        return StepRecord(step=step, status="ok", exit_code=exit_code, output=output)

    def run(self) -> PipelineResult:
        """Run every guard-passing step in order; stop at the first failure."""
        if self.state != RunState.NOT_STARTED:
            raise RuntimeError("a pipeline runs only once")

        self.result.state = RunState.RUNNING
        for step in self._steps:
            if not step.guard:
                self.result.records.append(StepRecord(step=step, status="skipped"))
                continue
            try:
                record = self._run_step(step)
            except StepFailure as e:
                if step.failure:
                    self.console.print_step_failure(step.failure)
                self.result.records.append(
                    StepRecord(step=step, status="failed", exit_code=e.exit_code, output=e.output)
                )
                self.result.state = RunState.ABORTED
                self.failure = e
                return self.result
            self.result.records.append(record)

        self.result.state = RunState.COMPLETED
        return self.result
