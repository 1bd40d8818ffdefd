# deploy.py
from __future__ import annotations

import shlex
from dataclasses import dataclass, field
from datetime import datetime
from functools import partial
from typing import Callable, Dict, List, Optional, Tuple

from .config import build_config
from .deps import EnvironmentSource
from .errors import UnknownModeError
from .model import Artifact, DeployOptions, Mode, Operation, PipelineResult, ResolvedConfig
from .runner import Executor, Runner, StepFailure, get_result
from .settings import DEFAULT_VERBOSITY
from .ui.console import Console, get_console
from .workflows import db, files

Handler = Callable[[ResolvedConfig, Runner, DeployOptions], List[Artifact]]

HANDLERS: Dict[Tuple[Operation, Mode], Handler] = {
    (Operation.PUSH, Mode.DB): db.push_db,
    (Operation.PUSH, Mode.UPLOADS): partial(files.push_files, Mode.UPLOADS),
    (Operation.PUSH, Mode.THEMES): partial(files.push_files, Mode.THEMES),
    (Operation.PUSH, Mode.PLUGINS): partial(files.push_files, Mode.PLUGINS),
    (Operation.PUSH, Mode.CORE): partial(files.push_files, Mode.CORE),
    (Operation.PULL, Mode.DB): db.pull_db,
    (Operation.PULL, Mode.UPLOADS): partial(files.pull_files, Mode.UPLOADS),
    (Operation.PULL, Mode.THEMES): partial(files.pull_files, Mode.THEMES),
    (Operation.PULL, Mode.PLUGINS): partial(files.pull_files, Mode.PLUGINS),
    (Operation.PULL, Mode.CORE): partial(files.pull_files, Mode.CORE),
    (Operation.DUMP, Mode.DB): db.dump,
}


def resolve_handler(operation: Operation | str, what: Mode | str | None) -> Tuple[Operation, Mode, Handler]:
    """Map the requested operation and `--what` onto a workflow, or raise."""
    try:
        op = Operation(operation)
    except ValueError:
        raise UnknownModeError(operation=str(operation), mode=None if what is None else str(what)) from None

    if op is Operation.DUMP and what is None:
        what = Mode.DB

    try:
        mode = Mode(what) if what is not None else None
    except ValueError:
        mode = None
    handler = HANDLERS.get((op, mode)) if mode is not None else None
    if handler is None:
        raise UnknownModeError(operation=op.value, mode=None if what is None else str(what))
    return op, mode, handler


@dataclass
class DeployResult:
    env: str
    operation: Operation
    mode: Mode
    config: ResolvedConfig
    pipeline: PipelineResult
    artifacts: List[Artifact] = field(default_factory=list)
    failure: Optional[StepFailure] = None
    post_hook_output: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.pipeline.ok

    def leftovers(self) -> List[Artifact]:
        """Temporary files that were created but whose removal step never succeeded."""
        succeeded = self.pipeline.succeeded
        return [
            a for a in self.artifacts
            if (a.created_by is None or succeeded(a.created_by))
            and (a.removed_by is None or not succeeded(a.removed_by))
        ]


def deploy(
    source: EnvironmentSource,
    env: str,
    operation: Operation | str,
    what: Mode | str | None = None,
    *,
    verbosity: int = DEFAULT_VERBOSITY,
    options: Optional[DeployOptions] = None,
    executor: Optional[Executor] = None,
    console: Optional[Console] = None,
    now: Optional[datetime] = None,
) -> DeployResult:
    """
    Run one deploy invocation end to end.

    Mode and configuration errors are raised before anything runs. A failing
    step does not raise: it is reported on the returned result, with the
    temporary files it may have left behind.
    """
    options = options or DeployOptions()
    console = console or get_console()
    op, mode, handler = resolve_handler(operation, what)

    runner = Runner(verbosity, executor=executor, console=console)

    # dump is mode-independent for validation
    config, post_hook = build_config(
        source,
        env,
        op,
        None if op is Operation.DUMP else mode,
        themename=options.themename,
        executor=executor,
        now=now,
    )

    # handlers only queue steps; nothing runs until the working dirs exist
    artifacts = handler(config, runner, options)

    if verbosity == 0:
        console.print_run_started(op.value, env, None if op is Operation.DUMP else mode.value)

    for key in ("tmp_path", "bk_path"):
        if key in config:
            get_result(f"mkdir -p {shlex.quote(config[key])}", executor)

    pipeline = runner.run()

    result = DeployResult(
        env=env,
        operation=op,
        mode=mode,
        config=config,
        pipeline=pipeline,
        artifacts=artifacts,
        failure=runner.failure,
    )

    if pipeline.ok and post_hook:
        result.post_hook_output = get_result(post_hook, executor)
        console.print_post_hook(result.post_hook_output)

    return result
