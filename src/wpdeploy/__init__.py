from .deploy import HANDLERS, DeployResult, deploy, resolve_handler
from .dsl import sh, rsync
from .model import DeployOptions, Mode, Operation, ResolvedConfig, Step
from .placeholders import resolve
from .runner import Runner, StepFailure, get_result

__all__ = [
    "HANDLERS",
    "DeployResult",
    "deploy",
    "resolve_handler",
    "sh",
    "rsync",
    "DeployOptions",
    "Mode",
    "Operation",
    "ResolvedConfig",
    "Step",
    "resolve",
    "Runner",
    "StepFailure",
    "get_result",
]
