# errors.py
from __future__ import annotations

from dataclasses import dataclass, field


class DeployError(Exception):
    """Base class for errors reported to the operator without a traceback."""

    title = "Deploy failed"
    suggestion: str | None = None

    def details(self) -> list[str]:
        return []


@dataclass
class ConfigurationError(DeployError):
    """
    One or more required constants are not defined for an environment.

    Every missing key is collected before this is raised so the operator sees
    the whole list at once.
    """
    env: str
    missing: list[str] = field(default_factory=list)
    unresolved: list[str] = field(default_factory=list)

    title = "Missing configuration"
    suggestion = "Define the constants under the '@<env>' section of your wp-cli.yml."

    def details(self) -> list[str]:
        lines = [f"Required {key} is not defined for env {self.env}." for key in self.missing]
        lines += [f"Required {key} did not resolve for env {self.env}." for key in self.unresolved]
        return lines

    def __str__(self) -> str:
        keys = ", ".join(self.missing + self.unresolved)
        return f"The missing constants are required in order to run this subcommand: {keys}"


@dataclass
class UnknownModeError(DeployError):
    operation: str
    mode: str | None

    title = "Unknown mode"

    def __str__(self) -> str:
        return f"Using unknown '{self.mode}' parameter for --what argument of '{self.operation}'."


@dataclass
class UnknownThemeError(DeployError):
    themename: str
    local_themes: str

    title = "Unknown theme"

    def __str__(self) -> str:
        return f"Using unknown '{self.themename}' parameter for --themename argument (not in {self.local_themes})."


@dataclass
class EnvironmentFileError(DeployError):
    path: str
    message: str

    title = "Unreadable environment file"

    def __str__(self) -> str:
        return f"{self.path}: {self.message}"
