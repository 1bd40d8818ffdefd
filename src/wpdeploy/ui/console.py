"""Console output formatting utilities for wp-deploy."""

from __future__ import annotations

import random
import sys
from typing import Optional

_DOGE = ("wow", "many", "such", "so")
_WORDS = ("finish", "done", "end", "deploy")


class Console:
    """Centralized console output formatting."""

    def __init__(self, debug: bool = False):
        """
        Initialize console formatter.

        Args:
            debug: If True, show debug lines and full stack traces
        """
        self.debug = debug

    def print_run_started(self, command: str, env: str, what: str | None) -> None:
        """Print the invocation header (verbose runs only)."""
        target = f" --what={what}" if what else ""
        print(f"DEPLOY: {command} {env}{target}")

    def print_command(self, cmd: str) -> None:
        """Echo a raw command before it runs."""
        print(f"$ {cmd}")

    def print_output(self, output: str) -> None:
        """Print captured command output, indented."""
        for line in output.rstrip().splitlines():
            print(f"  {line}")

    def print_step_success(self, message: str) -> None:
        print(f"Success: {message}")

    def print_step_failure(self, message: str) -> None:
        print(f"Error: {message}", file=sys.stderr)

    def print_error(
        self,
        title: str,
        message: str,
        details: Optional[list[str]] = None,
        suggestion: Optional[str] = None,
    ) -> None:
        """
        Print structured error message.

        Args:
            title: Error title
            message: Main error message
            details: Optional list of detail lines
            suggestion: Optional suggestion for user
        """
        print(f"\nERROR: {title}", file=sys.stderr)
        print(f"{message}", file=sys.stderr)
        if details:
            for detail in details:
                print(f"  {detail}", file=sys.stderr)
        if suggestion:
            print(f"\n{suggestion}", file=sys.stderr)

    def print_exception(self, exc: Exception) -> None:
        """Print exception, with full traceback only in debug mode."""
        if self.debug:
            import traceback
            traceback.print_exc()
        else:
            print(f"Error: {exc}", file=sys.stderr)

    def print_leftovers(self, paths: list[str]) -> None:
        """List temporary files a failed run left behind."""
        if not paths:
            return
        print("Temporary files left behind:", file=sys.stderr)
        for path in paths:
            print(f"  {path}", file=sys.stderr)

    def print_post_hook(self, output: str) -> None:
        if output:
            print(output)
        print("Ran post hook.")

    def print_done(self) -> None:
        """Print the closing success line."""
        print()
        print(f"Success: {random.choice(_DOGE)} {random.choice(_WORDS)}!")

    def print_info(self, message: str) -> None:
        """Print informational message."""
        print(message)

    def print_debug(self, message: str) -> None:
        """Print debug message (only if debug mode enabled)."""
        if self.debug:
            print(f"[DEBUG] {message}", file=sys.stderr)


# Global console instance (will be initialized by CLI)
_console: Optional[Console] = None


def get_console() -> Console:
    """Get the global console instance."""
    global _console
    if _console is None:
        _console = Console()
    return _console


def set_console(console: Console) -> None:
    """Set the global console instance."""
    global _console
    _console = console
