"""Telemetry - progress lines on stderr, kept apart from report output."""

from typing import Optional

from rich.console import Console
from rich.markup import escape

from convention_guard.domain.protocols import TelemetryPort


class ConsoleTelemetry(TelemetryPort):
    """TelemetryPort on a rich stderr console. Quiet mode drops step lines."""

    def __init__(self, prefix: str = "convention-guard", quiet: bool = False) -> None:
        self.prefix = prefix
        self.quiet = quiet
        self._console: Optional[Console] = None

    @property
    def console(self) -> Console:
        """Stderr console, created on first use."""
        if self._console is None:
            self._console = Console(stderr=True, highlight=False)
        return self._console

    def step(self, message: str) -> None:
        """Report a progress step."""
        if not self.quiet:
            self.console.print(f"[dim]{self.prefix}:[/] {escape(message)}", soft_wrap=True)

    def warning(self, message: str) -> None:
        """Report a recoverable problem."""
        self.console.print(f"[#F9A602]{self.prefix}: warning:[/] {escape(message)}", soft_wrap=True)

    def error(self, message: str) -> None:
        """Report a fatal problem."""
        self.console.print(f"[#C41E3A]{self.prefix}: error:[/] {escape(message)}", soft_wrap=True)
