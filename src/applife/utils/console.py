from typing import Optional, Protocol, runtime_checkable
from rich.console import Console
from rich.markup import escape

# Create a stderr console for lifecycle logging
error_console = Console(stderr=True)

LEVELS = {
    "DEBUG": 10,
    "INFO": 20,
    "WARNING": 30,
    "ERROR": 40,
}

STYLES = {
    "info": "white",
    "warning": "yellow",
    "error": "red",
}


@runtime_checkable
class LogSink(Protocol):
    """The three severities the lifecycle core reports through."""

    def info(self, message: str) -> None:
        ...

    def warning(self, message: str) -> None:
        ...

    def error(self, message: str) -> None:
        ...


class ConsoleLogSink:
    """
    Default sink. Prints system messages to stderr with color coding,
    dropping anything below ``log_level``.
    """
    prefix = "[AppLife]"

    def __init__(self, log_level: str = "INFO", console: Optional[Console] = None):
        self.log_level = log_level.upper()
        self.console = console if console is not None else error_console

    def info(self, message: str) -> None:
        self._emit("info", message)

    def warning(self, message: str) -> None:
        self._emit("warning", message)

    def error(self, message: str) -> None:
        self._emit("error", message)

    def _emit(self, severity: str, message: str) -> None:
        if LEVELS[severity.upper()] < LEVELS.get(self.log_level, LEVELS["INFO"]):
            return
        style = STYLES[severity]
        self.console.print(f"[{style}]{escape(self.prefix)} {escape(message)}[/{style}]", highlight=False)
