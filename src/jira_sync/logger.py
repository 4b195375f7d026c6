"""
Logger

Colored, leveled console output on stderr built on rich. Use the module
level ``logger`` singleton.
"""

import os
import threading
from datetime import datetime
from enum import Enum

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from jira_sync.constants import ENV_LOG_LEVEL


class LogLevel(Enum):
    """Log levels"""
    DEBUG = 0
    INFO = 1
    SUCCESS = 2
    WARNING = 3
    ERROR = 4


class Logger:
    """
    Console logger (thread safe)

    Supports:
    - colored output via rich
    - summary tables
    - level control, also from the JIRASYNC_LOG_LEVEL env var

    Everything is written to stderr so that markdown printed to stdout
    can be piped into a file.
    """

    STYLES = {
        LogLevel.DEBUG: "dim",
        LogLevel.INFO: "blue",
        LogLevel.SUCCESS: "green",
        LogLevel.WARNING: "yellow",
        LogLevel.ERROR: "red bold",
    }

    def __init__(self, name="JiraSync", level=LogLevel.INFO):
        self.name = name
        self.level = level
        self._lock = threading.Lock()
        self.console = Console(stderr=True)

        env_level = os.getenv(ENV_LOG_LEVEL, "").upper()
        if env_level in LogLevel.__members__:
            self.level = LogLevel[env_level]

    def set_level(self, level: LogLevel):
        """Set the minimum level that is printed"""
        self.level = level

    def _should_log(self, level: LogLevel) -> bool:
        return level.value >= self.level.value

    def _log(self, level: LogLevel, icon: str, message):
        if not self._should_log(level):
            return

        timestamp = datetime.now().strftime("%H:%M:%S")
        style = self.STYLES[level]
        with self._lock:
            # markup=False on the message part: ADF payloads contain [brackets]
            self.console.print(f"[cyan][{timestamp}][/cyan] ", end="")
            self.console.print(f"{icon} {message}", style=style, markup=False, highlight=False)

    def debug(self, message, icon="🔧"):
        """Debug output, only shown at DEBUG level"""
        self._log(LogLevel.DEBUG, icon, message)

    def info(self, message, icon="ℹ️ "):
        self._log(LogLevel.INFO, icon, message)

    def success(self, message, icon="✅"):
        self._log(LogLevel.SUCCESS, icon, message)

    def warning(self, message, icon="⚠️ "):
        self._log(LogLevel.WARNING, icon, message)

    def error(self, message, icon="❌"):
        self._log(LogLevel.ERROR, icon, message)

    def header(self, message, icon=""):
        """Print a boxed title"""
        if not self._should_log(LogLevel.INFO):
            return

        with self._lock:
            title = f"{icon} {message}" if icon else message
            self.console.print(Panel(title, style="bold magenta", width=60))

    def rule(self, message=""):
        if not self._should_log(LogLevel.INFO):
            return

        with self._lock:
            self.console.rule(message)

    def summary_table(self, title: str, rows: dict, columns=("Field", "Change")):
        """Print a two-column summary table

        Args:
            title: table title
            rows: mapping of row label -> value
            columns: column headers
        """
        if not self._should_log(LogLevel.INFO):
            return

        with self._lock:
            table = Table(title=title, show_header=True, header_style="bold cyan")
            table.add_column(columns[0], style="dim")
            table.add_column(columns[1])
            for key, value in rows.items():
                table.add_row(Text(str(key)), Text(str(value)))
            self.console.print(table)


# Global logger instance
logger = Logger()
