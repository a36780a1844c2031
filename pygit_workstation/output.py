"""Output handler implementations: console and null."""

from __future__ import annotations

import shutil

from colorama import Fore, Style
from tqdm import tqdm


SECTION_WIDTH = 50
DETAIL_WIDTH = 40

LEVEL_COLORS = {
    'info': '',
    'success': Fore.GREEN,
    'warning': Fore.YELLOW,
    'error': Fore.RED,
    'action': Fore.MAGENTA,
    'highlight': Fore.CYAN,
}


def format_detail(label: str, value: object, width: int = DETAIL_WIDTH) -> tuple[str, str]:
    """Pad a label so that detail values line up in a column."""
    text = str(value)
    return label.ljust(max(width - len(text) - 2, len(label) + 1)), text


def format_status_line(message: str, label: str, color: str, width: int,
                       dashes: bool = False) -> str:
    """Render 'message ----[LABEL]' right-aligned to the terminal width."""
    fill = '-' if dashes else ' '
    padding = max(width - len(message) - len(label) - 3, 1)
    reset = Style.RESET_ALL if color else ''
    return f"{message} {fill * padding}[{color}{label}{reset}]"


class ConsoleOutputHandler:
    """Console output with colors."""

    def __init__(self, verbose: bool = False, plain: bool = False):
        """Create a console handler. verbose enables debug output; plain disables colors and alignment."""
        self.verbose = verbose
        self.plain = plain

    def _color(self, level: str) -> str:
        return '' if self.plain else LEVEL_COLORS.get(level, '')

    def _write(self, text: str, level: str, indent: int) -> None:
        color = self._color(level)
        if color:
            text = f"{color}{text}{Style.RESET_ALL}"
        tqdm.write("  " * indent + text)

    def info(self, message: str, indent: int = 0) -> None:
        """Print an informational message."""
        self._write(message, 'info', indent)

    def success(self, message: str, indent: int = 0) -> None:
        """Print a green success message."""
        self._write(message, 'success', indent)

    def warning(self, message: str, indent: int = 0) -> None:
        """Print a yellow warning message."""
        self._write(message, 'warning', indent)

    def error(self, message: str, indent: int = 0) -> None:
        """Print a red error message."""
        self._write(message, 'error', indent)

    def line(self, message: str, level: str = 'info', indent: int = 0) -> None:
        """Print a message in the color of any level, including 'highlight' and 'action'."""
        self._write(message, level, indent)

    def section(self, title: str) -> None:
        """Print a section header with a divider line."""
        tqdm.write("")
        tqdm.write(title)
        tqdm.write("-" * SECTION_WIDTH)

    def debug(self, message: str) -> None:
        """Print a cyan debug message (only when verbose is enabled)."""
        if self.verbose:
            self._write(f"[DEBUG] {message}", 'highlight', 0)

    def status(self, message: str, label: str, level: str = 'info', dashes: bool = False) -> None:
        """Print a message with a right-aligned [LABEL]."""
        if self.plain:
            tqdm.write(message)
            tqdm.write(f"  Action: [{label}]")
            return
        width = shutil.get_terminal_size().columns
        tqdm.write(format_status_line(message, label, self._color(level), width, dashes))


class NullOutputHandler:
    """Silent output handler for testing."""

    def info(self, message: str, indent: int = 0) -> None:
        """No-op."""
        pass

    def success(self, message: str, indent: int = 0) -> None:
        """No-op."""
        pass

    def warning(self, message: str, indent: int = 0) -> None:
        """No-op."""
        pass

    def error(self, message: str, indent: int = 0) -> None:
        """No-op."""
        pass

    def line(self, message: str, level: str = 'info', indent: int = 0) -> None:
        """No-op."""
        pass

    def section(self, title: str) -> None:
        """No-op."""
        pass

    def debug(self, message: str) -> None:
        """No-op."""
        pass

    def status(self, message: str, label: str, level: str = 'info', dashes: bool = False) -> None:
        """No-op."""
        pass
