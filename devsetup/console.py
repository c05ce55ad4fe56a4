"""Coloured console output and logging setup."""

import logging
import sys


# ANSI color codes
class Color:
    RESET = '\033[0m'
    BOLD = '\033[1m'
    RED = '\033[31m'
    GREEN = '\033[32m'
    YELLOW = '\033[33m'
    BLUE = '\033[34m'
    GRAY = '\033[90m'


LEVEL_COLORS = {
    logging.DEBUG: Color.GRAY,
    logging.INFO: Color.GREEN,
    logging.WARNING: Color.YELLOW,
    logging.ERROR: Color.RED,
    logging.CRITICAL: Color.RED + Color.BOLD,
}

_color_enabled = True


def colorize(text: str, color: str) -> str:
    """Apply color to text if colors are enabled."""
    if not _color_enabled:
        return text
    return f"{color}{text}{Color.RESET}"


class ColorFormatter(logging.Formatter):
    """Renders records as ``[LEVEL] message`` with a colored level tag."""

    def __init__(self, color_enabled: bool = True, show_name: bool = False):
        fmt = "%(levelname_tag)s %(name)s: %(message)s" if show_name else "%(levelname_tag)s %(message)s"
        super().__init__(fmt)
        self.color_enabled = color_enabled

    def format(self, record: logging.LogRecord) -> str:
        tag = f"[{record.levelname}]"
        if self.color_enabled:
            tag = f"{LEVEL_COLORS.get(record.levelno, '')}{tag}{Color.RESET}"
        record.levelname_tag = tag
        return super().format(record)


def setup_logging(level: str = "info", color_enabled: bool = True, verbose: bool = False) -> None:
    """Install a single stream handler on the root logger."""
    global _color_enabled
    _color_enabled = color_enabled

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(ColorFormatter(color_enabled=color_enabled, show_name=verbose))

    root = logging.getLogger()
    for existing in list(root.handlers):
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(logging.DEBUG if verbose else getattr(logging, level.upper(), logging.INFO))

    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)


def print_header(text: str) -> None:
    print(f"\n{colorize(text, Color.BLUE + Color.BOLD)}", flush=True)
