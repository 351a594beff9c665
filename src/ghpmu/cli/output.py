"""Colorful CLI output helpers."""

import json
import sys
from typing import Any

# ANSI color codes
GREEN = "\033[32m"
YELLOW = "\033[33m"
BLUE = "\033[34m"
RED = "\033[31m"
DIM = "\033[2m"
RESET = "\033[0m"
CHECK = "✓"  # ✓
BULLET = "•"  # •
CROSS = "✗"  # ✗
WARN = "!"


def _supports_color() -> bool:
    """Check if terminal supports color output."""
    if not hasattr(sys.stdout, "isatty") or not sys.stdout.isatty():
        return False
    return True


def _colorize(text: str, color: str) -> str:
    """Apply color to text if terminal supports it."""
    if _supports_color():
        return f"{color}{text}{RESET}"
    return text


def success(message: str) -> None:
    """Print success message with green checkmark."""
    check = _colorize(CHECK, GREEN)
    print(f"{check} {message}")


def info(message: str) -> None:
    """Print info message with yellow bullet."""
    bullet = _colorize(BULLET, YELLOW)
    print(f"{bullet} {message}")


def header(message: str) -> None:
    """Print header message in blue."""
    print(_colorize(message, BLUE))


def warning(message: str) -> None:
    """Print warning message to stderr."""
    print(f"{WARN} Warning: {message}", file=sys.stderr)


def error(message: str) -> None:
    """Print error message with red cross."""
    cross = _colorize(CROSS, RED)
    print(f"{cross} {message}")


def dim(text: str) -> str:
    return _colorize(text, DIM)


def table(headers: list[str], rows: list[list[str]]) -> None:
    """Print rows as left-aligned columns sized to their widest cell."""
    widths = [len(h) for h in headers]
    for row in rows:
        for i, cell in enumerate(row):
            widths[i] = max(widths[i], len(cell))

    def line(cells: list[str]) -> str:
        return "  ".join(cell.ljust(widths[i]) for i, cell in enumerate(cells)).rstrip()

    print(_colorize(line(headers), BLUE))
    for row in rows:
        print(line(row))


def print_json(data: Any) -> None:
    """Print data as indented JSON."""
    print(json.dumps(data, indent=2, ensure_ascii=False))


def progress_bar(done: int, total: int, width: int = 20) -> str:
    """Render "[████░░░░] done/total (pct%)"."""
    if total <= 0:
        return ""
    filled = done * width // total
    percent = done * 100 // total
    return f"[{'█' * filled}{'░' * (width - filled)}] {done}/{total} ({percent}%)"
