"""User interface utilities for epubmanga.

Coloured console output for the command line.
"""

from typing import Any, Mapping
import click


# Define color constants for CLI output
class Colors:
    """ANSI color codes for terminal output."""
    RESET = "\033[0m"
    DIM = "\033[2m"

    GREEN = "\033[32m"
    CYAN = "\033[36m"

    BRIGHT_CYAN = "\033[96m"


class ColorfulFormatter:
    """Formats text with colors for terminal output."""

    @staticmethod
    def info(text: str) -> str:
        return f"{Colors.CYAN}{text}{Colors.RESET}"

    @staticmethod
    def success(text: str) -> str:
        return f"{Colors.GREEN}{text}{Colors.RESET}"

    @staticmethod
    def dim(text: str) -> str:
        return f"{Colors.DIM}{text}{Colors.RESET}"


def print_info(message: str) -> None:
    """Print info message."""
    click.echo(ColorfulFormatter.info(message))


def print_success(message: str) -> None:
    """Print success message."""
    click.echo(ColorfulFormatter.success(message))


def print_header(text: str, width: int = 60, char: str = "=") -> None:
    """Print header with separator lines.

    Args:
        text: Header text.
        width: Width of separator.
        char: Character for separator.
    """
    separator = char * width
    click.echo(f"{Colors.BRIGHT_CYAN}{separator}{Colors.RESET}")
    click.echo(f"{Colors.BRIGHT_CYAN}{text.center(width)}{Colors.RESET}")
    click.echo(f"{Colors.BRIGHT_CYAN}{separator}{Colors.RESET}")


def print_options(options: Mapping[str, Any]) -> None:
    """Print build options as an aligned key/value list."""
    width = max((len(key) for key in options), default=0)
    for key, value in options.items():
        click.echo(f"  {ColorfulFormatter.dim(key.ljust(width))}  {value}")
