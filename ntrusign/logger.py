"""
Centralized logging utility for ntrusign
Provides color-coded console output with consistent formatting
"""

import sys


# ANSI Color Codes
class Colors:
    """ANSI escape codes for terminal colors"""
    RESET = '\033[0m'
    ORANGE = '\033[38;5;214m'
    GREEN = '\033[38;5;46m'
    RED = '\033[38;5;196m'
    YELLOW = '\033[38;5;208m'
    CYAN = '\033[38;5;51m'


class Logger:
    """
    Centralized logging with color support.
    Progress and results go to stdout, errors go to stderr.
    """

    # Class variables for output control
    enabled: bool = True
    verbose: bool = False

    @staticmethod
    def _emit(text: str, stream=None) -> None:
        if Logger.enabled:
            print(text, file=stream or sys.stdout)

    @staticmethod
    def success(message: str) -> None:
        """Print success message with green checkmark"""
        Logger._emit(f"{Colors.GREEN}✓{Colors.RESET} {message}")

    @staticmethod
    def error(message: str) -> None:
        """Print error message with red X to stderr"""
        Logger._emit(f"{Colors.RED}✗{Colors.RESET} {message}", sys.stderr)

    @staticmethod
    def info(message: str) -> None:
        """Print info message with cyan color"""
        Logger._emit(f"{Colors.CYAN}[INFO]{Colors.RESET} {message}")

    @staticmethod
    def debug(tag: str, message: str) -> None:
        """Print debug message with orange color (verbose mode only)"""
        if Logger.verbose:
            Logger._emit(f"{Colors.ORANGE}[{tag}]{Colors.RESET} {message}")

    @staticmethod
    def substep(message: str) -> None:
        """Print indented substep with info"""
        Logger._emit(f"   {message}")

    @staticmethod
    def tagged(tag: str, color: str, message: str) -> None:
        """Print message with custom colored tag"""
        Logger._emit(f"{color}[{tag}]{Colors.RESET} {message}")
