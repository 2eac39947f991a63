"""Colored fan-out logger — ANSI-colored console logging for background jobs.

Provides a FanoutLogger with color-coded output per fan-out stage,
making it easy to follow notifications through the worker in the terminal.

Color scheme:
    🟢 Green   — Announcements
    🔵 Blue    — Subscriber updates
    🟣 Magenta — Rotten notices
    🟡 Yellow  — Staleness reminders
    ⚪ White   — Job lifecycle
    🔴 Red     — Errors
"""

import logging
import time
from contextlib import contextmanager
from typing import Any


class _Colors:
    """ANSI escape codes for terminal colors."""

    RESET = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"

    RED = "\033[91m"
    GREEN = "\033[92m"
    YELLOW = "\033[93m"
    BLUE = "\033[94m"
    MAGENTA = "\033[95m"
    WHITE = "\033[97m"
    GRAY = "\033[90m"


class FanoutStage:
    """Predefined fan-out stages with colors and icons."""

    ANNOUNCE = ("ANNOUNCE", _Colors.GREEN, "📣")
    UPDATE = ("UPDATE", _Colors.BLUE, "🔔")
    ROTTEN = ("ROTTEN", _Colors.MAGENTA, "🍂")
    STALE = ("STALE", _Colors.YELLOW, "⏳")
    JOB = ("JOB", _Colors.WHITE, "⚙️")
    ERROR = ("ERROR", _Colors.RED, "❌")


def _format_details(color: str, kwargs: dict[str, Any]) -> str:
    details = " | ".join(f"{k}={v}" for k, v in kwargs.items())
    return f" {color}({details}){_Colors.RESET}"


class FanoutLogger:
    """Color-coded logger for job execution.

    Usage:
        log = FanoutLogger("orientation.jobs")
        with log.timed_step(FanoutStage.JOB, "article_changed", job_id=job.id):
            report = await dispatcher.handle(job)
    """

    def __init__(self, component_name: str):
        self._logger = logging.getLogger(component_name)

    def step_start(self, stage: tuple[str, str, str], message: str, **kwargs: Any) -> None:
        label, color, icon = stage
        formatted = (
            f"{color}{_Colors.BOLD}{icon} [{label}]{_Colors.RESET} "
            f"{color}{message}{_Colors.RESET}"
        )
        if kwargs:
            formatted += _format_details(_Colors.GRAY, kwargs)
        self._logger.info(formatted)

    def step_complete(self, stage: tuple[str, str, str], message: str, **kwargs: Any) -> None:
        label, color, icon = stage
        formatted = (
            f"{color}{icon} [{label}]{_Colors.RESET} "
            f"{_Colors.GREEN}✓ {message}{_Colors.RESET}"
        )
        if kwargs:
            formatted += _format_details(_Colors.GRAY, kwargs)
        self._logger.info(formatted)

    def step_error(self, stage: tuple[str, str, str], message: str, error: Exception | None = None) -> None:
        """Log a failed step in the ERROR colors, labelled with the failing stage."""
        label = stage[0]
        _, color, icon = FanoutStage.ERROR
        formatted = (
            f"{color}{_Colors.BOLD}{icon} [{label}]{_Colors.RESET} "
            f"{color}{message}{_Colors.RESET}"
        )
        if error:
            formatted += f" {_Colors.DIM}→ {type(error).__name__}: {error}{_Colors.RESET}"
        self._logger.error(formatted)

    def detail(self, message: str, **kwargs: Any) -> None:
        formatted = f"   {_Colors.GRAY}├─ {message}{_Colors.RESET}"
        if kwargs:
            formatted += _format_details(_Colors.DIM, kwargs)
        self._logger.info(formatted)

    @contextmanager
    def timed_step(self, stage: tuple[str, str, str], message: str, **kwargs: Any):
        """Log start and end of a step with the elapsed time; re-raises failures."""
        self.step_start(stage, message, **kwargs)
        start = time.perf_counter()
        try:
            yield
        except Exception as e:
            elapsed = time.perf_counter() - start
            self.step_error(stage, f"{message} — failed after {elapsed:.2f}s", error=e)
            raise
        else:
            elapsed = time.perf_counter() - start
            self.step_complete(stage, f"{message} — {elapsed:.2f}s", **kwargs)
