"""droidprobe structured logging system."""

from __future__ import annotations

import os
import sys
from typing import Any

from loguru import logger

from .config import config


class Logger:
    """Structured logging system for discovery and flow runs."""

    def __init__(self, name: str = "droidprobe") -> None:
        """Initialize and configure a *Loguru* logger instance."""
        self.name = name
        self._setup_logger()

    def _setup_logger(self) -> None:
        """Configure the logger with proper formatting and handlers."""
        # Remove default handler
        logger.remove()

        logs_dir = config.log_dir
        os.makedirs(logs_dir, exist_ok=True)

        # ------------------------------------------------------------------
        # Console handler
        # ------------------------------------------------------------------
        console_format = (
            "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
            "<level>{level:<8}</level> | "
            "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
            "<level>{message}</level>"
        )

        logger.add(
            sys.stdout,
            format=console_format,
            level=config.log_level,
            colorize=True,
        )

        # ------------------------------------------------------------------
        # File handlers
        # ------------------------------------------------------------------
        file_format = (
            "{time:YYYY-MM-DD HH:mm:ss} | {level:<8} | "
            "{name}:{function}:{line} | {message}"
        )

        logger.add(
            os.path.join(logs_dir, "droidprobe_{time:YYYY-MM-DD}.log"),
            format=file_format,
            level="DEBUG",
            rotation="1 day",
            retention="30 days",
            compression="zip",
        )

        # Separate error log
        logger.add(
            os.path.join(logs_dir, "errors_{time:YYYY-MM-DD}.log"),
            format=file_format,
            level="ERROR",
            rotation="1 day",
            retention="90 days",
            compression="zip",
        )

    def set_level(self, level: str) -> None:
        """Re-create the console sink at a different level."""
        config.log_level = level.upper()
        self._setup_logger()

    def info(self, message: str, **kwargs: Any) -> None:
        """Log info message."""
        logger.info(f"[{self.name}] {message}", **kwargs)

    def debug(self, message: str, **kwargs: Any) -> None:
        """Log debug message."""
        logger.debug(f"[{self.name}] {message}", **kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        """Log warning message."""
        logger.warning(f"[{self.name}] {message}", **kwargs)

    def error(self, message: str, **kwargs: Any) -> None:
        """Log error message."""
        logger.error(f"[{self.name}] {message}", **kwargs)

    def success(self, message: str, **kwargs: Any) -> None:
        """Log success message."""
        logger.success(f"[{self.name}] {message}", **kwargs)

    def log_discovery(self, kind: str, count: int, processed: int) -> None:
        """Log the outcome of one element-kind discovery pass."""
        self.debug(f"DISCOVERY: {kind} -> {count} elements ({processed} nodes inspected)")

    def log_click(self, label: str, outcome: str, details: dict[str, Any] | None = None) -> None:
        """Log an exploration click with its outcome."""
        message = f"CLICK: {label!r} -> {outcome}"
        if details:
            message += f" | Details: {details}"
        self.info(message)

    def log_flow_step(self, step: str, status: str, details: dict[str, Any] | None = None) -> None:
        """Log a flow step result."""
        message = f"FLOW STEP: {step} [{status.upper()}]"
        if details:
            message += f" | Details: {details}"
        if status == "passed":
            self.success(message)
        else:
            self.warning(message)


# Global logger instance
log = Logger()
