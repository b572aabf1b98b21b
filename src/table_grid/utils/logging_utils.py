"""
Logging utilities for table grid extraction.

Provides logging setup with rich console output, an optional log file,
and helpers for timing operations and tracking batch progress.
"""

import logging
import sys
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Generator, Optional, Union

from rich.console import Console
from rich.logging import RichHandler
from rich.progress import BarColumn, Progress, SpinnerColumn, TaskProgressColumn, TextColumn

console = Console(stderr=True)


class GridFormatter(logging.Formatter):
    """Plain-text formatter used when rich output is disabled and for log files."""

    def __init__(self, include_module: bool = True, include_function: bool = False):
        format_parts = ["%(asctime)s"]
        if include_module:
            format_parts.append("%(name)s")
        format_parts.append("%(levelname)s")
        if include_function:
            format_parts.append("%(funcName)s")
        format_parts.append("%(message)s")
        super().__init__(" - ".join(format_parts), datefmt="%Y-%m-%d %H:%M:%S")


def setup_logging(
    level: Union[str, int] = logging.INFO,
    log_file: Optional[Union[str, Path]] = None,
    use_rich: bool = True,
    format_style: str = "detailed"
) -> logging.Logger:
    """
    Set up logging for table grid extraction.

    Args:
        level: Logging level
        log_file: Optional log file path
        use_rich: Whether to use rich console output
        format_style: Format style ('simple', 'detailed', 'minimal')

    Returns:
        Configured root logger
    """
    root_logger = logging.getLogger()
    root_logger.handlers.clear()

    if isinstance(level, str):
        level = getattr(logging, level.upper())
    root_logger.setLevel(level)

    if use_rich:
        console_handler = RichHandler(
            console=console,
            show_time=True,
            show_path=format_style == "detailed",
            markup=False,
            rich_tracebacks=True
        )
        console_handler.setFormatter(logging.Formatter("%(message)s"))
    else:
        console_handler = logging.StreamHandler(sys.stderr)

        if format_style == "minimal":
            formatter = GridFormatter(include_module=False, include_function=False)
        elif format_style == "simple":
            formatter = GridFormatter(include_module=True, include_function=False)
        else:
            formatter = GridFormatter(include_module=True, include_function=True)

        console_handler.setFormatter(formatter)

    console_handler.setLevel(level)
    root_logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_path, encoding='utf-8')
        file_handler.setFormatter(GridFormatter(include_module=True, include_function=True))
        file_handler.setLevel(logging.DEBUG)
        root_logger.addHandler(file_handler)
        # The file handler wants everything; the console handler keeps its own level.
        root_logger.setLevel(min(level, logging.DEBUG))

    # Reduce noise from external libraries
    logging.getLogger("PIL").setLevel(logging.WARNING)
    logging.getLogger("pytesseract").setLevel(logging.WARNING)

    return root_logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance with the specified name."""
    return logging.getLogger(name)


@contextmanager
def log_processing_stats(
    operation: str,
    logger: Optional[logging.Logger] = None,
    level: int = logging.INFO
) -> Generator[Dict[str, Any], None, None]:
    """
    Context manager for logging processing statistics.

    Args:
        operation: Description of the operation
        logger: Logger instance (uses root if None)
        level: Logging level for the stats

    Yields:
        Dictionary to store additional statistics
    """
    if logger is None:
        logger = logging.getLogger()

    stats = {
        "operation": operation,
        "start_time": time.time(),
        "files_processed": 0,
        "files_failed": 0,
    }

    logger.log(level, f"Starting {operation}")

    try:
        yield stats
    except Exception as e:
        duration = time.time() - stats["start_time"]
        logger.error(f"Failed {operation} after {duration:.2f}s: {e}")
        raise

    duration = time.time() - stats["start_time"]
    stats["duration"] = duration
    attempted = stats["files_processed"] + stats["files_failed"]
    stats["success_rate"] = stats["files_processed"] / attempted if attempted > 0 else 0

    logger.log(level,
               f"Completed {operation}: "
               f"processed={stats['files_processed']}, "
               f"failed={stats['files_failed']}, "
               f"duration={duration:.2f}s, "
               f"success_rate={stats['success_rate']*100:.1f}%")


class ProcessingProgress:
    """Progress tracking for batch operations."""

    def __init__(self, description: str, total: int, logger: Optional[logging.Logger] = None):
        self.description = description
        self.total = total
        self.logger = logger or logging.getLogger()
        self.start_time = time.time()
        self.completed = 0
        self.failed = 0

        self.progress = Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TaskProgressColumn(),
            console=console,
            transient=True,
        )
        self.task_id = None

    def __enter__(self) -> 'ProcessingProgress':
        self.progress.__enter__()
        self.task_id = self.progress.add_task(self.description, total=self.total)
        self.logger.info(f"Starting {self.description}: {self.total} items")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.progress.__exit__(exc_type, exc_val, exc_tb)

        duration = time.time() - self.start_time
        self.logger.info(
            f"Completed {self.description}: "
            f"{self.completed}/{self.total} successful "
            f"({self.failed} failed) in {duration:.2f}s"
        )

    def update(self, advance: int = 1, success: bool = True) -> None:
        """Update progress and statistics."""
        if self.task_id is not None:
            self.progress.update(self.task_id, advance=advance)

        if success:
            self.completed += advance
        else:
            self.failed += advance
