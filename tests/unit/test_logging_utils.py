"""Tests for logging setup and processing statistics."""

import logging

import pytest
from rich.logging import RichHandler

from table_grid.utils import ProcessingProgress, log_processing_stats, setup_logging


def test_plain_handler():
    root = setup_logging(level="INFO", use_rich=False, format_style="simple")

    assert root.level == logging.INFO
    assert len(root.handlers) == 1
    assert not isinstance(root.handlers[0], RichHandler)


def test_rich_handler():
    root = setup_logging(level=logging.WARNING, use_rich=True)

    assert isinstance(root.handlers[0], RichHandler)


def test_log_file_receives_debug(tmp_path):
    log_file = tmp_path / "logs" / "table_grid.log"
    root = setup_logging(level="WARNING", log_file=log_file, use_rich=False)

    logging.getLogger("table_grid.test").debug("detail for the file")
    for handler in root.handlers:
        handler.flush()

    assert "detail for the file" in log_file.read_text(encoding="utf-8")
    # The console handler keeps its level
    assert root.handlers[0].level == logging.WARNING


def test_processing_stats():
    with log_processing_stats("batch") as stats:
        stats["files_processed"] += 3
        stats["files_failed"] += 1

    assert stats["success_rate"] == pytest.approx(0.75)
    assert "duration" in stats


def test_processing_stats_reraises():
    with pytest.raises(RuntimeError):
        with log_processing_stats("batch"):
            raise RuntimeError("boom")


def test_progress_counts():
    with ProcessingProgress("images", total=3) as progress:
        progress.update()
        progress.update(success=False)
        progress.update()

    assert progress.completed == 2
    assert progress.failed == 1
