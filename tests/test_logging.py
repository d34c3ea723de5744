from __future__ import annotations

import io
import logging
from pathlib import Path

from testgen.logging import configure_logging, get_logger


def test_console_output_uses_testgen_prefix() -> None:
    stream = io.StringIO()
    configure_logging(stream=stream)

    get_logger("orchestrator").info("Found %d gaps", 3)
    get_logger("orchestrator").debug("hidden")

    assert stream.getvalue() == "[testgen] INFO Found 3 gaps\n"


def test_verbose_enables_debug_and_file_sink(tmp_path: Path) -> None:
    stream = io.StringIO()
    log_file = tmp_path / "logs" / "testgen.log"
    configure_logging(verbose=True, log_file=log_file, stream=stream)

    get_logger("writer").debug("Saved test")

    assert "[testgen] DEBUG Saved test" in stream.getvalue()
    assert "DEBUG testgen.writer: Saved test" in log_file.read_text(encoding="utf-8")


def test_reconfiguring_replaces_handlers() -> None:
    configure_logging()
    logger = configure_logging(verbose=True)

    assert len(logger.handlers) == 1
    assert logger.level == logging.DEBUG
    assert logger.propagate is False
