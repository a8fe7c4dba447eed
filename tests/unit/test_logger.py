"""Unit tests for logger setup."""

import sys

from src.utils.config import Settings
from src.utils.logger import get_logger, setup_logger


def test_setup_logger_writes_component_to_file(tmp_path):
    log_file = tmp_path / "logs" / "smarta.log"
    settings = Settings(
        _env_file=None,
        marta_api_key="k",
        webhook_url="https://hooks.slack.com/services/T000/B000/XXXX",
        log_file_path=str(log_file),
        debug_mode=True,
    )

    logger = setup_logger(settings)
    get_logger("scheduler").debug("Performing cycle #1")
    logger.complete()

    logger.remove()
    logger.add(sys.stderr)

    content = log_file.read_text()
    assert "DEBUG" in content
    assert "scheduler" in content
    assert "Performing cycle #1" in content
