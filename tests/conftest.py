"""Shared pytest configuration."""

import pytest

from scaleflow.logging_config import configure_logger


@pytest.fixture(autouse=True)
def _fresh_log_sink():
    # CliRunner closes the stream the CLI callback binds the sink to.
    configure_logger("DEBUG")
    yield
