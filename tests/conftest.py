"""Shared test fixtures."""

from collections.abc import Iterator

import pytest

from chix_mcp.config import Config
from chix_mcp.services import reset_state, set_config


@pytest.fixture(autouse=True)
def clean_state(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Isolate every test from CHIX_* variables and the config singleton."""
    for key in (
        "CHIX_COMMAND_TIMEOUT",
        "CHIX_MAX_STDERR_BYTES",
        "CHIX_MAX_OUTPUT_BYTES",
        "CHIX_KILL_GRACE_PERIOD",
        "CHIX_NIX_BIN",
        "CHIX_TRANSPORT",
        "CHIX_HTTP_HOST",
        "CHIX_HTTP_PORT",
    ):
        monkeypatch.delenv(key, raising=False)
    reset_state()
    yield
    reset_state()


@pytest.fixture
def fast_config() -> Config:
    """Config with short timeouts for tests that spawn real processes."""
    config = Config(command_timeout=10, kill_grace_period=0.5)
    set_config(config)
    return config
