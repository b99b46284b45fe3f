"""
Shared fixtures for the hotlink test suite.
"""

import socket
from typing import Generator

import pytest

from hotlink.env import Env
from hotlink.logging import LoggingConfig
from tests.unit.mocks import FakeChannel, FakeFetcher, RecordingLogger


@pytest.fixture(autouse=True)
def reset_logging_config() -> Generator[None, None, None]:
    config = LoggingConfig()
    config.update(log_level="error", log_output="stderr")
    config.set_debug(False)
    yield
    config.update(log_level="error", log_output="stderr")
    config.set_debug(False)


@pytest.fixture
def env() -> Env:
    return Env(
        HOTLINK_RECONNECT_DELAY="10s",
        HOTLINK_RECONNECT_FAST_DELAY="1s",
        HOTLINK_NOTICE_DURATION="3s",
    )


@pytest.fixture
def logger() -> RecordingLogger:
    return RecordingLogger()


@pytest.fixture
def channel() -> FakeChannel:
    return FakeChannel()


@pytest.fixture
def fetcher() -> FakeFetcher:
    return FakeFetcher()


@pytest.fixture
def unused_port() -> int:
    """A port nothing is listening on."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as candidate:
        candidate.bind(("127.0.0.1", 0))
        return candidate.getsockname()[1]
