"""Shared fixtures for all tests."""
import pytest

from chiptable.config import Settings
from chiptable.game.engine import RoundEngine


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None)


@pytest.fixture
def engine(settings) -> RoundEngine:
    return RoundEngine(settings)
