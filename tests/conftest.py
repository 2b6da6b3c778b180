import pytest

from watertower.tower import TowerConfig, TowerSimulator


@pytest.fixture
def sim():
    """Default tower: 1000 L, level 50, consumers 25+20, both pumps 80 L/h, all pumps off."""
    return TowerSimulator(TowerConfig(), verbose=False)


@pytest.fixture
def make_sim():
    def _make(**overrides):
        return TowerSimulator(TowerConfig(**overrides), verbose=False)
    return _make
