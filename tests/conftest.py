"""
Shared pytest fixtures for all tests.
"""
from typing import Dict
from unittest.mock import MagicMock

import pytest
import yaml

from bingers.store import SubscriptionStore

THE_ORVILLE = 20263
STAR_TREK_DISCOVERY = 7480


def make_show(show_id: int, name: str, **kwargs) -> Dict:
    show = {
        "id": show_id,
        "name": name,
        "language": "English",
        "status": "Running",
        "network": "FOX",
        "runtime": 60,
        "premiered": "2017-09-10",
        "schedule": {"time": "21:00", "days": ["Thursday"]},
        "last_updated": 1510000000,
    }
    show.update(kwargs)
    return show


def make_episode(show_id: int, season: int, number: int, **kwargs) -> Dict:
    episode = {
        "id": show_id * 1000 + season * 100 + number,
        "show_id": show_id,
        "season": season,
        "number": number,
        "name": f"Episode {season}x{number}",
        "airdate": f"2017-{season:02d}-{number:02d}",
        "airstamp": f"2017-{season:02d}-{number:02d}T01:00:00+00:00",
        "runtime": 60,
        "watched": False,
    }
    episode.update(kwargs)
    return episode


@pytest.fixture
def the_orville() -> Dict:
    return make_show(THE_ORVILLE, "The Orville")


@pytest.fixture
def star_trek_discovery() -> Dict:
    return make_show(STAR_TREK_DISCOVERY, "Star Trek: Discovery", network="CBS All Access")


@pytest.fixture
def store(tmp_path) -> SubscriptionStore:
    return SubscriptionStore(tmp_path / "data")


@pytest.fixture
def config_file(tmp_path) -> str:
    """Config file pointing the data directory into tmp_path."""
    path = tmp_path / "config.yaml"
    path.write_text(yaml.dump({"data_dir": str(tmp_path / "data")}))
    return str(path)


@pytest.fixture
def mock_client() -> MagicMock:
    client = MagicMock()
    client.search_shows.return_value = []
    client.get_episodes.return_value = []
    return client


@pytest.fixture
def mock_display() -> MagicMock:
    display = MagicMock()
    display.confirm.return_value = True
    display.ask.return_value = ""
    return display
