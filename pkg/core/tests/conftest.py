"""
Global test configuration for Linearcast.

This module provides global pytest configuration and fixtures.
"""

import json
import sys
from pathlib import Path

import pytest

# Ensure the project src directory is importable without relying on external environment.
PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_PATH = PROJECT_ROOT / "src"
FIXTURES_PATH = Path(__file__).resolve().parent / "fixtures"
for _path in (SRC_PATH, FIXTURES_PATH):
    if str(_path) not in sys.path:
        sys.path.insert(0, str(_path))

from linearcast.catalog.static_media_catalog import StaticMediaCatalog  # noqa: E402
from linearcast.runtime.clock import SteppedClock  # noqa: E402
from linearcast.runtime.providers import JsonScheduleStore  # noqa: E402

from sample_data import SAMPLE_INDEX, SAMPLE_SCHEDULE, at_time  # noqa: E402


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    """A data directory holding the sample schedule.json and media-index.json."""
    directory = tmp_path / "data"
    directory.mkdir()
    (directory / "schedule.json").write_text(json.dumps(SAMPLE_SCHEDULE), encoding="utf-8")
    (directory / "media-index.json").write_text(json.dumps(SAMPLE_INDEX), encoding="utf-8")
    return directory


@pytest.fixture
def store(data_dir: Path) -> JsonScheduleStore:
    return JsonScheduleStore(data_dir / "schedule.json")


@pytest.fixture
def catalog() -> StaticMediaCatalog:
    return StaticMediaCatalog.from_dict(SAMPLE_INDEX)


@pytest.fixture
def clock() -> SteppedClock:
    return SteppedClock(start_ms=at_time(10, 3))
