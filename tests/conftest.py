# tests/conftest.py
from __future__ import annotations

import os
from pathlib import Path

import pytest

from photo_tagger.tools.vision import MockVisionProvider
from tests.utils import (
    FINISHER_BOARD,
    FINISHER_PLATE,
    ROLLER_BOARD,
    ROLLER_PLATE,
    make_payload,
    make_photo_dir,
    photo_name,
)


# -------- Isolate from the developer's environment --------
@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for key in list(os.environ):
        if key.startswith("PHOTO_TAGGER_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    yield


# -------- Site folder fixtures --------
@pytest.fixture
def site_responses() -> dict[str, str]:
    """
    Canned analyzer output for a morning with two machines:

      09:00 roller board   09:02 roller plate   09:04 roller overview (no text)
      09:30 finisher board 09:31 finisher plate
    """
    return {
        photo_name(0): make_payload(photo_name(0), board_text=ROLLER_BOARD, notes="タイヤローラーと黒板"),
        photo_name(2): make_payload(photo_name(2), other_text=ROLLER_PLATE),
        photo_name(4): make_payload(
            photo_name(4),
            objects=[{"label": "タイヤローラー", "bbox": [0.1, 0.2, 0.9, 0.8], "area_ratio": 0.48}],
        ),
        photo_name(30): make_payload(photo_name(30), board_text=FINISHER_BOARD),
        photo_name(31): make_payload(photo_name(31), other_text=FINISHER_PLATE),
    }


@pytest.fixture
def site_dir(tmp_path: Path, site_responses) -> Path:
    return make_photo_dir(tmp_path / "site", site_responses)


@pytest.fixture
def mock_provider(site_responses):
    """Factory: MockVisionProvider over the site responses (extra responses / failures optional)."""

    def _factory(extra: dict[str, str] | None = None, *, fail=()):
        return MockVisionProvider({**site_responses, **(extra or {})}, fail=fail)

    return _factory


# -------- Pytest markers --------
def pytest_configure(config):
    config.addinivalue_line("markers", "integration: marks integration tests")
