"""Shared test fixtures."""

import pytest

from nextra_publish.config import Settings
from nextra_publish.models import Resource
from tests.unit.fakes import PNG_BYTES


@pytest.fixture
def settings() -> Settings:
    """Valid GitHub settings with the default publish prefixes."""
    return Settings(
        provider="github",
        user_name="octo",
        repository_name="site",
        access_token="token",
        max_workers=4,
    )


@pytest.fixture
def image_resources() -> dict[str, Resource]:
    return {
        "diagram.png": Resource(path="assets/diagram.png", content=PNG_BYTES),
        "photo one.jpg": Resource(path="assets/photo one.jpg", content=b"jpeg-bytes"),
        "Other Note": Resource(path="Other Note.md", content=b"# not an image"),
    }


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the user's real settings files and token out of tests."""
    monkeypatch.setattr("nextra_publish.config.SETTINGS_FILES", [])
    monkeypatch.delenv("NEXTRA_PUBLISH_TOKEN", raising=False)
