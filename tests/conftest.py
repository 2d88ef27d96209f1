"""Shared test fixtures for the crmsync test suite."""

from collections.abc import Callable, Generator
from pathlib import Path

import pytest

from crmsync.config import get_settings
from crmsync.config.settings import set_toml_config


@pytest.fixture
def test_config_dir(tmp_path: Path) -> Path:
    """Create a temporary config directory for testing."""
    config_dir = tmp_path / "config"
    config_dir.mkdir()
    return config_dir


@pytest.fixture
def mock_toml_files(test_config_dir: Path) -> Callable[[dict[str, str]], None]:
    """Factory fixture to create TOML files in the test config directory.

    Usage:
        def test_something(mock_toml_files):
            mock_toml_files({
                "default.toml": "app_name = 'test'",
                "development.toml": "debug = true",
            })
    """

    def _create_toml_files(files: dict[str, str]) -> None:
        for filename, content in files.items():
            (test_config_dir / filename).write_text(content)

    return _create_toml_files


@pytest.fixture
def use_config_dir(
    test_config_dir: Path, monkeypatch: pytest.MonkeyPatch
) -> Path:
    """Point the loader at the temporary config directory."""
    monkeypatch.setenv("CRMSYNC_CONFIG_DIR", str(test_config_dir))
    monkeypatch.setenv("CRMSYNC_ENV", "test")
    return test_config_dir


@pytest.fixture(autouse=True)
def clear_settings_cache() -> Generator[None, None, None]:
    """Clear cached settings and TOML values before and after each test."""
    get_settings.cache_clear()
    set_toml_config({})
    yield
    get_settings.cache_clear()
    set_toml_config({})
