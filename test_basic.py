#!/usr/bin/env python3
"""
Basic tests for the Booru Tagger package.
These cover configuration, data models and logging without loading a model.
"""

import sys
from pathlib import Path

import pytest
from pydantic import ValidationError

# Add the project root to the Python path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))


def test_imports():
    """Test that all modules can be imported."""
    from booru_tagger import config, logging, models, catalog, tagging_engine, main  # noqa: F401


def test_config_defaults(monkeypatch):
    """Test configuration defaults."""
    for name in ("TAGGER_GENERAL_THRESHOLD", "TAGGER_CHARACTER_THRESHOLD", "TAGGER_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)

    from booru_tagger.config import Settings

    settings = Settings(_env_file=None)
    assert settings.general_threshold == 0.35
    assert settings.character_threshold == 0.85
    assert settings.general_mcut_enabled is False
    assert settings.character_mcut_enabled is False
    assert settings.providers == ["CPUExecutionProvider"]


def test_config_from_environment(monkeypatch):
    """Test TAGGER_* environment variables."""
    monkeypatch.setenv("TAGGER_LOG_LEVEL", "debug")
    monkeypatch.setenv("TAGGER_GENERAL_MCUT_ENABLED", "true")
    monkeypatch.setenv("TAGGER_PROVIDERS", '["CUDAExecutionProvider", "CPUExecutionProvider"]')

    from booru_tagger.config import Settings

    settings = Settings(_env_file=None)
    assert settings.log_level == "DEBUG"
    assert settings.general_mcut_enabled is True
    assert settings.providers == ["CUDAExecutionProvider", "CPUExecutionProvider"]


def test_config_validation():
    """Test invalid configuration values."""
    from booru_tagger.config import Settings

    with pytest.raises(ValidationError):
        Settings(_env_file=None, log_level="LOUD")
    with pytest.raises(ValidationError):
        Settings(_env_file=None, general_threshold=1.5)

    assert Settings(_env_file=None, providers="A, B").providers == ["A", "B"]


def test_models():
    """Test data models."""
    from booru_tagger.models import Category, Predictions

    assert Category.from_code("9") == Category.RATING
    assert Category.from_code("0") == Category.GENERAL
    assert Category.from_code("4") == Category.CHARACTER
    assert Category.from_code("1") == Category.NONE

    prediction = Predictions(
        rating={"general": 0.2, "sensitive": 0.7},
        general={"1girl": 0.99, "smile": 0.4, "long hair": 0.8},
    )
    assert prediction.names() == ["1girl", "long hair", "smile"]
    assert prediction.top_rating() == ("sensitive", 0.7)
    assert prediction.character == {}
    assert Predictions().top_rating() is None


def test_logging():
    """Test logging setup."""
    from booru_tagger.logging import setup_logging, get_logger, MetricsLogger

    setup_logging()
    logger = get_logger("test")
    logger.info("Test log message")

    metrics = MetricsLogger()
    metrics.log_chunk_complete(4, 0.5)
    metrics.log_chunk_complete(1, 0.25)
    metrics.log_run_failure("boom")

    current_metrics = metrics.get_metrics()
    assert current_metrics["images_tagged"] == 5
    assert current_metrics["chunks_run"] == 2
    assert current_metrics["failures"] == 1
    assert current_metrics["inference_time"] == pytest.approx(0.75)
