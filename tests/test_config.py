"""Tests for application settings."""

import pytest
from pydantic import ValidationError

from gridmaze.config import Settings


def test_env_prefix(monkeypatch):
    monkeypatch.setenv("GRIDMAZE_DEFAULT_ROWS", "31")
    monkeypatch.setenv("GRIDMAZE_LOG_LEVEL", "debug")

    settings = Settings()

    assert settings.default_rows == 31
    assert settings.log_level == "DEBUG"


@pytest.mark.parametrize("value", [0.0, 1.0, -0.2])
def test_open_probability_must_be_fraction(value):
    with pytest.raises(ValidationError):
        Settings(open_probability=value)


def test_min_dimension_floor():
    with pytest.raises(ValidationError):
        Settings(min_dimension=4)


def test_unknown_log_level():
    with pytest.raises(ValidationError):
        Settings(log_level="LOUD")


def test_cors_origins_list():
    settings = Settings(cors_origins="http://a.test, http://b.test,", debug=False)
    assert settings.cors_origins_list == ["http://a.test", "http://b.test"]
    assert Settings(debug=True).cors_origins_list == ["*"]
