"""
Tests for runtime settings defaults and validation.
"""

import pytest
from pydantic import ValidationError

from config.settings import Settings
from simulation.models import TICKS_PER_DAY


class TestDefaults:
    """Test default values."""

    def test_threat_timeout_is_six_tenths_of_a_day(self):
        assert Settings(_env_file=None).THREAT_TIMEOUT_TICKS == int(TICKS_PER_DAY * 0.6)

    def test_limits(self):
        config = Settings(_env_file=None)

        assert config.MAX_EVENTS == 5
        assert config.MAX_THREAT_SCAN_BACK == 30
        assert config.BODY_MAX_CHARS == 600
        assert config.DEV_MODE is False


class TestValidation:
    """Test field validation."""

    def test_context_key_is_stripped(self):
        assert Settings(_env_file=None, CONTEXT_CHANNEL_KEY=" events ").CONTEXT_CHANNEL_KEY == "events"

    def test_blank_context_key_rejected(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, CONTEXT_CHANNEL_KEY="   ")

    def test_negative_limit_rejected(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, MAX_EVENTS=-1)
