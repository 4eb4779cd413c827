"""Pytest tests for loading settings from the environment and .env files."""

import logging
import os
from unittest.mock import patch

import pytest

from starprnt.codepages import DEFAULT_CANDIDATES
from starprnt.config import _parse_bool, _parse_list, load_settings
from starprnt.options import EncoderOptions


@pytest.fixture
def missing_env_file(tmp_path):
    return str(tmp_path / "missing.env")


class TestParsers:
    """Tests for the small value parsers."""

    @pytest.mark.parametrize("value", ["true", "1", "YES", " on "])
    def test_truthy(self, value):
        assert _parse_bool(value) is True

    @pytest.mark.parametrize("value", ["false", "0", "no", "off"])
    def test_falsy(self, value):
        assert _parse_bool(value, default=True) is False

    @pytest.mark.parametrize("value", [None, "", "  "])
    def test_missing_uses_default(self, value):
        assert _parse_bool(value, default=True) is True

    @pytest.mark.parametrize(
        "value, expected",
        [
            ("cp437,cp866", ("cp437", "cp866")),
            ("[cp437, cp866]", ("cp437", "cp866")),
            ("cp437,,", ("cp437",)),
            ("", ()),
            (None, ()),
        ],
    )
    def test_parse_list(self, value, expected):
        assert _parse_list(value) == expected


class TestLoadSettings:
    """Tests for load_settings."""

    def test_defaults(self, missing_env_file):
        with patch.dict(os.environ, {}, clear=True):
            settings = load_settings(missing_env_file)

        assert settings.width == 48
        assert settings.word_wrap is True
        assert settings.codepage_mapping == "star"
        assert settings.codepage_candidates == DEFAULT_CANDIDATES
        assert settings.serial_port == "/dev/serial0"
        assert settings.baudrate == 9600
        assert settings.serial_parity == "N"
        assert settings.serial_timeout == 1.0
        assert settings.serial_dsrdtr is True
        assert settings.log_dir == "logs"
        assert settings.log_level == "INFO"

    def test_environment_overrides(self, missing_env_file):
        env = {
            "STARPRNT_WIDTH": "32",
            "STARPRNT_WORD_WRAP": "false",
            "STARPRNT_CODEPAGE_CANDIDATES": "[cp866, cp437]",
            "SERIAL_PORT": "/dev/ttyUSB0",
            "SERIAL_PARITY": "e",
            "LOG_LEVEL": "debug",
        }
        with patch.dict(os.environ, env, clear=True):
            settings = load_settings(missing_env_file)

        assert settings.width == 32
        assert settings.word_wrap is False
        assert settings.codepage_candidates == ("cp866", "cp437")
        assert settings.serial_port == "/dev/ttyUSB0"
        assert settings.serial_parity == "E"
        assert settings.log_level == "DEBUG"

    def test_reads_env_file(self, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text("STARPRNT_WIDTH=42\nBAUDRATE=19200\n")

        with patch.dict(os.environ, {}, clear=True):
            settings = load_settings(str(env_file))

        assert settings.width == 42
        assert settings.baudrate == 19200

    def test_invalid_integer_logs_warning(self, missing_env_file, caplog):
        caplog.set_level(logging.WARNING)
        with patch.dict(os.environ, {"STARPRNT_WIDTH": "wide"}, clear=True):
            settings = load_settings(missing_env_file)

        assert settings.width == 48
        assert "Invalid integer for STARPRNT_WIDTH" in caplog.text

    def test_encoder_options(self, missing_env_file):
        with patch.dict(os.environ, {"STARPRNT_WIDTH": "40"}, clear=True):
            options = load_settings(missing_env_file).encoder_options()

        assert options == EncoderOptions(width=40)

    def test_invalid_log_level_falls_back_to_info(self, missing_env_file, caplog):
        caplog.set_level(logging.WARNING)
        with patch.dict(os.environ, {"LOG_LEVEL": "loud"}, clear=True):
            settings = load_settings(missing_env_file)

        assert settings.log_level == "INFO"
        assert "Invalid log level for LOG_LEVEL" in caplog.text

    @pytest.mark.parametrize("value", ["debug", " WARNING "])
    def test_log_level_is_normalized(self, missing_env_file, value):
        with patch.dict(os.environ, {"LOG_LEVEL": value}, clear=True):
            settings = load_settings(missing_env_file)

        assert settings.log_level == value.strip().upper()
