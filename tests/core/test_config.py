# tests/core/test_config.py
"""
Tests for the Config class: secret lookup and validation.
"""

import os
from unittest.mock import patch

import pytest

from opmon.core.config import Config


class TestGetSecret:
    """Tests for the Config._get_secret method."""

    def test_get_secret_from_env_var(self):
        """Test that _get_secret falls back to environment variable when no file exists."""
        with patch.dict(os.environ, {"TEST_SECRET": "env_value"}):
            with patch("opmon.core.config.os.path.exists", return_value=False):
                assert Config._get_secret("TEST_SECRET") == "env_value"

    def test_get_secret_with_default(self):
        """Test that _get_secret returns default when neither file nor env var exists."""
        with patch.dict(os.environ, {}, clear=True):
            assert Config._get_secret("NONEXISTENT_SECRET", default="default_value") == "default_value"

    def test_get_secret_from_file_strips_whitespace(self):
        """Test that file-based secrets take precedence and are stripped."""
        with patch.dict(os.environ, {"KUBECONFIG": "/from/env"}):
            with patch("opmon.core.config.os.path.exists") as mock_exists:
                mock_exists.return_value = True
                with patch("builtins.open", create=True) as mock_open:
                    mock_open.return_value.__enter__.return_value.read.return_value = "  /from/file  \n"
                    assert Config._get_secret("KUBECONFIG") == "/from/file"
                mock_exists.assert_called_with("/etc/opmon/secrets/KUBECONFIG")

    def test_get_secret_permission_error(self):
        """Test that _get_secret raises PermissionError with clear message when file is unreadable."""
        with patch("opmon.core.config.os.path.exists", return_value=True):
            with patch("builtins.open", side_effect=PermissionError("Permission denied")):
                with pytest.raises(PermissionError) as exc_info:
                    Config._get_secret("TEST_SECRET")

        assert "exists but cannot be read due to permission denied" in str(exc_info.value)

    def test_get_secret_io_error(self):
        """Test that _get_secret raises IOError with clear message when file has I/O issues."""
        with patch("opmon.core.config.os.path.exists", return_value=True):
            with patch("builtins.open", side_effect=IOError("Disk read error")):
                with pytest.raises(IOError) as exc_info:
                    Config._get_secret("TEST_SECRET")

        assert "Please check the file integrity" in str(exc_info.value)


class TestValidateInstance:
    def test_defaults_are_valid(self):
        cfg = Config()
        cfg.validate_instance()
        assert cfg.NAMESPACE == "dynatrace-monitoring"
        assert cfg.SERVICE_ACCOUNT == "dynatrace-prometheus"
        assert cfg.TOKEN_DURATION == "87600h"
        assert cfg.PROMETHEUS_SERVICE_PORT == 9091

    def test_invalid_token_duration(self):
        cfg = Config()
        cfg.TOKEN_DURATION = "ten years"
        with pytest.raises(ValueError, match="OPMON_TOKEN_DURATION"):
            cfg.validate_instance()

    def test_invalid_port(self):
        cfg = Config()
        cfg.PROMETHEUS_SERVICE_PORT = 70000
        with pytest.raises(ValueError, match="port"):
            cfg.validate_instance()

    def test_negative_timeout(self):
        cfg = Config()
        cfg.READY_TIMEOUT = -1
        with pytest.raises(ValueError, match="READY_TIMEOUT"):
            cfg.validate_instance()
