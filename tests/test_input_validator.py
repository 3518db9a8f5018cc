"""Tests for name validation and safe joins."""

import os

import pytest

from vermgr.utils.input_validator import InputValidationError, InputValidator


class TestInputValidator:
    @pytest.mark.parametrize("version", ["18.17.0", "1.21.0", "3.12.0rc1", "stable", "1.70.0+build"])
    def test_valid_versions(self, version):
        assert InputValidator.validate_version_string(version)

    @pytest.mark.parametrize("version", ["", "   ", "..", "../x", "a/b", ".hidden", "x" * 101])
    def test_invalid_versions(self, version):
        with pytest.raises(InputValidationError):
            InputValidator.validate_version_string(version)

    def test_alias_names(self):
        assert InputValidator.validate_alias_name("work-2")
        with pytest.raises(InputValidationError):
            InputValidator.validate_alias_name("bad name")

    def test_safe_join_path(self, tmp_path):
        assert InputValidator.safe_join_path(str(tmp_path), "a", "b") == os.path.join(str(tmp_path), "a", "b")
        assert InputValidator.safe_join_path(str(tmp_path), ".") == str(tmp_path)
        with pytest.raises(InputValidationError):
            InputValidator.safe_join_path(str(tmp_path), "..", "escape")
