"""Unit tests for helpers, validators, logging and settings."""
import logging
import math

import pytest

from wbs_builder.config.settings import Settings, settings
from wbs_builder.utils.helpers import (
    first_present,
    normalize_identifier,
    parse_bool,
    safe_str,
    strip_marker,
)
from wbs_builder.utils.logger import configure_logging
from wbs_builder.utils.validators import (
    validate_no_duplicates,
    validate_references,
    validate_required_fields,
)


class TestHelpers:
    """Test cell-value helpers."""

    @pytest.mark.parametrize("value,expected", [
        (None, ''),
        (math.nan, ''),
        ('  T01 ', 'T01'),
        (12, '12'),
    ])
    def test_safe_str(self, value, expected):
        assert safe_str(value) == expected

    @pytest.mark.parametrize("value,expected", [
        (' uh101-f ', 'UH101-F'),
        ('test   bay  1', 'TEST BAY 1'),
        ('-', ''),
        (None, ''),
    ])
    def test_normalize_identifier(self, value, expected):
        assert normalize_identifier(value) == expected

    def test_strip_marker(self):
        """Only one leading marker is removed."""
        assert strip_marker('+UH1') == 'UH1'
        assert strip_marker('-FM1') == 'FM1'
        assert strip_marker('UH1') == 'UH1'

    def test_first_present(self):
        """Empty values fall through to the next synonym."""
        record = {'equipment_number': '', 'equipment_code': 'T01'}
        assert first_present(record, ('equipment_number', 'equipment_code')) == 'T01'
        assert first_present(record, ('missing',)) is None

    @pytest.mark.parametrize("value,expected", [
        (True, True),
        ('True', True),
        ('yes', True),
        ('0', False),
        ('False', False),
        ('', None),
        (None, None),
    ])
    def test_parse_bool(self, value, expected):
        assert parse_bool(value) is expected


class TestValidators:
    """Test record-level validators."""

    def test_required_fields(self):
        data = [{'code': '1', 'name': 'A'}, {'code': '', 'name': 'B'}]
        is_valid, invalid = validate_required_fields(data, {'code', 'name'})
        assert not is_valid
        assert invalid == ["Record 1: Missing fields ['code']"]

    def test_no_duplicates(self):
        data = [{'code': '1'}, {'code': '1.1'}, {'code': '1'}, {'code': '1'}]
        assert validate_no_duplicates(data, 'code') == (False, ['1'])

    def test_references(self):
        data = [{'code': '1', 'parent': None}, {'code': '1.1', 'parent': '1'}, {'code': '1.2.1', 'parent': '1.2'}]
        is_valid, dangling = validate_references(data, 'code', 'parent')
        assert not is_valid
        assert len(dangling) == 1


class TestConfigureLogging:
    """Test logger setup."""

    @pytest.fixture
    def logger_name(self):
        name = 'wbs_builder_test_logging'
        yield name
        logger = logging.getLogger(name)
        for handler in list(logger.handlers):
            handler.close()
            logger.removeHandler(handler)

    def test_console_and_file_handlers(self, tmp_path, logger_name):
        """A console and a rotating file handler are attached."""
        logger = configure_logging(logger_name, log_dir=tmp_path)
        assert len(logger.handlers) == 2
        logger.info('hello')
        assert (tmp_path / f'{logger_name}.log').exists()

    def test_repeated_calls_do_not_stack(self, tmp_path, logger_name):
        """Configuring twice keeps one set of handlers."""
        configure_logging(logger_name, log_dir=tmp_path)
        logger = configure_logging(logger_name, log_dir=tmp_path)
        assert len(logger.handlers) == 2


class TestSettings:
    """Test settings defaults."""

    def test_required_settings_present(self):
        assert settings.validate_required_settings() == []

    def test_missing_setting_reported(self, monkeypatch):
        monkeypatch.setattr(Settings, 'PROJECT_NAME', '')
        assert Settings.validate_required_settings() == ['WBS_PROJECT_NAME']
