from __future__ import annotations

import json
import logging
import sys

from formfill.config import Settings, get_settings
from formfill.coords.calibration import DEFAULT_CALIBRATION
from formfill.logging_setup import JsonFormatter


def test_defaults_match_built_in_calibration(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    assert Settings().calibration() == DEFAULT_CALIBRATION


def test_offsets_from_environment(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("FORMFILL_PDF_Y_OFFSET", "2.25")
    monkeypatch.setenv("FORMFILL_IMAGE_FETCH_TIMEOUT", "3")
    settings = Settings()
    assert settings.calibration().pdf.dy == 2.25
    assert settings.calibration().preview.dy == -1.5
    assert settings.image_fetch_timeout == 3.0


def test_json_formatter_includes_exception():
    formatter = JsonFormatter()
    try:
        raise ValueError("boom")
    except ValueError:
        record = logging.LogRecord("formfill.test", logging.ERROR, __file__, 1, "failed %s", ("fill",), None)
        record.exc_info = sys.exc_info()
    payload = json.loads(formatter.format(record))
    assert payload["level"] == "ERROR"
    assert payload["logger"] == "formfill.test"
    assert payload["message"] == "failed fill"
    assert "ValueError: boom" in payload["exception"]


def test_get_settings_is_cached_until_cleared(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    get_settings.cache_clear()
    try:
        monkeypatch.setenv("FORMFILL_LOG_LEVEL", "DEBUG")
        first = get_settings()
        monkeypatch.setenv("FORMFILL_LOG_LEVEL", "WARNING")
        assert get_settings() is first
        assert first.log_level == "DEBUG"

        get_settings.cache_clear()
        assert get_settings().log_level == "WARNING"
    finally:
        get_settings.cache_clear()
