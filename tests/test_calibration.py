from __future__ import annotations

import json

import pytest

from formfill.coords.calibration import (
    DEFAULT_CALIBRATION,
    ZERO_CALIBRATION,
    CalibrationLog,
    CalibrationSample,
    RenderContext,
    analyze_samples,
    calibrate,
)


def _sample(preview_y: float, pdf_y: float, intended_y: float = 100.0) -> CalibrationSample:
    return CalibrationSample(
        intended_x=50.0,
        intended_y=intended_y,
        actual_preview_x=50.0,
        actual_preview_y=preview_y,
        actual_pdf_x=50.0,
        actual_pdf_y=pdf_y,
        zoom=1.0,
        timestamp=0.0,
    )


def test_default_offsets():
    assert calibrate(RenderContext.PREVIEW, 10.0, 20.0) == (10.0, 18.5)
    assert calibrate(RenderContext.EDIT, 10.0, 20.0) == (10.0, 18.5)
    assert calibrate(RenderContext.PDF, 10.0, 20.0) == (10.0, 23.5)


def test_zero_calibration_is_identity():
    for context in RenderContext:
        assert calibrate(context, 10.0, 20.0, ZERO_CALIBRATION) == (10.0, 20.0)


def test_analyze_samples_reports_mean_and_spread():
    analysis = analyze_samples([_sample(101.0, 97.0), _sample(103.0, 95.0)])
    assert analysis.sample_count == 2
    assert analysis.preview_y_mean == pytest.approx(2.0)
    assert analysis.preview_y_stddev == pytest.approx(1.0)
    assert analysis.pdf_y_mean == pytest.approx(-4.0)

    suggested = analysis.suggested_config(DEFAULT_CALIBRATION)
    assert suggested.preview.dy == pytest.approx(-2.0)
    assert suggested.pdf.dy == pytest.approx(4.0)


def test_analyze_without_samples():
    assert analyze_samples([]).sample_count == 0


def test_log_keeps_most_recent_records_and_persists(tmp_path):
    path = tmp_path / "calibration.json"
    log = CalibrationLog(path=path, max_records=3)
    for index in range(5):
        log.record(_sample(100.0 + index, 100.0))

    assert [sample.actual_preview_y for sample in log.samples] == [102.0, 103.0, 104.0]
    assert len(json.loads(path.read_text(encoding="utf-8"))) == 3

    reloaded = CalibrationLog.load(path)
    assert reloaded.samples == log.samples
    assert reloaded.analyze().preview_y_mean == pytest.approx(3.0)

    reloaded.clear()
    assert json.loads(path.read_text(encoding="utf-8")) == []
