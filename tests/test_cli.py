from __future__ import annotations

import json

import pytest

from conftest import make_pdf, open_pdf
from formfill import cli


@pytest.fixture(autouse=True)
def _quiet_logging(monkeypatch):
    monkeypatch.setattr(cli, "setup_logging", lambda *args, **kwargs: None)


def _write_inputs(tmp_path, fields):
    pdf = tmp_path / "in.pdf"
    pdf.write_bytes(make_pdf())
    fields_path = tmp_path / "fields.json"
    fields_path.write_text(json.dumps(fields), encoding="utf-8")
    values_path = tmp_path / "values.json"
    values_path.write_text(json.dumps({"name": "Ada Lovelace"}), encoding="utf-8")
    return pdf, fields_path, values_path


def _record(**overrides):
    record = {
        "id": "f1",
        "slug": "name",
        "inputType": "TEXT",
        "pageNumber": 1,
        "xCoord": 72.0,
        "yCoord": 100.0,
        "width": 250.0,
        "height": 35.0,
    }
    record.update(overrides)
    return record


def test_fill_from_files(tmp_path):
    pdf, fields_path, values_path = _write_inputs(tmp_path, [_record()])
    out = tmp_path / "out.pdf"

    code = cli.main(
        ["--pdf", str(pdf), "--fields", str(fields_path), "--values", str(values_path), "--out", str(out)]
    )

    assert code == 0
    with open_pdf(out.read_bytes()) as doc:
        assert "Ada Lovelace" in doc[0].get_text()


def test_overrides_and_no_calibration(tmp_path):
    pdf, fields_path, values_path = _write_inputs(tmp_path, [_record()])
    overrides = tmp_path / "overrides.json"
    overrides.write_text(json.dumps({"f1": {"x": 300.0, "y": 400.0}}), encoding="utf-8")
    out = tmp_path / "out.pdf"

    code = cli.main(
        [
            "--pdf", str(pdf),
            "--fields", str(fields_path),
            "--values", str(values_path),
            "--out", str(out),
            "--overrides", str(overrides),
            "--no-calibration",
        ]
    )

    assert code == 0
    with open_pdf(out.read_bytes()) as doc:
        (hit,) = doc[0].search_for("Ada Lovelace")
    assert hit.x0 == pytest.approx(300.0, abs=0.5)


def test_invalid_field_record_fails(tmp_path):
    pdf, fields_path, values_path = _write_inputs(tmp_path, [_record(inputType="DROPDOWN")])
    out = tmp_path / "out.pdf"

    code = cli.main(
        ["--pdf", str(pdf), "--fields", str(fields_path), "--values", str(values_path), "--out", str(out)]
    )

    assert code == 1
    assert not out.exists()


def test_unreadable_pdf_fails(tmp_path):
    pdf, fields_path, values_path = _write_inputs(tmp_path, [_record()])
    pdf.write_bytes(b"not a pdf")
    out = tmp_path / "out.pdf"

    code = cli.main(
        ["--pdf", str(pdf), "--fields", str(fields_path), "--values", str(values_path), "--out", str(out)]
    )

    assert code == 1
