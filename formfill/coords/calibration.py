"""Per-context calibration offsets and the offline drift analysis tool."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, replace
from enum import Enum
import json
import logging
from pathlib import Path
import statistics

logger = logging.getLogger(__name__)

MAX_CALIBRATION_RECORDS = 50


class RenderContext(str, Enum):
    EDIT = "edit"
    PREVIEW = "preview"
    PDF = "pdf"


@dataclass(slots=True, frozen=True)
class CalibrationOffset:
    dx: float = 0.0
    dy: float = 0.0


@dataclass(slots=True, frozen=True)
class CalibrationConfig:
    """Fixed offsets, in unscaled page points, applied before any scaling.

    ``preview`` covers both on-screen consumers (the live editor and the
    static preview); ``pdf`` covers the final document.
    """

    preview: CalibrationOffset = CalibrationOffset()
    pdf: CalibrationOffset = CalibrationOffset()

    def offset_for(self, context: RenderContext) -> CalibrationOffset:
        if context is RenderContext.PDF:
            return self.pdf
        return self.preview


# Tuned by hand against rendered output; negative dy moves up on screen,
# positive dy moves down in the PDF.
DEFAULT_CALIBRATION = CalibrationConfig(
    preview=CalibrationOffset(dx=0.0, dy=-1.5),
    pdf=CalibrationOffset(dx=0.0, dy=3.5),
)
ZERO_CALIBRATION = CalibrationConfig()


def calibrate(
    context: RenderContext,
    x: float,
    y: float,
    config: CalibrationConfig = DEFAULT_CALIBRATION,
) -> tuple[float, float]:
    offset = config.offset_for(context)
    return x + offset.dx, y + offset.dy


@dataclass(slots=True)
class CalibrationSample:
    intended_x: float
    intended_y: float
    actual_preview_x: float
    actual_preview_y: float
    actual_pdf_x: float
    actual_pdf_y: float
    zoom: float
    timestamp: float


@dataclass(slots=True, frozen=True)
class CalibrationAnalysis:
    preview_y_mean: float = 0.0
    preview_y_stddev: float = 0.0
    pdf_y_mean: float = 0.0
    pdf_y_stddev: float = 0.0
    sample_count: int = 0

    def suggested_config(self, base: CalibrationConfig = DEFAULT_CALIBRATION) -> CalibrationConfig:
        """Return ``base`` with each context's dy replaced by the negated mean drift."""
        return CalibrationConfig(
            preview=replace(base.preview, dy=-self.preview_y_mean),
            pdf=replace(base.pdf, dy=-self.pdf_y_mean),
        )


def analyze_samples(samples: list[CalibrationSample]) -> CalibrationAnalysis:
    if not samples:
        return CalibrationAnalysis()

    preview_drift = [s.actual_preview_y - s.intended_y for s in samples]
    pdf_drift = [s.actual_pdf_y - s.intended_y for s in samples]
    analysis = CalibrationAnalysis(
        preview_y_mean=statistics.fmean(preview_drift),
        preview_y_stddev=statistics.pstdev(preview_drift),
        pdf_y_mean=statistics.fmean(pdf_drift),
        pdf_y_stddev=statistics.pstdev(pdf_drift),
        sample_count=len(samples),
    )
    logger.info(
        "Calibration drift over %d samples: preview %.3f (sd %.3f), pdf %.3f (sd %.3f)",
        analysis.sample_count,
        analysis.preview_y_mean,
        analysis.preview_y_stddev,
        analysis.pdf_y_mean,
        analysis.pdf_y_stddev,
    )
    return analysis


@dataclass(slots=True)
class CalibrationLog:
    """Most recent drift samples, optionally persisted to a JSON file."""

    path: Path | None = None
    samples: list[CalibrationSample] = field(default_factory=list)
    max_records: int = MAX_CALIBRATION_RECORDS

    @classmethod
    def load(cls, path: str | Path) -> CalibrationLog:
        log_path = Path(path)
        log = cls(path=log_path)
        if log_path.exists():
            raw = json.loads(log_path.read_text(encoding="utf-8"))
            log.samples = [CalibrationSample(**item) for item in raw]
            del log.samples[: -log.max_records]
        return log

    def record(self, sample: CalibrationSample) -> None:
        self.samples.append(sample)
        del self.samples[: -self.max_records]
        self._persist()

    def clear(self) -> None:
        self.samples.clear()
        self._persist()

    def export(self) -> str:
        return json.dumps([asdict(sample) for sample in self.samples], indent=2)

    def analyze(self) -> CalibrationAnalysis:
        return analyze_samples(self.samples)

    def _persist(self) -> None:
        if self.path is None:
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(self.export(), encoding="utf-8")
