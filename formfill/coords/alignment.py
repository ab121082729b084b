"""Cross-view alignment tracking for diagnosing drift between editor and preview."""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
import time

from formfill.coords.calibration import RenderContext
from formfill.coords.precision import coordinates_match

logger = logging.getLogger(__name__)

DRIFT_TOLERANCE = 3.0


@dataclass(slots=True, frozen=True)
class TrackedPosition:
    field_id: str
    context: RenderContext
    x: float
    y: float
    width: float
    height: float
    timestamp: float


@dataclass(slots=True)
class AlignmentReport:
    field_id: str
    edit: TrackedPosition
    preview: TrackedPosition
    pdf: TrackedPosition | None
    x_offset: float
    y_offset: float
    severity: str
    issues: list[str] = field(default_factory=list)

    @property
    def aligned(self) -> bool:
        return not self.issues


def severity_for(x_offset: float, y_offset: float) -> str:
    worst = max(x_offset, y_offset)
    if worst <= 1:
        return "low"
    if worst <= 3:
        return "medium"
    if worst <= 5:
        return "high"
    return "critical"


class AlignmentTracker:
    """Keeps the latest recorded position of each field per rendering context."""

    def __init__(self, tolerance: float = DRIFT_TOLERANCE) -> None:
        self._tolerance = tolerance
        self._positions: dict[str, dict[RenderContext, TrackedPosition]] = {}

    def record(
        self,
        field_id: str,
        context: RenderContext,
        x: float,
        y: float,
        width: float,
        height: float,
    ) -> None:
        self._positions.setdefault(field_id, {})[context] = TrackedPosition(
            field_id=field_id,
            context=context,
            x=x,
            y=y,
            width=width,
            height=height,
            timestamp=time.time(),
        )

    def clear(self) -> None:
        self._positions.clear()

    def report(self, field_id: str) -> AlignmentReport | None:
        by_context = self._positions.get(field_id, {})
        edit = by_context.get(RenderContext.EDIT)
        preview = by_context.get(RenderContext.PREVIEW)
        if edit is None or preview is None:
            return None

        x_offset = abs(edit.x - preview.x)
        y_offset = abs(edit.y - preview.y)
        issues: list[str] = []
        if not coordinates_match(edit.x, preview.x, self._tolerance):
            issues.append(f"X drift between edit and preview: {x_offset:.3f}")
        if not coordinates_match(edit.y, preview.y, self._tolerance):
            issues.append(f"Y drift between edit and preview: {y_offset:.3f}")
        size_matches = coordinates_match(edit.width, preview.width, self._tolerance) and coordinates_match(
            edit.height, preview.height, self._tolerance
        )
        if not size_matches:
            issues.append(
                f"Size mismatch: edit {edit.width:.3f}x{edit.height:.3f}, "
                f"preview {preview.width:.3f}x{preview.height:.3f}"
            )

        report = AlignmentReport(
            field_id=field_id,
            edit=edit,
            preview=preview,
            pdf=by_context.get(RenderContext.PDF),
            x_offset=x_offset,
            y_offset=y_offset,
            severity=severity_for(x_offset, y_offset),
            issues=issues,
        )
        if issues:
            logger.warning("Field %s misaligned (%s): %s", field_id, report.severity, "; ".join(issues))
        return report
