from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Dict, Iterable, List, Sequence

from ..models import Artifact, ArtifactKind, ReportData, ReportGenerationError
from ..storage import ArtifactSink, artifact_filename
from .render_docx import render_docx
from .render_pdf import render_pdf
from .render_text import render_text_bytes

logger = logging.getLogger(__name__)

RENDERERS: Dict[ArtifactKind, Callable[[ReportData, datetime], bytes]] = {
    ArtifactKind.TEXT: render_text_bytes,
    ArtifactKind.DOCUMENT: render_docx,
    ArtifactKind.CANVAS: render_pdf,
}

ALL_KINDS: Sequence[ArtifactKind] = (ArtifactKind.TEXT, ArtifactKind.DOCUMENT, ArtifactKind.CANVAS)


def render_artifact(report: ReportData, kind: ArtifactKind, now: datetime) -> Artifact:
    payload = RENDERERS[kind](report, now)
    return Artifact(
        kind=kind,
        filename=artifact_filename(kind, report.start_date, report.end_date),
        payload=payload,
    )


def export_reports(
    report: ReportData,
    sink: ArtifactSink,
    now: datetime,
    kinds: Iterable[ArtifactKind] = ALL_KINDS,
) -> List[str]:
    """
    Render every requested artifact, then hand them to the sink.

    Rendering happens fully in memory first, so a failure in any renderer
    leaves the sink untouched.
    """
    artifacts: List[Artifact] = []
    for kind in kinds:
        try:
            artifacts.append(render_artifact(report, kind, now))
        except ReportGenerationError:
            logger.exception("Report generation failed for %s", kind.value)
            raise

    written: List[str] = []
    for artifact in artifacts:
        try:
            sink.write(artifact.filename, artifact.payload)
        except OSError as exc:
            logger.exception("Sink rejected %s", artifact.filename)
            raise ReportGenerationError(artifact.kind, "SINK_WRITE_FAILED", str(exc)) from exc
        logger.info("Wrote %s (%d bytes)", artifact.filename, len(artifact.payload))
        written.append(artifact.filename)
    return written
