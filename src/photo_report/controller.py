"""
Module: controller

Purpose:
    Orchestrate the complete report pipeline.
    Normalize → Compose → Paginate (per format) → Render → Write

Key Functions:
    - generate_report(): Main entry point for generating a report
    - generate_with_status(): Same, reduced to a single status message

Key Classes:
    - ReportResult: Complete generation result
    - GenerationStatus: Single user-facing outcome
    - ReportSession: Owns one normalizer across generations
    - ReportError / PackagingError: Exceptions for generation failures

Dependencies:
    - images: Normalization strategies
    - layout: Composition and pagination
    - output: PDF and DOCX rendering

Used By:
    - cli: Command-line entry point
"""

from __future__ import annotations

import json
import logging
import tempfile
import threading
import time
from dataclasses import dataclass, replace
from datetime import datetime
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from photo_report.core.models import PhotoRecord, ReportMetadata

from .config import ReportConfig
from .images import ImageNormalizer, create_normalizer
from .layout import LayoutConfig, LayoutResult, compose_figures, paginate, provider_for
from .output import build_filename, render_to_docx, render_to_pdf

logger = logging.getLogger(__name__)

METADATA_FILENAME = "report_metadata.json"
FAILURE_MESSAGE = "Erro ao gerar arquivo. Tente novamente."

Renderer = Callable[..., bytes]

_RENDERERS: Dict[str, Renderer] = {
    "pdf": render_to_pdf,
    "docx": render_to_docx,
}


class ReportError(Exception):
    """Error during report generation."""
    pass


class PackagingError(ReportError):
    """An artifact could not be rendered or written; nothing was delivered."""
    pass


@dataclass(frozen=True)
class ReportResult:
    """
    Complete generation result (immutable).

    Attributes:
        artifacts: Output path per format
        page_counts: Page count per format (estimated for DOCX)
        figure_numbers: Figure numbers rendered, in order
        skipped: Figure numbers whose photo could not be decoded
        warnings: Warnings collected during generation
        elapsed: Generation time in seconds
        metadata_path: Path to report_metadata.json, if written

    Example:
        >>> result = generate_report(metadata, photos, config)
        >>> result.artifacts["pdf"].name
        'Relatório_fotografico_Escola_Modelo.pdf'
    """

    artifacts: Dict[str, Path]
    page_counts: Dict[str, int]
    figure_numbers: Tuple[int, ...]
    skipped: Tuple[int, ...] = ()
    warnings: Tuple[str, ...] = ()
    elapsed: float = 0.0
    metadata_path: Optional[Path] = None

    @property
    def figure_count(self) -> int:
        return len(self.figure_numbers)


@dataclass(frozen=True)
class GenerationStatus:
    """
    Outcome of one generation request as a single message.

    Attributes:
        ok: True when every artifact was delivered
        message: Human-readable status line
        result: ReportResult on success
    """

    ok: bool
    message: str
    result: Optional[ReportResult] = None


def generate_report(
    metadata: ReportMetadata,
    photos: Sequence[PhotoRecord],
    config: ReportConfig,
    normalizer: Optional[ImageNormalizer] = None,
) -> ReportResult:
    """
    Generate a report from start to finish.

    Pipeline:
    1. Normalize every photo (failures are skipped with a warning)
    2. Paginate the surviving figures for each output format
    3. Render every format to bytes
    4. Write all artifacts atomically, then report_metadata.json

    Args:
        metadata: Report header fields
        photos: Photos in document order
        config: Generation configuration
        normalizer: Normalization strategy; one is created (and closed)
            for this call when omitted

    Returns:
        ReportResult with artifact paths

    Raises:
        PackagingError: If normalization breaks down or any artifact fails
            to render or write; no artifact is left in the output directory
            in that case. A failed metadata write is only a warning.
    """
    start_time = time.perf_counter()
    warnings: List[str] = []

    logger.info(
        f"Starting report for {metadata.institution_name!r}: {len(photos)} photos, "
        f"{config.layout.columns} column(s), {config.layout.style.value}, formats={list(config.formats)}"
    )

    owned = normalizer is None
    if owned:
        normalizer = create_normalizer(config.prefer_isolated, config.max_workers)
    try:
        composition = compose_figures(photos, normalizer)
    except Exception as e:
        # Per-photo decode failures are handled inside compose_figures
        raise PackagingError(f"Image normalization failed: {e}") from e
    finally:
        if owned:
            normalizer.close()
    warnings.extend(composition.warnings)

    if not composition.figures:
        logger.warning("No figures survived normalization; report contains the header only")

    # Render everything before touching the output directory
    layouts: Dict[str, LayoutResult] = {}
    documents: Dict[str, bytes] = {}
    for fmt in config.formats:
        measure = provider_for(fmt)
        try:
            layout = paginate(composition.figures, config.layout, measure, metadata)
            documents[fmt] = _RENDERERS[fmt](layout, metadata, config.layout, measure)
        except Exception as e:
            raise PackagingError(f"Failed to render {fmt.upper()}: {e}") from e
        layouts[fmt] = layout
        warnings.extend(layout.warnings)
        logger.info(f"Rendered {fmt.upper()}: {layout.page_count} pages, {len(documents[fmt])} bytes")

    artifacts = _write_artifacts(config.output_dir, metadata, documents)

    elapsed = time.perf_counter() - start_time
    logger.info(f"Report generation completed in {elapsed:.2f}s")

    result = ReportResult(
        artifacts=artifacts,
        page_counts={fmt: layout.page_count for fmt, layout in layouts.items()},
        figure_numbers=composition.figure_numbers,
        skipped=composition.skipped,
        warnings=tuple(warnings),
        elapsed=elapsed,
    )

    if config.write_metadata:
        try:
            metadata_path = _write_metadata(config.output_dir, _build_metadata(metadata, config, result, layouts))
        except ReportError as e:
            # Artifacts are already delivered
            logger.warning(str(e))
            result = replace(result, warnings=result.warnings + (str(e),))
        else:
            result = replace(result, metadata_path=metadata_path)

    return result


def generate_with_status(
    metadata: ReportMetadata,
    photos: Sequence[PhotoRecord],
    config: ReportConfig,
    normalizer: Optional[ImageNormalizer] = None,
) -> GenerationStatus:
    """
    Generate a report and reduce the outcome to one status message.

    Per-image failures never fail the request; they are summarized in the
    message. A packaging failure yields ok=False with a single message.
    """
    try:
        result = generate_report(metadata, photos, config, normalizer)
    except ReportError as e:
        logger.error(f"Report generation failed: {e}")
        return GenerationStatus(ok=False, message=FAILURE_MESSAGE)
    return GenerationStatus(ok=True, message=_success_message(result), result=result)


class ReportSession:
    """
    Long-lived generation context owning one normalizer.

    The normalizer (and its worker pool) is created on first use and
    reused by later generations until close(). One generation at a time
    is expected; overlapping calls are logged, not blocked.

    Example:
        >>> with ReportSession(config) as session:
        ...     result = session.generate(metadata, photos)
    """

    def __init__(self, config: ReportConfig, normalizer: Optional[ImageNormalizer] = None) -> None:
        self._config = config
        self._normalizer = normalizer
        self._active = 0
        self._lock = threading.Lock()

    @property
    def config(self) -> ReportConfig:
        return self._config

    @property
    def normalizer(self) -> ImageNormalizer:
        if self._normalizer is None:
            self._normalizer = create_normalizer(self._config.prefer_isolated, self._config.max_workers)
        return self._normalizer

    def generate(
        self,
        metadata: ReportMetadata,
        photos: Sequence[PhotoRecord],
        layout: Optional[LayoutConfig] = None,
    ) -> ReportResult:
        """Generate one report, optionally overriding the session layout."""
        config = self._config
        if layout is not None:
            config = replace(config, layout=layout)

        with self._lock:
            self._active += 1
            overlapping = self._active > 1
        if overlapping:
            logger.warning("Another generation is already running in this session")
        try:
            return generate_report(metadata, photos, config, self.normalizer)
        finally:
            with self._lock:
                self._active -= 1

    def generate_with_status(
        self,
        metadata: ReportMetadata,
        photos: Sequence[PhotoRecord],
        layout: Optional[LayoutConfig] = None,
    ) -> GenerationStatus:
        try:
            result = self.generate(metadata, photos, layout)
        except ReportError as e:
            logger.error(f"Report generation failed: {e}")
            return GenerationStatus(ok=False, message=FAILURE_MESSAGE)
        return GenerationStatus(ok=True, message=_success_message(result), result=result)

    def close(self) -> None:
        if self._normalizer is not None:
            self._normalizer.close()
            self._normalizer = None

    def __enter__(self) -> "ReportSession":
        return self

    def __exit__(self, *args) -> None:
        self.close()


def _success_message(result: ReportResult) -> str:
    names = ", ".join(path.name for path in result.artifacts.values())
    message = f"Relatório gerado com {result.figure_count} figura(s): {names}"
    if result.skipped:
        skipped = ", ".join(str(n) for n in result.skipped)
        message += f" (imagens ignoradas: {skipped})"
    return message


def _write_artifacts(
    output_dir: Path,
    metadata: ReportMetadata,
    documents: Dict[str, bytes],
) -> Dict[str, Path]:
    """
    Write every document atomically.

    All documents go to temporary files first; they are moved into place
    only once every write succeeded.

    Raises:
        PackagingError: If any write or move fails (temporary files and
            already-moved artifacts are removed)
    """
    staged: List[Tuple[Path, Path]] = []
    try:
        output_dir.mkdir(parents=True, exist_ok=True)
        for fmt, data in documents.items():
            path = output_dir / build_filename(fmt, metadata.institution_name)
            with tempfile.NamedTemporaryFile(
                mode="wb",
                suffix=f".{fmt}.tmp",
                dir=output_dir,
                delete=False,
            ) as f:
                staged.append((Path(f.name), path))
                f.write(data)
    except OSError as e:
        for temp_path, _ in staged:
            temp_path.unlink(missing_ok=True)
        raise PackagingError(f"Failed to write report: {e}") from e

    artifacts: Dict[str, Path] = {}
    try:
        for fmt, (temp_path, path) in zip(documents, staged):
            temp_path.replace(path)
            artifacts[fmt] = path
    except OSError as e:
        for path in artifacts.values():
            path.unlink(missing_ok=True)
        for temp_path, _ in staged:
            temp_path.unlink(missing_ok=True)
        raise PackagingError(f"Failed to move report into place: {e}") from e

    for path in artifacts.values():
        logger.info(f"Wrote {path}")
    return artifacts


def _build_metadata(
    metadata: ReportMetadata,
    config: ReportConfig,
    result: ReportResult,
    layouts: Dict[str, LayoutResult],
) -> dict:
    """
    Build metadata dictionary for a generated report.

    Returns:
        Metadata dictionary ready for JSON serialization
    """
    return {
        "generated_at": datetime.now().isoformat(),
        "institution_name": metadata.institution_name,
        "process_number": metadata.process_number,
        "date": metadata.date,
        "columns": config.layout.columns,
        "style": config.layout.style.value,
        "figure_numbers": list(result.figure_numbers),
        "skipped": list(result.skipped),
        "elapsed_seconds": round(result.elapsed, 3),
        "warnings": list(result.warnings),
        "artifacts": {
            fmt: {
                "file": result.artifacts[fmt].name,
                "unit": layout.unit,
                "page_count": layout.page_count,
                "pages": [
                    {"page": page.index + 1, "figures": list(page.figure_numbers)}
                    for page in layout.pages
                ],
            }
            for fmt, layout in layouts.items()
        },
    }


def _write_metadata(output_dir: Path, metadata: dict) -> Path:
    """
    Write metadata JSON file to output directory.

    Raises:
        ReportError: If writing fails
    """
    metadata_path = output_dir / METADATA_FILENAME

    try:
        with open(metadata_path, "w", encoding="utf-8") as f:
            json.dump(metadata, f, indent=2, ensure_ascii=False)
        logger.debug(f"Wrote metadata to {metadata_path}")
    except OSError as e:
        raise ReportError(f"Failed to write metadata: {e}") from e
    return metadata_path
