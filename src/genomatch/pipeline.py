"""Streaming genotype report pipeline orchestrator."""

from __future__ import annotations

import asyncio
import io
import logging
from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, BinaryIO, Protocol

from genomatch.config import PipelineSettings, SourceFormat
from genomatch.detection import DetectedFormat, resolve_format
from genomatch.errors import PipelineError
from genomatch.grouping import GroupedRecords, group_by_phenotype
from genomatch.matching import MatchAccumulator, VariantMatcher
from genomatch.models import ProgressState, ReferenceEntry
from genomatch.parsing import iter_row_batches
from genomatch.publishers.base import Publisher
from genomatch.reference import ensure_available
from genomatch.sources import InputSource

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[float], None]
ErrorCallback = Callable[[PipelineError], None]

# Bytes of a buffered input inspected for the header marker.
SNIFF_BYTES = 4096


class CancelSignal(Protocol):
    def is_set(self) -> bool: ...


class RunStatus(str, Enum):
    """Terminal state of a pipeline run."""

    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


@dataclass
class PipelineRunReport:
    """Execution summary for one run."""

    source_name: str
    status: RunStatus = RunStatus.FAILED
    source_format: SourceFormat | None = None
    streamed: bool = False
    chunks: int = 0
    rows_read: int = 0
    variants_extracted: int = 0
    matched_records: int = 0
    groups: GroupedRecords = field(default_factory=dict)
    error: PipelineError | None = None

    @property
    def ok(self) -> bool:
        return self.status is RunStatus.COMPLETED

    def raise_for_status(self) -> None:
        """Re-raise the error that terminated the run, if any."""

        if self.error is not None:
            raise self.error

    def summary(self) -> dict[str, Any]:
        return {
            "source": self.source_name,
            "status": self.status.value,
            "format": self.source_format.value if self.source_format else None,
            "streamed": self.streamed,
            "chunks": self.chunks,
            "rows_read": self.rows_read,
            "variants_extracted": self.variants_extracted,
            "matched_records": self.matched_records,
            "phenotypes": len(self.groups),
            "error": (
                None
                if self.error is None
                else {"kind": self.error.kind, "message": str(self.error)}
            ),
        }


@dataclass
class _RunState:
    report: PipelineRunReport
    progress: ProgressState = field(default_factory=ProgressState)
    results: MatchAccumulator = field(default_factory=MatchAccumulator)
    last_percent: float = -1.0


class GenotypeReportPipeline:
    """Detect, stream, match and group one genotype export per run.

    Chunks are folded strictly in input order. Progress, error and rendering
    consumers are plain callbacks and ``Publisher`` instances; the pipeline
    holds no presentation state.
    """

    def __init__(
        self,
        *,
        reference: Mapping[str, ReferenceEntry],
        settings: PipelineSettings | None = None,
        publishers: list[Publisher] | None = None,
        on_progress: ProgressCallback | None = None,
        on_error: ErrorCallback | None = None,
    ) -> None:
        self.reference = reference
        self.settings = settings or PipelineSettings()
        self.publishers = publishers or []
        self.on_progress = on_progress
        self.on_error = on_error
        self._active = False

    def run(
        self,
        source: InputSource,
        *,
        cancel_event: CancelSignal | None = None,
    ) -> PipelineRunReport:
        state = self._begin(source)
        steps = self._execute(source, state, cancel_event)
        try:
            for _ in steps:
                pass
            return self._finish(state)
        finally:
            steps.close()
            self._active = False

    async def run_async(
        self,
        source: InputSource,
        *,
        cancel_event: CancelSignal | None = None,
    ) -> PipelineRunReport:
        """Same as ``run`` but yields to the event loop after every chunk."""

        state = self._begin(source)
        steps = self._execute(source, state, cancel_event)
        try:
            for _ in steps:
                await asyncio.sleep(0)
            return self._finish(state)
        finally:
            steps.close()
            self._active = False

    def _begin(self, source: InputSource) -> _RunState:
        if self._active:
            raise RuntimeError("A pipeline run is already in progress")
        self._active = True
        logger.info("Processing %s (%d bytes)", source.name, source.size)
        return _RunState(report=PipelineRunReport(source_name=source.name))

    def _execute(
        self,
        source: InputSource,
        state: _RunState,
        cancel_event: CancelSignal | None,
    ) -> Iterator[None]:
        report = state.report
        try:
            ensure_available(self.reference)
            detected, opener, total = self._prepare(source)
            report.source_format = detected.source_format
            report.streamed = detected.streamed
            state.progress = ProgressState(total=total)
            self._emit_progress(state, 0.0)

            matcher = VariantMatcher(self.reference, detected.source_format)
            with opener() as stream:
                batches = iter_row_batches(
                    stream,
                    detected.delimiter,
                    chunk_size=self.settings.chunk_size,
                    encoding=self.settings.encoding,
                    max_line_bytes=self.settings.max_line_bytes,
                )
                for batch in batches:
                    state.results, matched = matcher.fold(state.results, batch)
                    report.chunks += 1
                    report.rows_read += matched.rows
                    report.variants_extracted += matched.variants

                    state.progress.advance_to(batch.bytes_consumed)
                    if state.progress.percent is not None:
                        self._emit_progress(state, state.progress.percent)

                    yield

                    if cancel_event is not None and cancel_event.is_set():
                        logger.info("Run for %s cancelled after %d chunks", source.name, report.chunks)
                        report.status = RunStatus.CANCELLED
                        return
        except PipelineError as exc:
            logger.error("Run for %s failed: %s: %s", source.name, exc.kind, exc)
            report.status = RunStatus.FAILED
            report.error = exc
            return

        report.status = RunStatus.COMPLETED

    def _prepare(
        self,
        source: InputSource,
    ) -> tuple[DetectedFormat, Callable[[], BinaryIO], int]:
        if source.size >= self.settings.stream_threshold:
            detected = resolve_format(source, None, self.settings)
            return detected, source.open, source.size

        payload = source.read_all()
        sample = payload[:SNIFF_BYTES].decode(self.settings.encoding, errors="replace")
        detected = resolve_format(source, sample, self.settings)
        return detected, lambda: io.BytesIO(payload), len(payload)

    def _emit_progress(self, state: _RunState, percent: float) -> None:
        if percent < state.last_percent:
            return
        state.last_percent = percent
        if self.on_progress is not None:
            self.on_progress(percent)

    def _finish(self, state: _RunState) -> PipelineRunReport:
        report = state.report

        if report.status is RunStatus.FAILED:
            if self.on_error is not None and report.error is not None:
                self.on_error(report.error)
            return report

        if report.status is RunStatus.CANCELLED:
            return report

        results = state.results.to_result_set()
        report.groups = group_by_phenotype(results)
        report.matched_records = len(results)
        self._emit_progress(state, 100.0)
        logger.info(
            "Matched %d of %d variants in %s across %d phenotypes",
            report.matched_records,
            report.variants_extracted,
            report.source_name,
            len(report.groups),
        )

        for publisher in self.publishers:
            publisher.publish(report.groups)

        return report
