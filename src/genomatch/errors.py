"""Failure kinds surfaced by a genomatch pipeline run."""

from __future__ import annotations


class PipelineError(Exception):
    """Base class for errors that terminate a run."""

    kind = "PipelineError"


class UnknownFormatError(PipelineError):
    """Header sniffing matched none of the supported export formats."""

    kind = "UnknownFormat"


class FormatSizeMismatchError(PipelineError):
    """Input is too large to buffer and is not a VCF file."""

    kind = "FormatSizeMismatch"


class SourceReadError(PipelineError):
    """The underlying input could not be read."""

    kind = "SourceReadError"


class ChunkProcessingError(PipelineError):
    """Unexpected failure while extracting or matching rows of a chunk."""

    kind = "ChunkProcessingError"

    def __init__(self, message: str, *, chunk_index: int | None = None) -> None:
        super().__init__(message)
        self.chunk_index = chunk_index


class ReferenceTableUnavailableError(PipelineError):
    """Reference data is missing, unreadable or empty."""

    kind = "ReferenceTableUnavailable"
