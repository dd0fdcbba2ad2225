"""Format detection by header sniffing and input size policy."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from genomatch.config import FormatLayout, PipelineSettings, SourceFormat, layout_for
from genomatch.errors import FormatSizeMismatchError, UnknownFormatError
from genomatch.parsing import split_lines
from genomatch.sources import InputSource

logger = logging.getLogger(__name__)


# Checked in order; the first marker found in the header line wins.
HEADER_MARKERS: tuple[tuple[str, SourceFormat], ...] = (
    ("generated by 23andMe", SourceFormat.TWENTY_THREE_AND_ME),
    ("==> filename.txt <===", SourceFormat.ANCESTRY),
    ("##fileformat=VCF", SourceFormat.VCF),
)

VCF_EXTENSION = "vcf"


@dataclass(frozen=True)
class DetectedFormat:
    """Result of format resolution for one input."""

    source_format: SourceFormat
    streamed: bool

    @property
    def layout(self) -> FormatLayout:
        return layout_for(self.source_format)

    @property
    def delimiter(self) -> str:
        return self.layout.delimiter


def first_line(sample: str) -> str:
    """Return the first line of a text sample without its line ending."""

    lines = split_lines(sample)
    return lines[0] if lines else ""


def detect_format(header_line: str) -> SourceFormat:
    """Classify an export from its first line.

    Raises ``UnknownFormatError`` when no known marker is present.
    """

    for marker, source_format in HEADER_MARKERS:
        if marker in header_line:
            return source_format

    raise UnknownFormatError("Unable to determine the file type from the header.")


def resolve_format(
    source: InputSource,
    sample: str | None,
    settings: PipelineSettings,
) -> DetectedFormat:
    """Pick the format and access mode for ``source``.

    Inputs at or above ``settings.stream_threshold`` are streamed without
    sniffing and must be VCF files. Smaller inputs are sniffed from ``sample``;
    a ``.vcf`` name is used as a fallback when sniffing finds nothing.
    """

    if source.size >= settings.stream_threshold:
        if source.extension != VCF_EXTENSION:
            raise FormatSizeMismatchError(
                f"Large file {source.name} ({source.size} bytes) is not a vcf file"
            )
        logger.info("Streaming large file %s as VCF", source.name)
        return DetectedFormat(SourceFormat.VCF, streamed=True)

    header = first_line(sample or "")
    try:
        source_format = detect_format(header)
    except UnknownFormatError:
        if source.extension != VCF_EXTENSION:
            raise
        source_format = SourceFormat.VCF

    logger.info("Detected %s data in %s", source_format.value, source.name)
    return DetectedFormat(source_format, streamed=False)
