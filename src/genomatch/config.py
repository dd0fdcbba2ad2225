"""Format layouts and runtime settings for genomatch pipelines."""

from __future__ import annotations

import json
from dataclasses import dataclass, fields
from enum import Enum
from pathlib import Path
from typing import Any, Mapping


class SourceFormat(str, Enum):
    """Consumer genotype export formats understood by the pipeline."""

    TWENTY_THREE_AND_ME = "23andme"
    ANCESTRY = "ancestry"
    VCF = "vcf"


@dataclass(frozen=True)
class FormatLayout:
    """Positional layout of one export format.

    Indices are 0-based source columns feeding the canonical variant fields.
    """

    delimiter: str
    min_fields: int
    rsid_index: int
    chromosome_index: int
    position_index: int
    genotype_index: int
    skip_comments: bool = True
    comment_marker: str = "#"


FORMAT_LAYOUTS: Mapping[SourceFormat, FormatLayout] = {
    SourceFormat.TWENTY_THREE_AND_ME: FormatLayout(
        delimiter="\t",
        min_fields=4,
        rsid_index=0,
        chromosome_index=1,
        position_index=2,
        genotype_index=3,
    ),
    SourceFormat.ANCESTRY: FormatLayout(
        delimiter=",",
        min_fields=4,
        rsid_index=0,
        chromosome_index=1,
        position_index=2,
        genotype_index=3,
        skip_comments=False,
    ),
    SourceFormat.VCF: FormatLayout(
        delimiter="\t",
        min_fields=5,
        rsid_index=2,
        chromosome_index=0,
        position_index=1,
        genotype_index=4,
    ),
}


def layout_for(source_format: SourceFormat) -> FormatLayout:
    """Return the layout registered for a format."""

    return FORMAT_LAYOUTS[SourceFormat(source_format)]


DEFAULT_CHUNK_SIZE = 50 * 1024
DEFAULT_STREAM_THRESHOLD = 100 * 1024 * 1024
DEFAULT_MAX_LINE_BYTES = 1024 * 1024


@dataclass(frozen=True)
class PipelineSettings:
    """Tunables for one pipeline instance.

    ``stream_threshold`` is the input size at which the file is streamed
    instead of buffered; only VCF inputs are accepted at that size.
    ``max_line_bytes`` bounds a single unterminated line held between reads.
    """

    chunk_size: int = DEFAULT_CHUNK_SIZE
    stream_threshold: int = DEFAULT_STREAM_THRESHOLD
    max_line_bytes: int = DEFAULT_MAX_LINE_BYTES
    encoding: str = "utf-8"

    def __post_init__(self) -> None:
        if self.chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {self.chunk_size}")
        if self.stream_threshold <= 0:
            raise ValueError(
                f"stream_threshold must be positive, got {self.stream_threshold}"
            )
        if self.max_line_bytes <= 0:
            raise ValueError(f"max_line_bytes must be positive, got {self.max_line_bytes}")
        if not self.encoding:
            raise ValueError("encoding cannot be empty")

    def merged(self, overrides: Mapping[str, Any] | None = None) -> "PipelineSettings":
        """Return a copy with non-null overrides applied."""

        values = {item.name: getattr(self, item.name) for item in fields(self)}
        for key, value in (overrides or {}).items():
            if value is None:
                continue
            if key not in values:
                raise ValueError(f"Unknown setting: {key}")
            values[key] = value
        return PipelineSettings(**values)

    @classmethod
    def from_json(cls, json_path: str | Path) -> "PipelineSettings":
        """Build settings from a JSON file.

        Expected format: ``{"chunk_size": 51200, "stream_threshold": 104857600}``.
        Missing keys keep their defaults.
        """

        payload = json.loads(Path(json_path).read_text())
        if not isinstance(payload, dict):
            raise ValueError(f"Settings file must contain a JSON object: {json_path}")
        return cls().merged(payload)
