"""Core genomatch pipeline primitives.

This package streams consumer genotype exports (23andMe, AncestryDNA, VCF),
matches each variant against a reference table of annotated rsids and groups
the matches by phenotype for report publishers.
"""

from .config import FORMAT_LAYOUTS, FormatLayout, PipelineSettings, SourceFormat
from .detection import DetectedFormat, detect_format, resolve_format
from .errors import (
    ChunkProcessingError,
    FormatSizeMismatchError,
    PipelineError,
    ReferenceTableUnavailableError,
    SourceReadError,
    UnknownFormatError,
)
from .extractors import extract_batch, extract_variant
from .grouping import flatten_groups, group_by_phenotype
from .matching import MatchAccumulator, VariantMatcher, match_variant, normalize_annotation
from .models import CanonicalVariant, MatchedRecord, ProgressState, ReferenceEntry
from .parsing import RowBatch, iter_row_batches
from .pipeline import GenotypeReportPipeline, PipelineRunReport, RunStatus
from .reference import ReferenceTable
from .sources import InputSource

__all__ = [
    "CanonicalVariant",
    "ChunkProcessingError",
    "DetectedFormat",
    "FORMAT_LAYOUTS",
    "FormatLayout",
    "FormatSizeMismatchError",
    "GenotypeReportPipeline",
    "InputSource",
    "MatchAccumulator",
    "MatchedRecord",
    "PipelineError",
    "PipelineRunReport",
    "PipelineSettings",
    "ProgressState",
    "ReferenceEntry",
    "ReferenceTable",
    "ReferenceTableUnavailableError",
    "RowBatch",
    "RunStatus",
    "SourceFormat",
    "SourceReadError",
    "UnknownFormatError",
    "VariantMatcher",
    "detect_format",
    "extract_batch",
    "extract_variant",
    "flatten_groups",
    "group_by_phenotype",
    "iter_row_batches",
    "match_variant",
    "normalize_annotation",
    "resolve_format",
]
