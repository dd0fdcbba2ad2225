"""Reference lookup and chunk-by-chunk accumulation of matched variants."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from itertools import chain

from genomatch.config import SourceFormat, layout_for
from genomatch.errors import ChunkProcessingError
from genomatch.extractors import extract_with_layout
from genomatch.models import CanonicalVariant, MatchedRecord, RawField, ReferenceEntry
from genomatch.parsing import RowBatch

logger = logging.getLogger(__name__)

ResultSet = tuple[MatchedRecord, ...]


@dataclass(frozen=True, eq=False, repr=False)
class MatchAccumulator:
    """Immutable fold state: the records of each folded batch, newest first.

    Extending links a new node onto the previous state instead of copying it,
    so folding stays linear in the number of matches.
    """

    records: ResultSet = ()
    previous: MatchAccumulator | None = None
    count: int = 0

    def extended(self, records: ResultSet) -> MatchAccumulator:
        if not records:
            return self
        return MatchAccumulator(records, self, self.count + len(records))

    def to_result_set(self) -> ResultSet:
        """Flatten into one tuple in discovery order."""

        parts: list[ResultSet] = []
        node: MatchAccumulator | None = self
        while node is not None:
            parts.append(node.records)
            node = node.previous
        return tuple(chain.from_iterable(reversed(parts)))

    def __len__(self) -> int:
        return self.count


def normalize_annotation(value: str | None) -> str:
    """Return annotation text, mapping a missing value to ``""``."""

    return "" if value is None else str(value)


def match_variant(
    variant: CanonicalVariant,
    reference: Mapping[str, ReferenceEntry],
) -> MatchedRecord | None:
    """Merge the reference annotation into ``variant`` when its rsid is known."""

    entry = reference.get(variant.rsid)
    if entry is None:
        return None

    return MatchedRecord(
        rsid=variant.rsid,
        chromosome=variant.chromosome,
        position=variant.position,
        genotype=variant.genotype,
        phenotype=normalize_annotation(entry.phenotype),
        broken_genotype=normalize_annotation(entry.broken_genotype),
        gene=normalize_annotation(entry.gene),
    )


@dataclass(frozen=True)
class BatchMatch:
    """Outcome of matching the rows of one batch."""

    records: ResultSet
    rows: int
    variants: int


class VariantMatcher:
    """Extract and match rows of one source format against a reference table."""

    def __init__(
        self,
        reference: Mapping[str, ReferenceEntry],
        source_format: SourceFormat,
    ) -> None:
        self.reference = reference
        self.source_format = SourceFormat(source_format)
        self.layout = layout_for(self.source_format)

    def match_rows(self, rows: Iterable[Sequence[RawField] | None]) -> BatchMatch:
        found: list[MatchedRecord] = []
        row_count = 0
        variant_count = 0

        for row in rows:
            row_count += 1
            variant = extract_with_layout(self.layout, row)
            if variant is None:
                continue
            variant_count += 1
            record = match_variant(variant, self.reference)
            if record is not None:
                found.append(record)

        return BatchMatch(records=tuple(found), rows=row_count, variants=variant_count)

    def fold(
        self,
        results: MatchAccumulator,
        batch: RowBatch,
    ) -> tuple[MatchAccumulator, BatchMatch]:
        """Return ``results`` extended with the matches of ``batch``.

        ``results`` itself is left unchanged. Any unexpected failure is raised as ``ChunkProcessingError``; the
        caller then stops folding.
        """

        try:
            matched = self.match_rows(batch.rows)
        except Exception as exc:
            logger.error("Error while parsing chunk %d: %s", batch.index, exc)
            raise ChunkProcessingError(
                f"Error while parsing chunk {batch.index}: {exc}",
                chunk_index=batch.index,
            ) from exc

        logger.debug(
            "Chunk %d: %d rows, %d variants, %d matches",
            batch.index,
            matched.rows,
            matched.variants,
            len(matched.records),
        )
        return results.extended(matched.records), matched
