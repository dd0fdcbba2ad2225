"""Per-format extraction of canonical variants from raw rows."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence

from genomatch.config import FormatLayout, SourceFormat, layout_for
from genomatch.models import CanonicalVariant, RawField


def _is_comment(field: RawField, layout: FormatLayout) -> bool:
    return isinstance(field, str) and field.startswith(layout.comment_marker)


def extract_with_layout(
    layout: FormatLayout,
    row: Sequence[RawField] | None,
) -> CanonicalVariant | None:
    """Map one row through ``layout``; ``None`` means the row is skipped."""

    if not row or len(row) < layout.min_fields:
        return None

    if layout.skip_comments and _is_comment(row[0], layout):
        return None

    return CanonicalVariant(
        rsid=str(row[layout.rsid_index]),
        chromosome=str(row[layout.chromosome_index]),
        position=str(row[layout.position_index]),
        genotype=str(row[layout.genotype_index]),
    )


def extract_variant(
    source_format: SourceFormat,
    row: Sequence[RawField] | None,
) -> CanonicalVariant | None:
    """Extract a canonical variant from a row of the given format."""

    return extract_with_layout(layout_for(source_format), row)


def extract_batch(
    source_format: SourceFormat,
    rows: Iterable[Sequence[RawField] | None],
) -> Iterator[CanonicalVariant]:
    """Yield variants for every non-skipped row."""

    layout = layout_for(source_format)
    for row in rows:
        variant = extract_with_layout(layout, row)
        if variant is not None:
            yield variant
