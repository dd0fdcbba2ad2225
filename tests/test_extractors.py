import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT / "src"))

from genomatch import CanonicalVariant, SourceFormat, extract_batch, extract_variant  # noqa: E402


def test_23andme_row_maps_leading_columns() -> None:
    variant = extract_variant(SourceFormat.TWENTY_THREE_AND_ME, ("rs123", "chr1", 100, "AA"))
    assert variant == CanonicalVariant(rsid="rs123", chromosome="chr1", position="100", genotype="AA")


def test_ancestry_row_maps_leading_columns() -> None:
    variant = extract_variant(SourceFormat.ANCESTRY, ("rs9", 7, 2500, "CT", "extra"))
    assert variant == CanonicalVariant(rsid="rs9", chromosome="7", position="2500", genotype="CT")


def test_vcf_row_maps_id_and_alt_columns() -> None:
    variant = extract_variant(SourceFormat.VCF, (1, 12345, "rs42", "A", "G", 50, "PASS"))
    assert variant == CanonicalVariant(rsid="rs42", chromosome="1", position="12345", genotype="G")


@pytest.mark.parametrize(
    "source_format,row",
    [
        (SourceFormat.TWENTY_THREE_AND_ME, None),
        (SourceFormat.TWENTY_THREE_AND_ME, ()),
        (SourceFormat.TWENTY_THREE_AND_ME, ("rs1", "1", "10")),
        (SourceFormat.TWENTY_THREE_AND_ME, ("# rsid", "chromosome", "position", "genotype")),
        (SourceFormat.ANCESTRY, ("rs1", "1", "10")),
        (SourceFormat.VCF, ("1", "10", "rs1", "A")),
        (SourceFormat.VCF, ("#comment", "x", "x", "x", "x")),
        (SourceFormat.VCF, ("#CHROM", "POS", "ID", "REF", "ALT")),
    ],
)
def test_rows_are_skipped_without_raising(source_format: SourceFormat, row) -> None:
    assert extract_variant(source_format, row) is None


def test_ancestry_has_no_comment_convention() -> None:
    variant = extract_variant(SourceFormat.ANCESTRY, ("#rs1", "1", "10", "AA"))
    assert variant is not None
    assert variant.rsid == "#rs1"


def test_extract_batch_filters_skips_and_leaves_rows_untouched() -> None:
    rows = [
        ["# This data file generated by 23andMe"],
        ["rs1", 1, 10, "AA"],
        [],
        ["rs2", "X", 20, "--"],
    ]
    snapshot = [list(row) for row in rows]

    variants = list(extract_batch(SourceFormat.TWENTY_THREE_AND_ME, rows))

    assert [variant.rsid for variant in variants] == ["rs1", "rs2"]
    assert rows == snapshot
